import pytest
from fastapi.testclient import TestClient

from social_platform.social_platform.social_service.auth import create_access_token
from social_platform.social_platform.social_service.cli import create_user
from social_platform.social_platform.social_service.config import Settings
from social_platform.social_platform.social_service.main import create_app

TEST_SECRET = "test-signing-secret-that-is-long-enough-for-hs256"
DEFAULT_PASSWORD = "Secret123!"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        DATABASE_URL=f"sqlite:///{tmp_path / 'social_test.db'}",
        JWT_SECRET=TEST_SECRET,
        UPLOAD_DIR=str(tmp_path / "uploads"),
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # Entering the client runs the lifespan, which creates the tables
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app, client):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(username="alice", email="alice@example.com", password=DEFAULT_PASSWORD):
        return create_user(db, username, email, password)

    return _make


@pytest.fixture
def auth_header_for():
    def _header(user_id, username):
        token = create_access_token(user_id, username, TEST_SECRET)
        return {"Authorization": f"Bearer {token}"}

    return _header
