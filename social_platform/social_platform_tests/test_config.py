"""Tests for settings resolution and startup validation."""
import logging
from datetime import timedelta

import pytest

from social_platform.social_platform.social_service.config import (
    DEFAULT_DATABASE_URL,
    INSECURE_DEFAULT_SECRET,
    Settings,
)
from social_platform.social_platform.social_service.errors import ConfigurationError
from social_platform.social_platform.social_service.main import configure_logging, create_app


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("JWT_SECRET", "DATABASE_URL", "ENVIRONMENT", "PORT", "ACCESS_TOKEN_EXPIRE_DAYS"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.PORT == 3000
    assert settings.JWT_ALGORITHM == "HS256"
    assert settings.token_lifetime() == timedelta(days=7)
    assert settings.is_production is False


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("JWT_SECRET", "from-the-environment")
    settings = Settings(_env_file=None)
    assert settings.PORT == 8080
    assert settings.signing_secret() == "from-the-environment"


def test_insecure_fallbacks_outside_production():
    settings = Settings(_env_file=None, ENVIRONMENT="development")
    assert settings.signing_secret() == INSECURE_DEFAULT_SECRET
    assert settings.database_url() == DEFAULT_DATABASE_URL


def test_production_requires_secret():
    settings = Settings(_env_file=None, ENVIRONMENT="production", DATABASE_URL="sqlite:///./prod.db")
    with pytest.raises(ConfigurationError, match="JWT_SECRET"):
        settings.signing_secret()
    with pytest.raises(ConfigurationError):
        settings.validate_for_startup()


def test_production_requires_database_url():
    settings = Settings(_env_file=None, ENVIRONMENT="production", JWT_SECRET="prod-secret")
    with pytest.raises(ConfigurationError, match="DATABASE_URL"):
        settings.database_url()


def test_production_with_everything_set():
    settings = Settings(
        _env_file=None,
        ENVIRONMENT="production",
        JWT_SECRET="prod-secret",
        DATABASE_URL="sqlite:///./prod.db",
    )
    settings.validate_for_startup()
    assert settings.signing_secret() == "prod-secret"


def test_create_app_refuses_production_without_secret(tmp_path):
    settings = Settings(
        _env_file=None,
        ENVIRONMENT="production",
        DATABASE_URL=f"sqlite:///{tmp_path / 'prod.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
    )
    with pytest.raises(ConfigurationError):
        create_app(settings)


def test_missing_secret_logs_warning(caplog):
    settings = Settings(_env_file=None, ENVIRONMENT="development")
    settings.validate_for_startup()
    assert any("insecure default secret" in r.getMessage() for r in caplog.records)


def test_configure_logging_keeps_existing_handlers(tmp_path):
    root = logging.getLogger()
    marker = logging.NullHandler()
    root.addHandler(marker)
    before = list(root.handlers)
    try:
        configure_logging(Settings(_env_file=None, LOG_DIR=str(tmp_path / "logs")))
        assert root.handlers == before
        # No file handler was opened, so the log directory was never created
        assert not (tmp_path / "logs").exists()
    finally:
        root.removeHandler(marker)
