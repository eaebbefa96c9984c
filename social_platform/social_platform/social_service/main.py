import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import Depends, FastAPI, File, Form, Request, UploadFile, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .auth import TokenIdentity, create_access_token, dummy_verify, get_current_identity, verify_password
from .config import Settings, get_settings
from .db import build_engine, build_session_factory, get_db, init_db
from .errors import CredentialError, ServiceError, StoreError, ValidationError
from .models import Post, User
from .routes import health
from .schemas import LoginRequest, LoginResponse, PostResponse, PostWithAuthor, UserPublic
from .storage import UploadStorage
from .utils.event_logger import log_auth_event

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    # basicConfig is a no-op once the root logger has handlers
    if logging.getLogger().handlers:
        return

    handlers = [logging.StreamHandler(sys.stdout)]

    # Try to add file handler, but continue without it if directory creation fails
    if settings.LOG_DIR:
        try:
            os.makedirs(settings.LOG_DIR, exist_ok=True)
            handlers.append(logging.FileHandler(os.path.join(settings.LOG_DIR, "social_service.log")))
        except OSError as e:
            print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def get_storage(request: Request) -> UploadStorage:
    return request.app.state.storage


# ---------------- Exception handlers ----------------

async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = ValidationError("Invalid request body", details=jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# ---------------- Handlers ----------------

def login(credentials: LoginRequest, request: Request, db: Session = Depends(get_db)):
    settings: Settings = request.app.state.settings
    try:
        user = db.query(User).filter(User.email == credentials.email).one_or_none()
    except SQLAlchemyError as e:
        raise StoreError(f"Database error: {e}") from e

    if user is None:
        dummy_verify()
        log_auth_event("login_failure", request, email=credentials.email, reason="unknown_email")
        raise CredentialError()
    if not verify_password(credentials.password, user.password):
        log_auth_event("login_failure", request, user_id=user.id, email=credentials.email, reason="bad_password")
        raise CredentialError()

    token = create_access_token(
        user.id,
        user.username,
        settings.signing_secret(),
        algorithm=settings.JWT_ALGORITHM,
        expires_delta=settings.token_lifetime(),
    )
    log_auth_event("login_success", request, user_id=user.id, email=user.email)
    return LoginResponse(user=UserPublic.model_validate(user), token=token)


def list_posts(db: Session = Depends(get_db)):
    try:
        rows = (
            db.query(Post, User.username)
            .join(User, Post.user_id == User.id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise StoreError(f"Database error: {e}") from e

    return [
        PostWithAuthor(
            id=post.id,
            user_id=post.user_id,
            username=username,
            content=post.content,
            image_url=post.image_url,
            created_at=post.created_at,
        )
        for post, username in rows
    ]


def create_post(
    content: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    identity: TokenIdentity = Depends(get_current_identity),
    storage: UploadStorage = Depends(get_storage),
    db: Session = Depends(get_db),
):
    # The owner always comes from the verified token, never from the form
    if content is None or not content.strip():
        raise ValidationError("Content is required")

    image_url = None
    if image is not None and image.filename:
        image_url = storage.save(image)

    post = Post(user_id=identity.id, content=content, image_url=image_url)
    try:
        db.add(post)
        db.commit()
        db.refresh(post)
    except SQLAlchemyError as e:
        db.rollback()
        storage.delete(image_url)
        raise StoreError(f"Database error: {e}") from e

    logger.info("Post created: post_id=%s user_id=%s image=%s", post.id, post.user_id, bool(image_url))
    return post


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application around one ``Settings`` instance.

    The settings, engine, session factory and upload store live on
    ``app.state``; handlers reach them through their dependencies.
    """
    settings = settings or get_settings()
    configure_logging(settings)
    settings.validate_for_startup()

    engine = build_engine(settings)
    storage = UploadStorage(settings.UPLOAD_DIR, settings.UPLOAD_URL_PATH)
    storage.ensure_directory()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        init_db(engine)
        logger.info("Social service ready (environment=%s)", settings.ENVIRONMENT)
        yield
        engine.dispose()

    app = FastAPI(
        title="Social Service",
        description="Posts, images and token-based login",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health.router)
    app.add_api_route("/login", login, methods=["POST"], response_model=LoginResponse)
    app.add_api_route("/posts", list_posts, methods=["GET"], response_model=List[PostWithAuthor])
    app.add_api_route(
        "/posts",
        create_post,
        methods=["POST"],
        response_model=PostResponse,
        status_code=status.HTTP_201_CREATED,
    )
    app.mount(storage.url_path, StaticFiles(directory=storage.directory), name="uploads")

    return app


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(create_app(_settings), host=_settings.HOST, port=_settings.PORT)
