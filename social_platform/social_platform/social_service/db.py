"""
Database engine and session management for the social service
"""
import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_conn, _):
    cur = dbapi_conn.cursor()
    try:
        cur.execute("PRAGMA foreign_keys=ON;")
    finally:
        cur.close()


def build_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine described by ``settings``.

    SQLite connections get foreign keys switched on so posts cannot
    reference a missing user. Server databases get a bounded pool.
    """
    url = settings.database_url()
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        echo=settings.LOG_LEVEL.upper() == "DEBUG",
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_db(engine: Engine) -> None:
    """Create all tables. Called on application startup."""
    # Import models to ensure they are registered with Base
    from .models import Post, User  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized successfully")


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency function to get a database session bound to the app's engine.

    Yields:
        Session: SQLAlchemy database session
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def store_time(db: Session) -> str:
    """Return the store's current time as a string."""
    value = db.execute(text("SELECT CURRENT_TIMESTAMP")).scalar()
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def check_db_connection(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("Database connection check failed: %s", e)
        return False
