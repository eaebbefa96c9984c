"""
Configuration management for the social service
"""
import logging
from datetime import timedelta
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Only ever used outside production, see Settings.signing_secret()
INSECURE_DEFAULT_SECRET = "change-this-secret-in-prod-not-for-real-use"
DEFAULT_DATABASE_URL = "sqlite:///./social.db"


class Settings(BaseSettings):
    """Service configuration loaded from environment variables"""

    # Server Configuration
    PORT: int = 3000
    HOST: str = "0.0.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # Database Configuration
    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # Token Configuration
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    # Uploads
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PATH: str = "/uploads"

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in ("production", "prod")

    def signing_secret(self) -> str:
        """
        Return the token signing secret.

        Falls back to ``INSECURE_DEFAULT_SECRET`` outside production.

        Raises:
            ConfigurationError: If JWT_SECRET is unset in production
        """
        if self.JWT_SECRET:
            return self.JWT_SECRET
        if self.is_production:
            raise ConfigurationError("JWT_SECRET must be set in production")
        return INSECURE_DEFAULT_SECRET

    def token_lifetime(self) -> timedelta:
        return timedelta(days=self.ACCESS_TOKEN_EXPIRE_DAYS)

    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.is_production:
            raise ConfigurationError("DATABASE_URL must be set in production")
        return DEFAULT_DATABASE_URL

    def validate_for_startup(self) -> None:
        """
        Check required settings once, before the app is built.

        Logs whether each setting was loaded (never its value) and warns
        about every insecure fallback in use.
        """
        self.signing_secret()
        self.database_url()

        if self.DATABASE_URL:
            logger.info("DATABASE_URL: loaded (hidden)")
        else:
            logger.warning("DATABASE_URL missing, using %s", DEFAULT_DATABASE_URL)

        if not self.JWT_SECRET:
            logger.warning(
                "JWT_SECRET missing, signing tokens with the insecure default secret "
                "(ENVIRONMENT=%s). Never run like this in production.",
                self.ENVIRONMENT,
            )


@lru_cache
def get_settings() -> Settings:
    return Settings()
