"""
Error taxonomy for the social service.

Every error a handler can raise carries the HTTP status it maps to.
``create_app`` registers one handler for ``ServiceError`` that renders
``{"error": message}`` so nothing escapes as an unhandled 500.
"""
from typing import Any, Optional

from fastapi import status


class ServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class MissingTokenError(AuthenticationError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access token required"


class InvalidTokenError(AuthenticationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid or expired token"


class CredentialError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class StoreError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Database error"


class ConfigurationError(Exception):
    """Raised at startup when required settings are missing."""
