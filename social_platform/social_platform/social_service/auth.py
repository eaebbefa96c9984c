from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Header, Request
from passlib.context import CryptContext

from .errors import InvalidTokenError, MissingTokenError
from .utils.event_logger import log_auth_event

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = 7

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class TokenIdentity:
    id: int
    username: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Unrecognised or empty digest
        return False


def dummy_verify() -> None:
    """Spend the same time as a real verify when there is no user to check."""
    pwd_context.dummy_verify()


def create_access_token(
    user_id: int,
    username: str,
    secret: str,
    algorithm: str = ALGORITHM,
    expires_delta: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS))
    payload = {"id": user_id, "username": username, "iat": now, "exp": expire}
    return jwt.encode(payload, secret, algorithm=algorithm)


def verify_access_token(token: Optional[str], secret: str, algorithm: str = ALGORITHM) -> TokenIdentity:
    """
    Verify a token's signature and expiry and return the identity it carries.

    Raises:
        MissingTokenError: If no token was supplied
        InvalidTokenError: If the token is malformed, forged, expired or
            lacks the identity claims
    """
    if not token:
        raise MissingTokenError()

    try:
        data = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "id", "username"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise InvalidTokenError("Token has expired") from exc
    except jwt.PyJWTError as exc:
        raise InvalidTokenError() from exc

    user_id = data.get("id")
    username = data.get("username")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(username, str):
        raise InvalidTokenError()
    return TokenIdentity(id=user_id, username=username)


def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> TokenIdentity:
    """
    Resolve the caller from the ``Authorization: Bearer <token>`` header.

    A missing header is rejected before any parsing happens. The identity
    comes from the token alone; the database is not consulted.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        log_auth_event("token_missing", request)
        raise MissingTokenError()
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        log_auth_event("token_missing", request)
        raise MissingTokenError()

    settings = request.app.state.settings
    try:
        return verify_access_token(token, settings.signing_secret(), settings.JWT_ALGORITHM)
    except InvalidTokenError as exc:
        log_auth_event("token_invalid", request, reason=exc.message)
        raise
