"""
Event logger utility for authentication events.
"""
import logging
from typing import Optional

from fastapi import Request

logger = logging.getLogger(__name__)


ALLOWED_EVENT_TYPES = {
    "login_success",
    "login_failure",
    "token_missing",
    "token_invalid",
}


def client_ip(request: Request) -> Optional[str]:
    """Client address, falling back to the first X-Forwarded-For entry."""
    if request.client and request.client.host:
        return request.client.host

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()
    return None


def log_auth_event(
    event_type: str,
    request: Request,
    user_id: Optional[int] = None,
    email: Optional[str] = None,
    reason: Optional[str] = None,
) -> None:
    """
    Log an authentication event.

    Args:
        event_type: One of: login_success, login_failure, token_missing,
                    token_invalid
        request: FastAPI Request object
        user_id: Authenticated or matched user, if known
        email: Email the client submitted, if any
        reason: Short machine-readable cause for failures

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    level = logging.INFO if event_type == "login_success" else logging.WARNING
    logger.log(
        level,
        "AUTH %s user_id=%s email=%s ip=%s path=%s reason=%s",
        event_type,
        user_id,
        email,
        client_ip(request),
        request.url.path,
        reason,
    )
