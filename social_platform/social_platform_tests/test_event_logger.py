"""
Unit tests for event logger utility.
"""
import logging
from unittest.mock import Mock

import pytest

from social_platform.social_platform.social_service.utils.event_logger import client_ip, log_auth_event


@pytest.fixture
def mock_request():
    """Create a mock FastAPI Request object."""
    request = Mock()
    request.client = Mock()
    request.client.host = "192.168.1.100"
    request.headers = {"user-agent": "Mozilla/5.0 Test Browser"}
    request.url.path = "/login"
    return request


def test_invalid_event_type_raises(mock_request):
    with pytest.raises(ValueError) as exc_info:
        log_auth_event("invalid_event", mock_request)
    assert "Invalid event_type" in str(exc_info.value)


def test_client_ip_from_connection(mock_request):
    assert client_ip(mock_request) == "192.168.1.100"


def test_client_ip_falls_back_to_forwarded_header(mock_request):
    mock_request.client = None
    mock_request.headers = {"x-forwarded-for": "203.0.113.5, 10.0.0.1"}
    assert client_ip(mock_request) == "203.0.113.5"


def test_client_ip_unknown(mock_request):
    mock_request.client = None
    mock_request.headers = {}
    assert client_ip(mock_request) is None


def test_failure_events_log_at_warning(mock_request, caplog):
    caplog.set_level(logging.INFO)

    log_auth_event("login_failure", mock_request, email="a@example.com", reason="unknown_email")
    log_auth_event("login_success", mock_request, user_id=3, email="a@example.com")

    failure, success = [r for r in caplog.records if r.getMessage().startswith("AUTH ")]
    assert failure.levelno == logging.WARNING
    assert "reason=unknown_email" in failure.getMessage()
    assert "ip=192.168.1.100" in failure.getMessage()
    assert success.levelno == logging.INFO
    assert "user_id=3" in success.getMessage()
