"""Tests for the audit logging framework."""

import json
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog

from credstore.audit import EventType, audit_event, get_logger, reset_logger, setup_logging
from credstore.audit.logger import (
    LOG_FILE_NAME,
    create_secure_handler,
    get_log_dir,
    sanitize_keys,
)


def read_events(log_dir: Path) -> list[dict]:
    lines = (log_dir / LOG_FILE_NAME).read_text().splitlines()
    return [json.loads(line) for line in lines if line.strip()]


def test_get_log_dir_default(tmp_path, monkeypatch):
    """Default log directory lives under the home directory."""
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    assert get_log_dir() == (tmp_path / ".local" / "log").resolve()


def test_get_log_dir_custom():
    """Custom directories are resolved."""
    assert get_log_dir("/test/custom/log") == Path("/test/custom/log").resolve()


@pytest.mark.skipif(sys.platform == "win32",
                    reason="POSIX permissions not supported on Windows")
def test_secure_handler_permissions(tmp_path: Path):
    """Log files are created with 0640 permissions."""
    log_file = tmp_path / "nested" / "test.log"
    handler = create_secure_handler(log_file, 1024, 2)
    try:
        assert log_file.exists()
        assert oct(os.stat(log_file).st_mode & 0o777).endswith("640")
    finally:
        handler.close()


def test_sanitize_keys_nested_and_case_insensitive():
    """Sensitive keys are masked at any depth and in any case."""
    sanitized = sanitize_keys(
        {
            "Password": "pw1",
            "user": "alice",
            "nested": {"TOKEN": "abc", "permissions": ["view"]},
            "items": [{"secret": "s"}],
        },
        {"password", "token", "secret"},
    )
    assert sanitized["Password"] == "***"
    assert sanitized["user"] == "alice"
    assert sanitized["nested"] == {"TOKEN": "***", "permissions": ["view"]}
    assert sanitized["items"] == [{"secret": "***"}]


def test_audit_event_sanitizes_details():
    """Sensitive detail keys are masked before binding."""
    with patch("credstore.audit.logger.get_logger") as mock_logger:
        bound = mock_logger.return_value.bind.return_value

        audit_event(
            event_type=EventType.USER_CREATE,
            user="alice",
            success=True,
            details={"password": "pw1", "permissions": ["view"]},
        )

        _, kwargs = mock_logger.return_value.bind.call_args
        assert kwargs["event_type"] == "user.create"
        assert kwargs["user"] == "alice"
        assert kwargs["details"] == {"password": "***", "permissions": ["view"]}
        assert kwargs["caller"]["function"] == "test_audit_event_sanitizes_details"
        bound.info.assert_called_once_with("audit_event")


def test_audit_event_failure_logs_warning():
    """Failed operations are logged at warning level with the error."""
    with patch("credstore.audit.logger.get_logger") as mock_logger:
        bound = mock_logger.return_value.bind.return_value

        audit_event(
            event_type=EventType.AUTH_LOGIN,
            user="alice",
            success=False,
            error=ValueError("bad input"),
        )

        _, kwargs = mock_logger.return_value.bind.call_args
        assert kwargs["error"] == {"type": "ValueError", "message": "bad input"}
        bound.warning.assert_called_once_with("audit_event")
        bound.info.assert_not_called()


def test_audit_event_written_as_json(log_dir: Path):
    """Audit events land in the log file as JSON lines."""
    audit_event(
        event_type=EventType.AUTH_AUTHORIZE,
        user="alice",
        success=True,
        details={"action": "edit", "secret": "hidden"},
    )

    events = [e for e in read_events(log_dir) if e.get("event") == "audit_event"]
    assert len(events) == 1
    event = events[0]
    assert event["event_type"] == "auth.authorize"
    assert event["user"] == "alice"
    assert event["success"] is True
    assert event["level"] == "info"
    assert event["details"] == {"action": "edit", "secret": "***"}
    assert "correlation_id" in event
    assert "timestamp" in event


def test_get_logger_is_cached(log_dir: Path):
    """get_logger returns the instance configured by setup_logging."""
    assert get_logger() is get_logger()


def test_setup_logging_binds_correlation_id(tmp_path: Path):
    """An explicit correlation ID is carried by every event."""
    base_dir = tmp_path / "other"
    logger = setup_logging(base_dir=base_dir, correlation_id="session-1")
    assert isinstance(logger, structlog.stdlib.BoundLogger)

    audit_event(event_type=EventType.SYS_STARTUP, user="cli", success=True)
    events = read_events(base_dir)
    assert events[-1]["correlation_id"] == "session-1"


def test_reset_logger_is_idempotent():
    """reset_logger can be called repeatedly."""
    reset_logger()
    reset_logger()
