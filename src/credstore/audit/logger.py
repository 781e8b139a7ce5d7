"""Structured audit logging for store operations."""

import inspect
import json
import logging
import os
import sys
import threading
import uuid
from contextlib import suppress
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict

from .events import EventType

LOG_FILE_NAME = "credstore.log"
SENSITIVE_KEYS = {"password", "token", "secret", "key", "credential", "api_key"}

# Global instances
_LOGGER_INSTANCE = None
_logger_lock = threading.Lock()


def get_log_dir(base_dir: str | Path | None = None) -> Path:
    """Get normalized log directory path.

    Args:
        base_dir: Base directory for logs. If None, uses ~/.local/log

    Returns:
        Resolved Path object for log directory
    """
    if base_dir is None:
        base_dir = Path.home() / ".local" / "log"
    return Path(base_dir).resolve()


def create_secure_handler(
    log_path: Path, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    """Create a RotatingFileHandler whose file is readable by owner and group only.

    Args:
        log_path: Path to the log file
        max_bytes: Maximum size of each log file
        backup_count: Number of backup files to keep

    Returns:
        Configured RotatingFileHandler instance
    """
    os.makedirs(log_path.parent, mode=0o750, exist_ok=True)

    handler = RotatingFileHandler(
        str(log_path), maxBytes=max_bytes, backupCount=backup_count
    )

    # Ensure file exists since some platforms need it for permissions
    if not log_path.exists():
        log_path.touch(mode=0o640)

    os.chmod(log_path, 0o640)

    return handler


def add_timestamp(
    _: structlog.BoundLogger, __: str, event_dict: EventDict
) -> EventDict:
    """Add ISO 8601 timestamp."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def sanitize_keys(
    event_dict: dict[str, Any], sensitive_keys: set[str]
) -> dict[str, Any]:
    """Redact sensitive keys, matching case-insensitively through nested structures.

    Args:
        event_dict: Dictionary to sanitize
        sensitive_keys: Set of keys to redact

    Returns:
        Sanitized copy of the dictionary
    """
    lowered = {sk.lower() for sk in sensitive_keys}

    def _sanitize_value(key: str, value: Any) -> Any:
        if key.lower() in lowered:
            return "***"
        if isinstance(value, dict):
            return sanitize_keys(value, sensitive_keys)
        if isinstance(value, list):
            return [_sanitize_value("", item) for item in value]
        return value

    return {k: _sanitize_value(k, v) for k, v in event_dict.items()}


def sanitize_event_dict(
    _: structlog.BoundLogger, __: str, event_dict: EventDict
) -> dict[str, Any]:
    """Sanitize log record keys and values, recursively masking sensitive data."""
    return sanitize_keys(dict(event_dict), SENSITIVE_KEYS)


class StructuredJsonFormatter(logging.Formatter):
    """JSON formatter for records that did not come through structlog."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        # structlog has already rendered its events to JSON
        if message.startswith("{"):
            return message

        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": message,
        }
        if record.exc_info:
            log_data["exception"] = {
                "type": str(record.exc_info[0]),
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(log_data)


def configure_logger(
    log_level: str = "INFO",
    correlation_id: str | None = None,
    max_log_size: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    base_dir: str | Path | None = None,
) -> structlog.BoundLogger:
    """Configure structlog and the root logger, and return a bound logger.

    For normal usage prefer setup_logging(), which also updates the cached
    instance returned by get_logger().

    Args:
        log_level: Log level (default: INFO)
        correlation_id: Optional correlation ID identifying the session
        max_log_size: Maximum size of a log file before rotation
        backup_count: Number of backup files to keep
        base_dir: Optional base directory for log files

    Returns:
        A configured structlog.BoundLogger instance
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            add_timestamp,
            sanitize_event_dict,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    log_file = get_log_dir(base_dir) / LOG_FILE_NAME
    file_handler = create_secure_handler(log_file, max_log_size, backup_count)
    file_handler.setFormatter(StructuredJsonFormatter())

    # Only errors reach the terminal, the menu output stays readable
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.ERROR)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logger = structlog.get_logger("credstore")
    result: structlog.BoundLogger = logger.bind(
        correlation_id=correlation_id or str(uuid.uuid4())
    )
    return result


def setup_logging(
    *,
    log_level: str = "INFO",
    correlation_id: str | None = None,
    max_log_size: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    base_dir: str | Path | None = None,
) -> structlog.BoundLogger:
    """Setup structured logging and cache the resulting logger.

    Args:
        log_level: Log level (default: INFO)
        correlation_id: Optional correlation ID identifying the session
        max_log_size: Maximum size of a log file before rotation
        backup_count: Number of backup files to keep
        base_dir: Optional base directory for log files

    Returns:
        The configured logger instance.
    """
    global _LOGGER_INSTANCE

    reset_logger()
    new_logger = configure_logger(
        log_level=log_level,
        correlation_id=correlation_id,
        max_log_size=max_log_size,
        backup_count=backup_count,
        base_dir=base_dir,
    )

    with _logger_lock:
        _LOGGER_INSTANCE = new_logger
    return new_logger


def get_logger() -> structlog.BoundLogger:
    """Get the configured logger instance.

    Returns the cached instance so the session correlation_id is preserved
    across calls. Configures one with default settings if none exists yet.
    """
    global _LOGGER_INSTANCE

    if _LOGGER_INSTANCE is not None:
        return _LOGGER_INSTANCE

    with _logger_lock:
        if _LOGGER_INSTANCE is None:
            _LOGGER_INSTANCE = configure_logger()
        return _LOGGER_INSTANCE


def reset_logger() -> None:
    """Close root handlers, reset structlog and drop the cached logger.

    Idempotent; errors while closing handlers are ignored.
    """
    global _LOGGER_INSTANCE
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        with suppress(Exception):
            handler.close()
        with suppress(Exception):
            root_logger.removeHandler(handler)

    with suppress(Exception):
        structlog.reset_defaults()

    with _logger_lock:
        _LOGGER_INSTANCE = None


def audit_event(
    *,
    event_type: EventType | str,
    user: str,
    success: bool,
    details: dict[str, Any] | None = None,
    error: Exception | None = None,
) -> None:
    """Log an audit event.

    Successful events are logged at INFO, failed ones at WARNING: a rejected
    login or a duplicate username is an expected outcome, not a fault.

    Args:
        event_type: Type of event (e.g., EventType.USER_CREATE)
        user: Username the event concerns
        success: Whether the operation succeeded
        details: Optional event details
        error: Optional exception if operation failed
    """
    logger = get_logger()
    if isinstance(event_type, EventType):
        event_type = event_type.value

    event: dict[str, Any] = {
        "event_type": event_type,
        "user": user,
        "success": success,
    }

    frame = inspect.currentframe()
    if frame is not None and frame.f_back is not None:
        event["caller"] = {
            "file": frame.f_back.f_code.co_filename,
            "line": frame.f_back.f_lineno,
            "function": frame.f_back.f_code.co_name,
        }
    del frame

    if details:
        event["details"] = sanitize_keys(details, SENSITIVE_KEYS)

    if error:
        event["error"] = {
            "type": type(error).__name__,
            "message": str(error),
        }

    bound = logger.bind(**event)
    if success:
        bound.info("audit_event")
    else:
        bound.warning("audit_event")
