"""Audit event type definitions."""

from enum import Enum


class EventType(str, Enum):
    """Audit event types."""

    # Authentication events
    AUTH_LOGIN = "auth.login"
    AUTH_AUTHORIZE = "auth.authorize"

    # User record events
    USER_CREATE = "user.create"
    USER_UPDATE = "user.update"
    USER_DELETE = "user.delete"
    USER_LIST = "user.list"

    # Store events
    STORE_CLEAR = "store.clear"

    # System events
    SYS_STARTUP = "system.startup"
    SYS_SHUTDOWN = "system.shutdown"
