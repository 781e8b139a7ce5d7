"""User record storage."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional, Type

import structlog

from .base import (
    DEFAULT_PERMISSIONS,
    UserNotFoundError,
    UserRecord,
    UserStore,
    UserStoreError,
)
from .memory import InMemoryUserStore

logger = structlog.get_logger(__name__)


@contextmanager
def open_store(store_class: Optional[Type[UserStore]] = None) -> Iterator[UserStore]:
    """Provide an empty store for the duration of a session.

    The store is cleared on every exit path, including exceptions.

    Args:
        store_class: Optional specific store class to use.

    Yields:
        UserStore: A new, empty store.
    """
    store = (store_class or InMemoryUserStore)()
    logger.debug("store_opened", store=type(store).__name__)
    try:
        yield store
    finally:
        store.clear()
        logger.debug("store_closed", store=type(store).__name__)


__all__ = [
    "DEFAULT_PERMISSIONS",
    "InMemoryUserStore",
    "UserNotFoundError",
    "UserRecord",
    "UserStore",
    "UserStoreError",
    "open_store",
]
