"""In-memory user store backed by an ordered list."""

from collections.abc import Iterator, Sequence
from typing import Optional

import structlog

from .base import DEFAULT_PERMISSIONS, UserRecord, UserStore

logger = structlog.get_logger(__name__)


class InMemoryUserStore(UserStore):
    """User store keeping records in insertion order.

    Lookups are linear scans on exact username equality. The list is never
    exposed; callers only ever see UserRecord values.
    """

    def __init__(self) -> None:
        self._records: list[UserRecord] = []

    def _index_of(self, username: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.username == username:
                return index
        return None

    def insert(
        self,
        username: str,
        password: str,
        permissions: Optional[Sequence[str]] = None,
    ) -> bool:
        if self._index_of(username) is not None:
            logger.debug("insert_rejected", username=username, reason="duplicate")
            return False

        if permissions is None:
            permissions = DEFAULT_PERMISSIONS
        self._records.append(
            UserRecord(username=username, password=password, permissions=tuple(permissions))
        )
        logger.debug("user_inserted", username=username, size=len(self._records))
        return True

    def find(self, username: str) -> Optional[UserRecord]:
        index = self._index_of(username)
        return None if index is None else self._records[index]

    def update_permissions(self, username: str, new_permissions: Sequence[str]) -> bool:
        index = self._index_of(username)
        if index is None:
            logger.debug("update_rejected", username=username, reason="not_found")
            return False

        self._records[index] = self._records[index].model_copy(
            update={"permissions": tuple(new_permissions)}
        )
        logger.debug("permissions_updated", username=username)
        return True

    def remove(self, username: str) -> bool:
        index = self._index_of(username)
        if index is None:
            logger.debug("remove_rejected", username=username, reason="not_found")
            return False

        del self._records[index]
        logger.debug("user_removed", username=username, size=len(self._records))
        return True

    def clear(self) -> None:
        count = len(self._records)
        self._records.clear()
        logger.debug("store_cleared", removed=count)

    def size(self) -> int:
        return len(self._records)

    def iterate(self) -> Iterator[UserRecord]:
        # Snapshot, so removing or updating during iteration is safe
        return iter(tuple(self._records))
