"""Base interfaces and types for user record storage."""

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PERMISSIONS: tuple[str, ...] = ("view",)


class UserRecord(BaseModel):
    """A user held by a store.

    Records are frozen and permissions are held as a tuple, so a record
    handed out by the store cannot be changed through it. The store replaces
    a record wholesale when its permissions change.
    """

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)
    permissions: tuple[str, ...] = DEFAULT_PERMISSIONS

    def has_permission(self, action: str) -> bool:
        """Exact-match membership test, no wildcards or hierarchy."""
        return action in self.permissions


class UserStore(ABC):
    """Abstract base class for user stores.

    Failures are reported through return values: False for operations that
    did not happen, None for lookups that found nothing. A failed operation
    never changes the store.
    """

    @abstractmethod
    def insert(
        self,
        username: str,
        password: str,
        permissions: Optional[Sequence[str]] = None,
    ) -> bool:
        """Append a new record.

        Args:
            username: Unique key of the record.
            password: Plaintext secret, stored as given.
            permissions: Permission tags. ``None`` means the default
                ``["view"]``; any other sequence, empty included, is stored as given.

        Returns:
            False if the username is already taken, True otherwise.
        """

    @abstractmethod
    def find(self, username: str) -> Optional[UserRecord]:
        """Return the first record with this username, or None."""

    @abstractmethod
    def update_permissions(self, username: str, new_permissions: Sequence[str]) -> bool:
        """Replace the whole permission list of a record in place.

        Returns:
            False if no record has this username.
        """

    @abstractmethod
    def remove(self, username: str) -> bool:
        """Delete one record, keeping the order of the others.

        Returns:
            False if no record has this username.
        """

    @abstractmethod
    def clear(self) -> None:
        """Delete every record. Clearing an empty store is a no-op."""

    @abstractmethod
    def size(self) -> int:
        """Number of records currently held."""

    @abstractmethod
    def iterate(self) -> Iterator[UserRecord]:
        """Iterate over records in insertion order without mutating the store."""

    def get(self, username: str) -> UserRecord:
        """Like find(), but raise instead of returning None.

        Raises:
            UserNotFoundError: If no record has this username.
        """
        record = self.find(username)
        if record is None:
            raise UserNotFoundError(username)
        return record

    def authenticate(self, username: str, password: str) -> bool:
        """True iff the user exists and the password matches exactly."""
        record = self.find(username)
        return record is not None and record.password == password

    def authorize(self, username: str, action: str) -> bool:
        """True iff the user exists and holds ``action`` verbatim."""
        record = self.find(username)
        return record is not None and record.has_permission(action)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[UserRecord]:
        return self.iterate()

    def __contains__(self, username: object) -> bool:
        return isinstance(username, str) and self.find(username) is not None


class UserStoreError(Exception):
    """Base exception for user store operations."""


class UserNotFoundError(UserStoreError):
    """Exception raised when a username has no record."""

    def __init__(self, username: str):
        super().__init__(f"User not found: {username}")
        self.username = username
