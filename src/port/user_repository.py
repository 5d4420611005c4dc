from contextlib import AbstractContextManager
from typing import Protocol

from domain.model.user import User


class UserRepository(Protocol):
    """Protocol defining the interface for user data access."""
    def get(self, email: str) -> User | None:
        """Find a user by exact email. Return User or None if not found."""
        ...

    def save(self, user: User, previous_email: str | None = None) -> None:
        """Insert or overwrite the user keyed by email.

        When previous_email is given and differs from user.email, the record
        stored under previous_email is removed.
        """
        ...

    def locked(self) -> AbstractContextManager:
        """Hold the repository lock across several get/save calls."""
        ...

    def __len__(self) -> int:
        """Number of stored users."""
        ...
