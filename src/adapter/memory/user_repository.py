"""In-memory implementation of UserRepository."""

import threading
from contextlib import AbstractContextManager
from dataclasses import replace
from logging import getLogger

from domain.model.user import User

logger = getLogger(__name__)


class InMemoryUserRepository:
    """Thread-safe user store keyed by email.

    Records are copied on the way in and out, so a caller never holds a
    reference into the store. The lock is re-entrant: a service can hold
    locked() across a get/save sequence while each call still takes it.
    """

    def __init__(self):
        self.store: dict[str, User] = {}
        self._lock = threading.RLock()

    def locked(self) -> AbstractContextManager:
        return self._lock

    # ── write operations ─────────────────────────────────────

    def save(self, user: User, previous_email: str | None = None) -> None:
        with self._lock:
            if previous_email is not None and previous_email != user.email:
                self.store.pop(previous_email, None)
                logger.info("User email changed", extra={"email": user.email})
            self.store[user.email] = replace(user)

    # ── read operations ──────────────────────────────────────

    def get(self, email: str) -> User | None:
        with self._lock:
            user = self.store.get(email)
            return replace(user) if user else None

    def __len__(self) -> int:
        with self._lock:
            return len(self.store)
