"""Credential store interface and the in-memory fixture implementation.

AuthDatabase (auth.database) is the Postgres implementation used in
production; InMemoryUserStore backs tests and the in-memory portal backend.
"""

import threading
from typing import Protocol
from uuid import UUID, uuid4

from auth.exceptions import DuplicateEmailError
from auth.types import Gender, Role, UserRecord
from utils.timezone import now_utc


class UserStore(Protocol):
    """Persistence for user records. Emails compare case-insensitively."""

    def get_user_by_email(self, email: str) -> UserRecord | None: ...

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None: ...

    def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        gender: Gender | None = None,
        verification_document: str | None = None,
    ) -> UserRecord:
        """Insert a user. Raises DuplicateEmailError if the email is taken."""
        ...

    def update_role(self, user_id: UUID, role: Role) -> UserRecord | None: ...


class InMemoryUserStore:
    """Dict-backed UserStore, safe for use from multiple threads."""

    def __init__(self):
        self._users: dict[UUID, UserRecord] = {}
        self._by_email: dict[str, UUID] = {}
        self._lock = threading.Lock()

    def get_user_by_email(self, email: str) -> UserRecord | None:
        with self._lock:
            user_id = self._by_email.get(email.strip().lower())
            return self._users.get(user_id) if user_id else None

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None:
        with self._lock:
            return self._users.get(user_id)

    def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        gender: Gender | None = None,
        verification_document: str | None = None,
    ) -> UserRecord:
        normalized = email.strip().lower()
        with self._lock:
            if normalized in self._by_email:
                raise DuplicateEmailError()
            user = UserRecord(
                id=uuid4(),
                name=name,
                email=normalized,
                password_hash=password_hash,
                role=role,
                gender=gender,
                verification_document=verification_document,
                created_at=now_utc(),
            )
            self._users[user.id] = user
            self._by_email[normalized] = user.id
            return user

    def update_role(self, user_id: UUID, role: Role) -> UserRecord | None:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            updated = user.model_copy(update={"role": role})
            self._users[user_id] = updated
            return updated

    def __len__(self) -> int:
        return len(self._users)
