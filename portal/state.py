"""Session state: who is signed in, persisted across restarts.

SessionSnapshot is immutable. hydrated/signed_in/signed_out are pure
transitions; SessionContext performs the I/O around them and publishes
each new snapshot to subscribers.
"""

import logging
import threading
from typing import Callable

from pydantic import BaseModel, computed_field

from auth.documents import DocumentUpload
from auth.exceptions import ValidationError
from auth.types import SELF_SERVICE_ROLES, AuthResult, RegisterRequest, UserProfile
from portal.backends import AuthBackend
from portal.storage import (
    DurableStorage,
    PersistedSession,
    clear_persisted_session,
    read_persisted_session,
    write_persisted_session,
)

logger = logging.getLogger(__name__)

Listener = Callable[["SessionSnapshot"], None]


class SessionSnapshot(BaseModel):
    """One immutable view of the session."""

    user: UserProfile | None = None
    token: str | None = None
    is_hydrated: bool = False

    model_config = {"frozen": True}

    @computed_field
    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.token is not None


def hydrated(snapshot: SessionSnapshot, persisted: PersistedSession | None) -> SessionSnapshot:
    """State after reading durable storage at startup."""
    if persisted is None:
        return snapshot.model_copy(update={"user": None, "token": None, "is_hydrated": True})
    return snapshot.model_copy(
        update={"user": persisted.user, "token": persisted.token, "is_hydrated": True}
    )


def signed_in(snapshot: SessionSnapshot, result: AuthResult) -> SessionSnapshot:
    return snapshot.model_copy(update={"user": result.user, "token": result.token})


def signed_out(snapshot: SessionSnapshot) -> SessionSnapshot:
    return snapshot.model_copy(update={"user": None, "token": None})


class SessionContext:
    """
    Single source of truth for the signed-in identity.

    Passed explicitly to whatever needs it (gateway, guards, views).
    login/register update storage first and memory second; if either the
    backend call or the storage write fails, nothing changes.
    """

    def __init__(self, storage: DurableStorage, backend: AuthBackend):
        self._storage = storage
        self._backend = backend
        self._snapshot = SessionSnapshot()
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()

    @property
    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with every new snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, snapshot: SessionSnapshot) -> SessionSnapshot:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Session listener failed")
        return snapshot

    def hydrate(self) -> SessionSnapshot:
        """Restore the persisted session. Only the first call reads storage."""
        with self._lock:
            if self._snapshot.is_hydrated:
                return self._snapshot
            return self._publish(hydrated(self._snapshot, read_persisted_session(self._storage)))

    def _commit(self, result: AuthResult) -> SessionSnapshot:
        with self._lock:
            write_persisted_session(
                self._storage, PersistedSession(user=result.user, token=result.token)
            )
            return self._publish(signed_in(self._snapshot, result))

    def login(self, email: str, password: str) -> SessionSnapshot:
        """Sign in through the backend and persist the session."""
        if not email.strip() or not password:
            raise ValidationError("Email and password are required")
        return self._commit(self._backend.login(email.strip().lower(), password))

    def register(
        self, payload: RegisterRequest, document: DocumentUpload | None = None
    ) -> SessionSnapshot:
        """Create an account through the backend and persist the session."""
        if payload.role not in SELF_SERVICE_ROLES:
            raise ValidationError("Admin accounts cannot be self-registered")
        return self._commit(self._backend.register(payload, document))

    def refresh_user(self) -> SessionSnapshot:
        """Re-read the signed-in user from the backend (name or role may have changed)."""
        with self._lock:
            token = self._snapshot.token
            if token is None:
                return self._snapshot
            user = self._backend.fetch_current_user(token)
            return self._commit(AuthResult(user=user, token=token))

    def logout(self) -> SessionSnapshot:
        """Clear storage and memory now, then ask the server to revoke the token.

        The server notification is best-effort: failures are logged, and the
        local session is gone either way.
        """
        with self._lock:
            token = self._snapshot.token
            clear_persisted_session(self._storage)
            snapshot = self._publish(signed_out(self._snapshot))

        if token is not None:
            try:
                self._backend.logout(token)
            except Exception as e:
                logger.warning("Server-side logout failed: %s", e)
        return snapshot
