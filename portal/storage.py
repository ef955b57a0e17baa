"""Durable client storage and the persisted session record.

The session lives under a single key as a JSON {user, token} pair. Missing
or malformed content reads as "logged out", never as an error.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ValidationError as PydanticValidationError

from auth.types import UserProfile

logger = logging.getLogger(__name__)

SESSION_STORAGE_KEY = "rentwise_auth"


class DurableStorage(Protocol):
    """String key/value storage that survives restarts (browser localStorage analogue)."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage. Survives nothing; used in tests and demos."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._items = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """JSON-object file storage. Every write replaces the file atomically."""

    def __init__(self, path: Path):
        self._path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Ignoring unreadable storage file %s", self._path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _save(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w", dir=str(self._path.parent), delete=False, encoding="utf-8"
        ) as tf:
            json.dump(items, tf, indent=2, ensure_ascii=False)
            temp_path = Path(tf.name)
        try:
            os.replace(temp_path, self._path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            items = self._load()
            items[key] = value
            self._save(items)

    def remove(self, key: str) -> None:
        with self._lock:
            items = self._load()
            if items.pop(key, None) is not None:
                self._save(items)


class PersistedSession(BaseModel):
    """The stored {user, token} pair."""

    user: UserProfile
    token: str


def read_persisted_session(storage: DurableStorage) -> PersistedSession | None:
    """Read the stored session. Absent, partial, or corrupt data yields None."""
    try:
        raw = storage.get(SESSION_STORAGE_KEY)
    except (OSError, ValueError) as e:
        logger.warning("Could not read persisted session: %s", e)
        return None
    if not raw:
        return None
    try:
        session = PersistedSession.model_validate_json(raw)
    except PydanticValidationError:
        logger.warning("Discarding malformed persisted session")
        return None
    return session if session.token else None


def write_persisted_session(storage: DurableStorage, session: PersistedSession) -> None:
    storage.set(SESSION_STORAGE_KEY, session.model_dump_json())


def clear_persisted_session(storage: DurableStorage) -> None:
    storage.remove(SESSION_STORAGE_KEY)
