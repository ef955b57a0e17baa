"""Shared test fixtures for the RentWise auth test suite."""

import time
from pathlib import Path
from unittest.mock import Mock

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

from auth.config import AuthConfig
from auth.documents import DocumentStorage
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger
from auth.service import AuthService
from auth.store import InMemoryUserStore
from auth.tokens import TokenManager
from auth.types import RegisterRequest, Role
from utils.user_context import clear_current_user_id


# =============================================================================
# TEST CONSTANTS
# =============================================================================

TEST_JWT_SECRET = "test-secret-0123456789abcdef0123456789abcdef"
STRONG_PASSWORD = "Str0ng!Pass"


# =============================================================================
# FAKE VALKEY
# =============================================================================


class FakeValkey:
    """Dict-backed stand-in for ValkeyClient with real TTL bookkeeping."""

    def __init__(self):
        self._data: dict[str, str] = {}
        self._expires: dict[str, float] = {}

    def _purge(self, key: str) -> None:
        deadline = self._expires.get(key)
        if deadline is not None and time.monotonic() >= deadline:
            self._data.pop(key, None)
            self._expires.pop(key, None)

    def ping(self) -> bool:
        return True

    def get(self, key: str) -> str | None:
        self._purge(key)
        return self._data.get(key)

    def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        self._data[key] = value
        if expire_seconds is not None:
            self._expires[key] = time.monotonic() + expire_seconds
        else:
            self._expires.pop(key, None)

    def delete(self, key: str) -> bool:
        self._expires.pop(key, None)
        return self._data.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        self._purge(key)
        return key in self._data

    def ttl(self, key: str) -> int:
        self._purge(key)
        if key not in self._data:
            return -2
        if key not in self._expires:
            return -1
        return max(int(self._expires[key] - time.monotonic()), 0)

    def incr(self, key: str) -> int:
        self._purge(key)
        value = int(self._data.get(key, "0")) + 1
        self._data[key] = str(value)
        return value

    def expire(self, key: str, seconds: int) -> bool:
        if key not in self._data:
            return False
        self._expires[key] = time.monotonic() + seconds
        return True

    def keys(self, prefix: str = "") -> list[str]:
        return [key for key in list(self._data) if key.startswith(prefix) and self.exists(key)]

    def close(self) -> None:
        pass


# =============================================================================
# CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_user_context():
    """Ensure clean user context before and after each test."""
    clear_current_user_id()
    yield
    clear_current_user_id()


# =============================================================================
# AUTH FIXTURES
# =============================================================================


@pytest.fixture
def valkey():
    return FakeValkey()


@pytest.fixture
def config(tmp_path):
    """Test config: fast bcrypt, small rate limit, uploads under tmp_path."""
    return AuthConfig(
        jwt_secret=TEST_JWT_SECRET,
        token_expiry_minutes=30,
        bcrypt_rounds=4,
        rate_limit_attempts=3,
        rate_limit_window_minutes=5,
        upload_dir=tmp_path / "uploads",
        max_document_bytes=4096,
    )


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def token_manager(valkey, config):
    return TokenManager(valkey, config)


@pytest.fixture
def rate_limiter(valkey, config):
    return RateLimiter(valkey, config)


@pytest.fixture
def security_logger():
    """Mock security logger - the audit table lives in Postgres."""
    return Mock(spec=SecurityLogger)


@pytest.fixture
def document_storage(config):
    return DocumentStorage(config.upload_dir, config.max_document_bytes)


@pytest.fixture
def auth_service(config, user_store, token_manager, rate_limiter, security_logger, document_storage):
    return AuthService(
        config=config,
        user_store=user_store,
        token_manager=token_manager,
        rate_limiter=rate_limiter,
        security_logger=security_logger,
        document_storage=document_storage,
    )


@pytest.fixture
def make_registration():
    """Build a valid RegisterRequest, overriding any field."""

    def _make(**overrides) -> RegisterRequest:
        fields = {
            "name": "Test Tenant",
            "email": "tenant@example.com",
            "password": STRONG_PASSWORD,
            "role": Role.TENANT,
        }
        fields.update(overrides)
        return RegisterRequest(**fields)

    return _make
