"""Portal fixtures: sessions backed by the in-process AuthService."""

from uuid import uuid4

import pytest

from auth.types import AuthResult, Role, UserProfile
from portal.backends import InMemoryAuthBackend
from portal.state import SessionContext
from portal.storage import MemoryStorage


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def backend(auth_service):
    return InMemoryAuthBackend(auth_service)


@pytest.fixture
def session(storage, backend):
    return SessionContext(storage, backend)


@pytest.fixture
def make_profile():
    def _make(role: Role = Role.TENANT, email: str = "someone@example.com") -> UserProfile:
        return UserProfile(id=uuid4(), name="Someone", email=email, role=role)

    return _make


@pytest.fixture
def make_result(make_profile):
    def _make(role: Role = Role.TENANT, token: str = "token-123") -> AuthResult:
        return AuthResult(user=make_profile(role), token=token)

    return _make
