"""Tests for InMemoryUserStore."""

from concurrent.futures import ThreadPoolExecutor
from uuid import uuid4

import pytest

from auth.exceptions import DuplicateEmailError
from auth.types import Gender, Role


def _create(store, email="a@example.com", role=Role.TENANT, **kwargs):
    return store.create_user(
        name="A",
        email=email,
        password_hash="$2b$04$hash",
        role=role,
        **kwargs,
    )


class TestCreateUser:
    def test_assigns_id_and_timestamp(self, user_store):
        user = _create(user_store, gender=Gender.OTHER, verification_document="/uploads/x.pdf")

        assert user.id is not None
        assert user.created_at.tzinfo is not None
        assert user.gender == Gender.OTHER
        assert user.verification_document == "/uploads/x.pdf"

    def test_normalizes_email(self, user_store):
        user = _create(user_store, email=" Mixed@Example.com ")

        assert user.email == "mixed@example.com"

    def test_duplicate_email_case_insensitive(self, user_store):
        _create(user_store, email="a@example.com")

        with pytest.raises(DuplicateEmailError):
            _create(user_store, email="A@EXAMPLE.COM")

        assert len(user_store) == 1

    def test_concurrent_duplicates_store_one(self, user_store):
        def attempt(_):
            try:
                _create(user_store, email="race@example.com")
                return True
            except DuplicateEmailError:
                return False

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(16)))

        assert results.count(True) == 1
        assert len(user_store) == 1


class TestLookups:
    def test_by_email_case_insensitive(self, user_store):
        created = _create(user_store)

        assert user_store.get_user_by_email("A@Example.com") == created

    def test_by_id(self, user_store):
        created = _create(user_store)

        assert user_store.get_user_by_id(created.id) == created

    def test_missing(self, user_store):
        assert user_store.get_user_by_email("nobody@example.com") is None
        assert user_store.get_user_by_id(uuid4()) is None


class TestUpdateRole:
    def test_updates(self, user_store):
        created = _create(user_store)

        updated = user_store.update_role(created.id, Role.OWNER)

        assert updated.role == Role.OWNER
        assert user_store.get_user_by_email("a@example.com").role == Role.OWNER

    def test_missing_user(self, user_store):
        assert user_store.update_role(uuid4(), Role.OWNER) is None
