"""Tests for utils/user_context.py - User identity propagation via contextvars."""

import contextvars
from uuid import uuid4

from utils.user_context import (
    get_current_user_id,
    set_current_user_id,
    clear_current_user_id,
)


class TestCurrentUserId:
    def test_none_without_set(self):
        """No identity outside an authenticated request."""
        assert get_current_user_id() is None

    def test_set_then_get(self):
        user_id = uuid4()
        set_current_user_id(user_id)

        assert get_current_user_id() == user_id

    def test_clear_then_get(self):
        set_current_user_id(uuid4())
        clear_current_user_id()

        assert get_current_user_id() is None

    def test_isolated_between_contexts(self):
        """A copied context (as used per request) doesn't leak back."""
        user_id = uuid4()

        contextvars.copy_context().run(set_current_user_id, user_id)

        assert get_current_user_id() is None
