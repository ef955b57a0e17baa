"""Propagate the authenticated user's identity through the call stack using contextvars."""

from contextvars import ContextVar
from uuid import UUID

_current_user_id: ContextVar[UUID | None] = ContextVar("current_user_id", default=None)


def get_current_user_id() -> UUID | None:
    """
    Get current user ID from context.

    None outside an authenticated request (registration, login, startup).
    """
    return _current_user_id.get()


def set_current_user_id(user_id: UUID) -> None:
    """
    Set current user ID in context.

    Called by AuthMiddleware after the bearer token is verified.
    """
    _current_user_id.set(user_id)


def clear_current_user_id() -> None:
    """
    Clear user context.

    Called by AuthMiddleware after the request completes, in a finally block.
    """
    _current_user_id.set(None)
