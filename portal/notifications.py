"""Transient user notifications (title plus description) for failed actions."""

from dataclasses import dataclass

from api.base import ErrorCodes
from auth.exceptions import (
    AuthenticationError,
    AuthorizationError,
    RateLimitedError,
    ValidationError,
)
from portal.gateway import GENERIC_ERROR_MESSAGE, ApiError, TransportError

DEFAULT_DURATION_SECONDS = 2.5


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    expires_after: float = DEFAULT_DURATION_SECONDS


def _api_error_title(error: ApiError) -> str:
    if isinstance(error, TransportError):
        return "Connection problem"
    if error.code == ErrorCodes.INVALID_CREDENTIALS:
        return "Sign-in failed"
    if error.status == 429:
        return "Too many attempts"
    if error.status in (400, 422):
        return "Check your details"
    if error.status in (401, 403):
        return "Access denied"
    return "Something went wrong"


def notification_for(error: Exception) -> Notification:
    """Describe a failure for the user. The server's message is shown verbatim."""
    if isinstance(error, ApiError):
        return Notification(_api_error_title(error), error.message)
    if isinstance(error, ValidationError):
        return Notification("Check your details", str(error))
    if isinstance(error, AuthenticationError):
        return Notification("Sign-in failed", str(error))
    if isinstance(error, AuthorizationError):
        return Notification("Access denied", str(error))
    if isinstance(error, RateLimitedError):
        return Notification("Too many attempts", str(error))
    return Notification("Something went wrong", GENERIC_ERROR_MESSAGE)
