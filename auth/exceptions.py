"""Typed exceptions for auth failures.

ValidationError, AuthenticationError and AuthorizationError are the three
families surfaced to users; api.errors maps each to an HTTP status.
"""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class ValidationError(AuthError):
    """Malformed or conflicting input (duplicate email, weak password, forbidden role)."""


class DuplicateEmailError(ValidationError):
    """Email already belongs to an account."""

    def __init__(self, message: str = "Email is already registered"):
        super().__init__(message)


class WeakPasswordError(ValidationError):
    """Password fails the server-side policy."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Password must " + ", ".join(problems))


class AuthenticationError(AuthError):
    """
    Credentials don't match.

    Deliberately undifferentiated: unknown email and wrong password
    produce the same message.
    """

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class AuthorizationError(AuthError):
    """Valid identity, but the action is not allowed for its role."""


class InvalidTokenError(AuthorizationError):
    """Bearer token is malformed, badly signed, or refers to a missing user."""


class TokenExpiredError(InvalidTokenError):
    """Bearer token is past its exp claim. User must sign in again."""


class TokenRevokedError(InvalidTokenError):
    """Bearer token was revoked by logout."""


class RateLimitedError(AuthError):
    """Too many attempts. Client should wait before retrying."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"Rate limited. Retry after {retry_after_seconds} seconds.")


class UserNotFoundError(AuthError):
    """
    No user with the given id.

    Internal only: login never raises this, it raises AuthenticationError.
    """
