"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from auth.exceptions import (
    AuthError,
    AuthenticationError,
    AuthorizationError,
    DuplicateEmailError,
    InvalidTokenError,
    RateLimitedError,
    TokenExpiredError,
    TokenRevokedError,
    UserNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first: the first isinstance match wins
_AUTH_ERROR_STATUS: list[tuple[type[AuthError], int, str]] = [
    (DuplicateEmailError, 400, ErrorCodes.ALREADY_EXISTS),
    (ValidationError, 400, ErrorCodes.VALIDATION_ERROR),
    (AuthenticationError, 401, ErrorCodes.INVALID_CREDENTIALS),
    (TokenExpiredError, 401, ErrorCodes.TOKEN_EXPIRED),
    (TokenRevokedError, 401, ErrorCodes.TOKEN_REVOKED),
    (InvalidTokenError, 401, ErrorCodes.INVALID_TOKEN),
    (AuthorizationError, 403, ErrorCodes.AUTHORIZATION_DENIED),
    (RateLimitedError, 429, ErrorCodes.RATE_LIMITED),
    (UserNotFoundError, 404, ErrorCodes.NOT_FOUND),
]


def status_for(exc: AuthError) -> tuple[int, str]:
    """HTTP status and error code for an auth exception."""
    for exc_type, status, code in _AUTH_ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status, code
    return 400, ErrorCodes.INVALID_REQUEST


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def auth_error_response(request: Request, exc: AuthError) -> JSONResponse:
    """Render an auth exception in the unified envelope."""
    status, code = status_for(exc)
    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after_seconds)}
    return JSONResponse(
        status_code=status,
        headers=headers,
        content=error_response(code, str(exc), _request_id(request)).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        return auth_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content=error_response(
                ErrorCodes.VALIDATION_ERROR,
                str(exc.errors()),
                _request_id(request),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content=error_response(
                ErrorCodes.INTERNAL_ERROR,
                "An internal error occurred",
                _request_id(request),
            ).model_dump(mode="json"),
        )
