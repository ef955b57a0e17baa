"""Security middleware for FastAPI - bearer token validation and user context."""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from auth.tokens import TokenManager
from auth.exceptions import AuthorizationError, InvalidTokenError
from auth.types import Role, TokenClaims
from api.base import error_response, ErrorCodes
from api.errors import auth_error_response
from utils.user_context import set_current_user_id, clear_current_user_id


def bearer_token(request: Request) -> str | None:
    """Extract the token from 'Authorization: Bearer <token>', or None."""
    header = request.headers.get("Authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that validates the bearer token and sets user context.

    For protected routes:
    1. Extracts the token from the Authorization header
    2. Verifies it via TokenManager (signature, expiry, revocation)
    3. Sets claims, user_id and role in request.state and user context
    4. Clears context after request completes

    Public paths bypass authentication entirely. Entries ending in '/'
    match as prefixes, others match exactly.
    """

    PUBLIC_PATHS = [
        "/api/auth/login",
        "/api/auth/register",
        "/api/auth/logout",
        "/api/auth/test",
        "/health",
        "/docs",
        "/openapi.json",
        "/uploads/",
    ]

    def __init__(self, app, token_manager: TokenManager):
        super().__init__(app)
        self._token_manager = token_manager

    def _is_public_path(self, path: str) -> bool:
        for public_path in self.PUBLIC_PATHS:
            if public_path.endswith("/"):
                if path.startswith(public_path):
                    return True
            elif path == public_path:
                return True
        return False

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        if request.method == "OPTIONS" or self._is_public_path(request.url.path):
            return await call_next(request)

        token = bearer_token(request)
        if token is None:
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.NOT_AUTHENTICATED,
                    "Authentication required",
                    getattr(request.state, "request_id", None),
                ).model_dump(mode="json"),
            )

        try:
            claims = self._token_manager.decode(token)
        except InvalidTokenError as e:
            return auth_error_response(request, e)

        set_current_user_id(claims.user_id)
        request.state.claims = claims
        request.state.user_id = claims.user_id
        request.state.role = claims.role

        try:
            return await call_next(request)
        finally:
            clear_current_user_id()


def current_claims(request: Request) -> TokenClaims:
    """FastAPI dependency: claims set by AuthMiddleware."""
    claims = getattr(request.state, "claims", None)
    if claims is None:
        raise InvalidTokenError("Authentication required")
    return claims


def require_roles(*roles: Role):
    """FastAPI dependency factory restricting a route to the given roles.

    Usage:
        @router.get("/admin/users", dependencies=[Depends(require_roles(Role.ADMIN))])
    """
    allowed = frozenset(roles)

    def _check(request: Request) -> TokenClaims:
        claims = current_claims(request)
        if claims.role not in allowed:
            raise AuthorizationError(
                f"Role {claims.role.value} may not access this resource"
            )
        return claims

    return _check
