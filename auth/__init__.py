"""Authentication and authorization modules.

HTTP pieces (auth.api, auth.security_middleware) are imported directly by
the application factory to keep this package free of web imports.
"""

from auth.exceptions import (
    AuthError,
    ValidationError,
    DuplicateEmailError,
    WeakPasswordError,
    AuthenticationError,
    AuthorizationError,
    InvalidTokenError,
    TokenExpiredError,
    TokenRevokedError,
    RateLimitedError,
    UserNotFoundError,
)
from auth.types import (
    Role,
    Gender,
    SELF_SERVICE_ROLES,
    UserRecord,
    UserProfile,
    RegisterRequest,
    LoginRequest,
    TokenClaims,
    AuthResult,
)
from auth.config import AuthConfig
from auth.store import UserStore, InMemoryUserStore
from auth.database import AuthDatabase
from auth.documents import DocumentStorage, DocumentUpload
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.tokens import TokenManager
from auth.service import AuthService
