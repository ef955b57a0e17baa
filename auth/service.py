"""Authentication service - registration, password login, token lifecycle."""

import logging
import secrets
from uuid import UUID

from auth.config import AuthConfig
from auth.documents import DocumentStorage, DocumentUpload
from auth.exceptions import (
    AuthenticationError,
    DuplicateEmailError,
    InvalidTokenError,
    RateLimitedError,
    UserNotFoundError,
    ValidationError,
)
from auth.passwords import check_password_policy, hash_password, verify_password
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.store import UserStore
from auth.tokens import TokenManager
from auth.types import (
    SELF_SERVICE_ROLES,
    AuthResult,
    RegisterRequest,
    Role,
    TokenClaims,
    UserProfile,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Verifies or creates identities and mints bearer tokens.

    Handles:
    - Registration (OWNER/TENANT only, server-side password policy)
    - Login (with enumeration protection and per-email rate limit)
    - Logout (token revocation)
    - Out-of-band admin provisioning and role changes
    """

    def __init__(
        self,
        config: AuthConfig,
        user_store: UserStore,
        token_manager: TokenManager,
        rate_limiter: RateLimiter,
        security_logger: SecurityLogger,
        document_storage: DocumentStorage | None = None,
    ):
        self._config = config
        self._users = user_store
        self._tokens = token_manager
        self._rate_limiter = rate_limiter
        self._security_logger = security_logger
        self._documents = document_storage
        # Compared against when the email is unknown, so both login
        # failure paths pay the same bcrypt cost
        self._dummy_hash = hash_password(secrets.token_urlsafe(16), rounds=config.bcrypt_rounds)

    @property
    def max_document_bytes(self) -> int:
        return self._config.max_document_bytes

    def _issue(self, user: UserProfile) -> AuthResult:
        return AuthResult(user=user, token=self._tokens.issue(user))

    def _reject_registration(self, email: str, ip_address: str | None, reason: str) -> None:
        self._security_logger.log(
            SecurityEvent.REGISTRATION_REJECTED,
            email=email,
            ip_address=ip_address,
            details={"reason": reason},
        )

    def register(
        self,
        request: RegisterRequest,
        ip_address: str | None = None,
        document: DocumentUpload | None = None,
    ) -> AuthResult:
        """Create an OWNER or TENANT account and sign it in.

        Flow:
        1. Reject ADMIN and weak passwords
        2. Reject emails already registered
        3. Validate and store the optional verification document
        4. Insert user with bcrypt hash
        5. Mint token and log

        Raises:
            ValidationError: forbidden role, weak password, duplicate email,
                or unacceptable document. Nothing is stored on failure.
        """
        email = request.email.strip().lower()

        if request.role not in SELF_SERVICE_ROLES:
            self._reject_registration(email, ip_address, "forbidden_role")
            raise ValidationError("Admin accounts cannot be self-registered")

        check_password_policy(request.password, self._config)

        if self._users.get_user_by_email(email) is not None:
            self._reject_registration(email, ip_address, "duplicate_email")
            raise DuplicateEmailError()

        if document is not None:
            if self._documents is None:
                raise ValidationError("Verification document uploads are not enabled")
            self._documents.validate(document.filename, document.content)

        password_hash = hash_password(request.password, rounds=self._config.bcrypt_rounds)
        reference = self._documents.save(document.filename, document.content) if document else None

        try:
            user = self._users.create_user(
                name=request.name,
                email=email,
                password_hash=password_hash,
                role=request.role,
                gender=request.gender,
                verification_document=reference,
            )
        except Exception as e:
            if reference:
                self._documents.discard(reference)
            if isinstance(e, DuplicateEmailError):
                # Lost a race with a concurrent registration for the same email
                self._reject_registration(email, ip_address, "duplicate_email")
            raise

        self._security_logger.log(
            SecurityEvent.USER_REGISTERED,
            email=user.email,
            user_id=user.id,
            ip_address=ip_address,
            details={"role": user.role.value},
        )

        return self._issue(user.to_profile())

    def login(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        """Verify credentials and mint a token.

        Unknown email and wrong password raise the same AuthenticationError.
        Performs no writes to the user store.

        Raises:
            RateLimitedError: too many attempts for this email.
            AuthenticationError: credentials don't match.
        """
        email = email.strip().lower()

        try:
            self._rate_limiter.check_rate_limit(email)
        except RateLimitedError:
            self._security_logger.log(
                SecurityEvent.RATE_LIMITED,
                email=email,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            raise

        user = self._users.get_user_by_email(email)

        if user is None:
            verify_password(password, self._dummy_hash)
            self._security_logger.log(
                SecurityEvent.LOGIN_FAILED,
                email=email,
                ip_address=ip_address,
                user_agent=user_agent,
                details={"reason": "user_not_found"},
            )
            raise AuthenticationError()

        if not verify_password(password, user.password_hash):
            self._security_logger.log(
                SecurityEvent.LOGIN_FAILED,
                email=email,
                user_id=user.id,
                ip_address=ip_address,
                user_agent=user_agent,
                details={"reason": "bad_password"},
            )
            raise AuthenticationError()

        self._rate_limiter.reset_rate_limit(email)

        self._security_logger.log(
            SecurityEvent.LOGIN_SUCCEEDED,
            email=user.email,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        return self._issue(user.to_profile())

    def logout(self, token: str, ip_address: str | None = None) -> None:
        """Revoke a bearer token.

        Safe to call with invalid, expired, or already-revoked tokens.
        """
        try:
            claims = self._tokens.decode(token)
        except InvalidTokenError:
            return

        if self._tokens.revoke(claims):
            self._security_logger.log(
                SecurityEvent.TOKEN_REVOKED,
                user_id=claims.user_id,
                ip_address=ip_address,
            )

    def authenticate(self, token: str) -> TokenClaims:
        """Verify a bearer token.

        Raises:
            InvalidTokenError: (or TokenExpiredError / TokenRevokedError)
        """
        return self._tokens.decode(token)

    def current_user(self, token: str) -> UserProfile:
        """Resolve a bearer token to the user it was issued for."""
        return self.profile_for(self._tokens.decode(token))

    def profile_for(self, claims: TokenClaims) -> UserProfile:
        """Load the user behind already-verified claims."""
        user = self._users.get_user_by_id(claims.user_id)
        if user is None:
            raise InvalidTokenError("User no longer exists")
        return user.to_profile()

    def provision_admin(self, name: str, email: str, password: str) -> UserProfile:
        """Create an ADMIN account. Operator-only; never reachable over HTTP."""
        check_password_policy(password, self._config)

        user = self._users.create_user(
            name=name.strip(),
            email=email.strip().lower(),
            password_hash=hash_password(password, rounds=self._config.bcrypt_rounds),
            role=Role.ADMIN,
        )

        self._security_logger.log(
            SecurityEvent.ADMIN_PROVISIONED,
            email=user.email,
            user_id=user.id,
        )
        logger.info("Provisioned admin account %s", user.id)

        return user.to_profile()

    def change_role(self, user_id: UUID, role: Role) -> UserProfile:
        """Move a user between OWNER and TENANT.

        Raises:
            UserNotFoundError: no such user.
            ValidationError: target is ADMIN, or the user is an ADMIN.
        """
        user = self._users.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")

        if user.role == Role.ADMIN:
            raise ValidationError("Admin role cannot be changed")
        if role == Role.ADMIN:
            raise ValidationError("Admin role can only be provisioned")

        updated = self._users.update_role(user_id, role)
        if updated is None:
            raise UserNotFoundError(f"User {user_id} not found")

        self._security_logger.log(
            SecurityEvent.ROLE_CHANGED,
            email=updated.email,
            user_id=updated.id,
            details={"from": user.role.value, "to": role.value},
        )

        return updated.to_profile()
