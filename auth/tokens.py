"""Bearer token lifecycle: issue, verify, revoke.

Tokens are HMAC-signed JWTs carrying {sub, role, jti, iat, exp}.
Revocations are stored in Valkey keyed by jti with a TTL matching the
token's remaining lifetime, so the list never outgrows live tokens.
"""

import logging
import secrets
from datetime import timedelta

import jwt
from pydantic import ValidationError as PydanticValidationError

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.exceptions import InvalidTokenError, TokenExpiredError, TokenRevokedError
from auth.types import TokenClaims, UserProfile
from utils.timezone import now_utc, to_epoch

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["sub", "role", "jti", "iat", "exp"]


class TokenManager:
    """Issues and verifies bearer tokens, with a Valkey-backed revocation list."""

    KEY_PREFIX = "revoked:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._config = config

    def _key(self, jti: str) -> str:
        """Generate Valkey key for a revoked token id."""
        return f"{self.KEY_PREFIX}{jti}"

    def issue(self, user: UserProfile) -> str:
        """Mint a signed token for the user."""
        now = now_utc()
        payload = {
            "sub": str(user.id),
            "role": user.role.value,
            "jti": secrets.token_urlsafe(16),
            "iat": to_epoch(now),
            "exp": to_epoch(now + timedelta(minutes=self._config.token_expiry_minutes)),
        }
        return jwt.encode(payload, self._config.jwt_secret, algorithm=self._config.jwt_algorithm)

    def _verify_signature(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._config.jwt_secret,
                algorithms=[self._config.jwt_algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected bearer token: %s", e)
            raise InvalidTokenError("Invalid token")

        try:
            return TokenClaims.model_validate(payload)
        except PydanticValidationError:
            raise InvalidTokenError("Invalid token claims")

    def decode(self, token: str) -> TokenClaims:
        """
        Verify a token and return its claims.

        Raises:
            TokenExpiredError: exp is in the past.
            InvalidTokenError: bad signature, malformed, or missing claims.
            TokenRevokedError: token was logged out.
        """
        claims = self._verify_signature(token)
        if self.is_revoked(claims.jti):
            raise TokenRevokedError("Token has been revoked")
        return claims

    def revoke(self, claims: TokenClaims) -> bool:
        """
        Revoke a verified token until it would have expired anyway.

        Returns False (and stores nothing) if the token is already expired.
        """
        remaining = int((claims.exp - now_utc()).total_seconds())
        if remaining <= 0:
            return False
        self._valkey.set(self._key(claims.jti), str(claims.sub), expire_seconds=remaining)
        return True

    def is_revoked(self, jti: str) -> bool:
        """Check the revocation list for a token id."""
        return self._valkey.exists(self._key(jti))
