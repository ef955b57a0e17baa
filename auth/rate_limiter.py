"""Rate limiting for login attempts.

Uses Valkey with sliding window TTL - each attempt resets the expiry.
Keyed on the submitted email whether or not an account exists, so the
limiter itself reveals nothing about registered addresses.
"""

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.exceptions import RateLimitedError


class RateLimiter:
    """Per-email login attempt limiter backed by Valkey."""

    KEY_PREFIX = "ratelimit:login:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._config = config
        self._window_seconds = config.rate_limit_window_minutes * 60

    def _key(self, email: str) -> str:
        """Generate rate limit key for email (normalized to lowercase)."""
        return f"{self.KEY_PREFIX}{email.strip().lower()}"

    def check_rate_limit(self, email: str) -> None:
        """Count an attempt and enforce the limit.

        Raises:
            RateLimitedError: If rate limit exceeded.
        """
        key = self._key(email)
        count = self._valkey.incr(key)

        # Sliding window: hammering extends the lockout
        self._valkey.expire(key, self._window_seconds)

        if count > self._config.rate_limit_attempts:
            retry_after = max(self._valkey.ttl(key), 1)
            raise RateLimitedError(retry_after_seconds=retry_after)

    def reset_rate_limit(self, email: str) -> None:
        """Reset rate limit after successful login."""
        self._valkey.delete(self._key(email))
