"""
Valkey (Redis-compatible) client for token revocations and login rate limits.

Thin wrapper around redis-py. Connection URL from Vault.
Fail-fast: raises on connection failure, never returns fallback values.
"""

import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    Redis-compatible client for Valkey.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        client.set("revoked:abc", "1", expire_seconds=300)
        client.exists("revoked:abc")  # True until the TTL lapses
    """

    def __init__(self, url: str):
        """
        Initialize Valkey connection.

        Raises:
            redis.ConnectionError: If connection fails
        """
        self._client = redis.from_url(url, decode_responses=True)
        self._client.ping()
        logger.info("ValkeyClient connected")

    def ping(self) -> bool:
        """Health check. Raises redis.ConnectionError if unreachable."""
        self._client.ping()
        return True

    def get(self, key: str) -> str | None:
        """Get value by key. None if the key doesn't exist."""
        return self._client.get(key)

    def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        """Set key to value, optionally with a TTL in seconds."""
        if expire_seconds is not None:
            self._client.setex(key, expire_seconds, value)
        else:
            self._client.set(key, value)

    def delete(self, key: str) -> bool:
        """Delete key. True if it existed."""
        return self._client.delete(key) > 0

    def exists(self, key: str) -> bool:
        return self._client.exists(key) > 0

    def ttl(self, key: str) -> int:
        """
        Remaining TTL in seconds.

        -2 if the key doesn't exist, -1 if it has no expiration.
        """
        return self._client.ttl(key)

    def incr(self, key: str) -> int:
        """Increment key by 1 (created at 1 if missing). Returns the new value."""
        return self._client.incr(key)

    def expire(self, key: str, seconds: int) -> bool:
        """Set a TTL on an existing key. False if the key doesn't exist."""
        return bool(self._client.expire(key, seconds))

    def close(self) -> None:
        self._client.close()
        logger.info("ValkeyClient closed")
