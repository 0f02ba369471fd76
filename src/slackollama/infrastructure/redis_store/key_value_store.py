"""Redis implementation of KeyValueStore."""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from slackollama.config import StoreConfig
from slackollama.infrastructure.persistence.exceptions import KeyValueStoreError

logger = logging.getLogger(__name__)


class RedisKeyValueStore:
    """Redis-backed KeyValueStore.

    Expiry is delegated to Redis (``SET ... EX``), so expired keys simply
    disappear and ``purge_expired`` has nothing to do.
    """

    def __init__(self, client: redis.Redis) -> None:
        """Initialize the store.

        Args:
            client: Redis client created with ``decode_responses=True``.
        """
        self._client = client

    @classmethod
    def from_config(cls, config: StoreConfig) -> "RedisKeyValueStore":
        """Create a store connected as described by the configuration.

        Args:
            config: Store configuration.

        Returns:
            RedisKeyValueStore instance (connects lazily).
        """
        client = redis.Redis(
            host=config.redis_host,
            port=config.redis_port,
            db=config.redis_db,
            decode_responses=True,
        )
        return cls(client)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value with an expiry.

        Raises:
            KeyValueStoreError: If Redis rejects the command.
        """
        try:
            await self._client.set(key, value, ex=ttl_seconds)
        except RedisError as e:
            raise KeyValueStoreError(f"Failed to set {key}: {e}") from e

    async def get(self, key: str) -> str | None:
        """Fetch a value, or None when absent or expired.

        Raises:
            KeyValueStoreError: If Redis rejects the command.
        """
        try:
            return await self._client.get(key)
        except RedisError as e:
            raise KeyValueStoreError(f"Failed to get {key}: {e}") from e

    async def delete(self, key: str) -> None:
        """Delete a key.

        Raises:
            KeyValueStoreError: If Redis rejects the command.
        """
        try:
            await self._client.delete(key)
        except RedisError as e:
            raise KeyValueStoreError(f"Failed to delete {key}: {e}") from e

    async def keys(self, pattern: str) -> list[str]:
        """List live keys matching a glob pattern.

        Uses SCAN rather than KEYS to avoid blocking the server.

        Raises:
            KeyValueStoreError: If Redis rejects the command.
        """
        try:
            return sorted([key async for key in self._client.scan_iter(match=pattern)])
        except RedisError as e:
            raise KeyValueStoreError(f"Failed to list keys: {e}") from e

    async def purge_expired(self) -> int:
        """No-op: Redis removes expired keys itself."""
        return 0

    async def is_healthy(self) -> bool:
        """Check if Redis answers a PING."""
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.warning("Redis health check failed: %s", e)
            return False

    async def close(self) -> None:
        """Close the connection pool."""
        await self._client.aclose()
