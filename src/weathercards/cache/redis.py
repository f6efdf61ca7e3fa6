"""Redis key/value store."""

import logging
from typing import Any

import redis.asyncio as redis

from weathercards.cache.base import KeyValueStore
from weathercards.errors import PersistenceFailure

logger = logging.getLogger(__name__)


class RedisStore(KeyValueStore):
    """
    Redis-backed store for sharing cached data between processes.

    Expiry is handled by ExpiringCache's envelope, so keys are written
    without a Redis TTL.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        prefix: str = "weathercards:",
        socket_timeout: float = 5.0,
        socket_connect_timeout: float = 5.0,
    ) -> None:
        """
        Initialize Redis store.

        Args:
            url: Redis connection URL
            prefix: Key prefix for namespacing
            socket_timeout: Socket timeout in seconds
            socket_connect_timeout: Connection timeout in seconds
        """
        self._url = url
        self._prefix = prefix
        self._socket_timeout = socket_timeout
        self._socket_connect_timeout = socket_connect_timeout
        self._client: Any = None

    @property
    def name(self) -> str:
        return "redis"

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def _get_key(self, key: str) -> str:
        """Get prefixed key."""
        return f"{self._prefix}{key}"

    async def _get_client(self) -> Any:
        """Get or create the Redis client."""
        if self._client is None:
            try:
                self._client = redis.from_url(
                    self._url,
                    socket_timeout=self._socket_timeout,
                    socket_connect_timeout=self._socket_connect_timeout,
                    decode_responses=True,
                )
                logger.info(f"Connected to Redis at {self._url}")
            except Exception as e:
                raise PersistenceFailure(f"Failed to connect to Redis: {e}") from e
        return self._client

    async def get_raw(self, key: str) -> str | None:
        client = await self._get_client()
        try:
            return await client.get(self._get_key(key))
        except Exception as e:
            raise PersistenceFailure(f"Redis GET error for {key}: {e}") from e

    async def set_raw(self, key: str, value: str) -> None:
        client = await self._get_client()
        try:
            await client.set(self._get_key(key), value)
        except Exception as e:
            raise PersistenceFailure(f"Redis SET error for {key}: {e}") from e

    async def remove_raw(self, key: str) -> None:
        client = await self._get_client()
        try:
            await client.delete(self._get_key(key))
        except Exception as e:
            raise PersistenceFailure(f"Redis DELETE error for {key}: {e}") from e

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed")
