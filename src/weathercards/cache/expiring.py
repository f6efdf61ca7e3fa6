"""Time-boxed cache with lazy expiry over a durable key/value store."""

import logging
from enum import Enum
from typing import Any, Iterable

from weathercards.cache.base import CacheEntry, KeyValueStore
from weathercards.clock import Clock, now_ms
from weathercards.errors import PersistenceFailure

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 30 * 60 * 1000


class CacheKey(str, Enum):
    """Keys in the application's cache namespace."""

    USERS = "weather_app_users"
    WEATHER = "weather_app_weather"
    LAST_FETCH = "weather_app_last_fetch"


def _key(key: str | CacheKey) -> str:
    return key.value if isinstance(key, CacheKey) else key


class ExpiringCache:
    """
    Key/value cache where every entry carries an absolute expiry.

    Expired entries are evicted when read; there is no background sweep.
    Store errors and corrupt payloads are logged and treated as misses,
    so no method raises on a persistence problem. Concurrent writes to
    the same key are last-write-wins.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_ms: int = DEFAULT_TTL_MS,
        namespace: Iterable[str | CacheKey] = tuple(CacheKey),
        clock: Clock = now_ms,
    ) -> None:
        """
        Initialize the cache.

        Args:
            store: Durable key/value store
            ttl_ms: Entry lifetime in milliseconds
            namespace: Keys removed by clear_all()
            clock: Time source returning epoch milliseconds
        """
        if ttl_ms <= 0:
            raise ValueError(f"ttl_ms must be positive, got {ttl_ms}")
        self._store = store
        self._ttl_ms = ttl_ms
        self._namespace = tuple(_key(k) for k in namespace)
        self._clock = clock

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    @property
    def store(self) -> KeyValueStore:
        return self._store

    async def set(self, key: str | CacheKey, value: Any, now: int | None = None) -> None:
        """
        Store value under key with a fresh expiry.

        Args:
            key: Cache key
            value: JSON-serializable value
            now: Storage timestamp in epoch ms (defaults to the clock)
        """
        stored_at = self._clock() if now is None else now
        entry = CacheEntry(
            value=value,
            stored_at=stored_at,
            expires_at=stored_at + self._ttl_ms,
        )
        try:
            await self._store.set_raw(_key(key), entry.to_json())
        except (PersistenceFailure, TypeError, ValueError) as e:
            logger.error(f"Failed to cache data for {_key(key)}: {e}")

    async def get(self, key: str | CacheKey) -> Any | None:
        """
        Get the cached value, or None if absent, expired or unreadable.

        Args:
            key: Cache key
        """
        try:
            raw = await self._store.get_raw(_key(key))
            if not raw:
                return None
            entry = CacheEntry.from_json(raw)
        except (PersistenceFailure, ValueError) as e:
            logger.error(f"Failed to retrieve cached data for {_key(key)}: {e}")
            return None

        if entry.is_expired(self._clock()):
            logger.debug(f"Cache entry {_key(key)} expired")
            await self.remove(key)
            return None

        return entry.value

    async def remove(self, key: str | CacheKey) -> None:
        """Delete key; no error if it is absent."""
        try:
            await self._store.remove_raw(_key(key))
        except PersistenceFailure as e:
            logger.error(f"Failed to remove cached data for {_key(key)}: {e}")

    async def clear_all(self) -> None:
        """Remove every key in this cache's namespace."""
        for key in self._namespace:
            await self.remove(key)
        logger.info("Cleared all cache data")

    async def record_fetch(
        self,
        last_fetch_key: str | CacheKey = CacheKey.LAST_FETCH,
        now: int | None = None,
    ) -> None:
        """Record the time of a completed fetch."""
        timestamp = self._clock() if now is None else now
        await self.set(last_fetch_key, timestamp, now=timestamp)

    async def should_refresh(
        self,
        last_fetch_key: str | CacheKey = CacheKey.LAST_FETCH,
    ) -> bool:
        """
        Check whether data keyed by last_fetch_key is due for a refresh.

        Returns:
            True if no fetch was recorded or at least ttl has elapsed since it
        """
        last_fetch = await self.get(last_fetch_key)
        if not isinstance(last_fetch, (int, float)):
            return True
        return self._clock() - last_fetch >= self._ttl_ms
