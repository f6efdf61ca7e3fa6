"""Durable key/value store interface and the cache entry envelope."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class CacheEntry:
    """
    A cached value with its storage envelope.

    Attributes:
        value: Cached data (JSON-serializable)
        stored_at: Epoch milliseconds when the entry was written
        expires_at: Epoch milliseconds after which the entry is stale
    """

    value: Any
    stored_at: int
    expires_at: int

    def is_expired(self, now: int) -> bool:
        """Check if the entry has expired at `now`."""
        return now > self.expires_at

    def to_json(self) -> str:
        """Serialize to the stored JSON representation."""
        return json.dumps({
            "data": self.value,
            "timestamp": self.stored_at,
            "expires": self.expires_at,
        })

    @classmethod
    def from_json(cls, raw: str | bytes) -> "CacheEntry":
        """
        Parse a stored JSON envelope.

        Raises:
            ValueError: If the payload is not a valid envelope
        """
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            raise ValueError("Cache envelope is not an object")
        try:
            return cls(
                value=parsed["data"],
                stored_at=int(parsed["timestamp"]),
                expires_at=int(parsed["expires"]),
            )
        except (KeyError, TypeError, OverflowError) as e:
            raise ValueError(f"Malformed cache envelope: {e}") from e


class KeyValueStore(ABC):
    """
    Abstract base class for raw string stores behind ExpiringCache.

    Implementations raise PersistenceFailure on backend errors; the
    cache absorbs them.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique identifier for this store.

        Returns:
            Store name (e.g., 'memory', 'file', 'redis')
        """
        ...

    @abstractmethod
    async def get_raw(self, key: str) -> str | None:
        """
        Read the raw string stored under key.

        Args:
            key: Store key

        Returns:
            Stored string, or None if absent
        """
        ...

    @abstractmethod
    async def set_raw(self, key: str, value: str) -> None:
        """
        Write a raw string under key, replacing any previous value.

        Args:
            key: Store key
            value: String to store
        """
        ...

    @abstractmethod
    async def remove_raw(self, key: str) -> None:
        """
        Delete key. Absent keys are ignored.

        Args:
            key: Store key
        """
        ...

    async def close(self) -> None:
        """Release any backend resources."""
        return None
