"""Store factory for creating key/value stores based on configuration."""

import logging
from pathlib import Path
from typing import Any

from weathercards.cache.base import KeyValueStore
from weathercards.cache.file import FileStore
from weathercards.cache.memory import InMemoryStore
from weathercards.cache.redis import RedisStore
from weathercards.config import settings

logger = logging.getLogger(__name__)


def create_store(
    backend: str | None = None,
    **kwargs: Any,
) -> KeyValueStore:
    """
    Create a key/value store instance.

    Args:
        backend: Store type ("memory", "file" or "redis"), defaults to config
        **kwargs: Additional arguments passed to the store

    Returns:
        KeyValueStore instance

    Raises:
        ValueError: If backend type is unknown
    """
    backend_type = backend or settings.cache_backend

    if backend_type == "memory":
        return InMemoryStore()

    elif backend_type == "file":
        return FileStore(cache_dir=Path(kwargs.get("cache_dir", settings.cache_dir)))

    elif backend_type == "redis":
        url = kwargs.get("url", settings.redis_url)
        if not url:
            logger.warning(
                "Redis URL not configured, falling back to in-memory store. "
                "Set REDIS_URL environment variable to enable Redis caching."
            )
            return InMemoryStore()

        return RedisStore(
            url=url,
            prefix=kwargs.get("prefix", settings.redis_prefix),
        )

    else:
        raise ValueError(f"Unknown cache backend: {backend_type}")
