"""
Cache module.

Provides an expiring cache on top of pluggable key/value stores
(in-memory, JSON files and Redis).
"""

from weathercards.cache.base import CacheEntry, KeyValueStore
from weathercards.cache.expiring import CacheKey, ExpiringCache
from weathercards.cache.factory import create_store
from weathercards.cache.file import FileStore
from weathercards.cache.memory import InMemoryStore
from weathercards.cache.redis import RedisStore

__all__ = [
    "CacheEntry",
    "CacheKey",
    "ExpiringCache",
    "FileStore",
    "InMemoryStore",
    "KeyValueStore",
    "RedisStore",
    "create_store",
]
