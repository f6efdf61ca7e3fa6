"""File-backed key/value store that survives restarts."""

import logging
from pathlib import Path

from weathercards.cache.base import KeyValueStore
from weathercards.errors import PersistenceFailure

logger = logging.getLogger(__name__)


class FileStore(KeyValueStore):
    """
    Stores each key as a JSON file in a directory.

    The directory is created lazily on first write.
    """

    def __init__(self, cache_dir: Path) -> None:
        """
        Initialize file store.

        Args:
            cache_dir: Directory to store cache files
        """
        self._cache_dir = Path(cache_dir)

    @property
    def name(self) -> str:
        return "file"

    def _get_cache_file(self, key: str) -> Path:
        """Get cache file path for a key."""
        safe_name = key.replace("/", "_").replace("\\", "_")
        return self._cache_dir / f"{safe_name}.json"

    async def get_raw(self, key: str) -> str | None:
        cache_file = self._get_cache_file(key)
        try:
            if not cache_file.exists():
                return None
            return cache_file.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceFailure(f"Failed to read {cache_file}: {e}") from e

    async def set_raw(self, key: str, value: str) -> None:
        cache_file = self._get_cache_file(key)
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            cache_file.write_text(value, encoding="utf-8")
        except OSError as e:
            raise PersistenceFailure(f"Failed to write {cache_file}: {e}") from e
        logger.debug(f"Persisted cache key {key}")

    async def remove_raw(self, key: str) -> None:
        cache_file = self._get_cache_file(key)
        try:
            cache_file.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceFailure(f"Failed to remove {cache_file}: {e}") from e
