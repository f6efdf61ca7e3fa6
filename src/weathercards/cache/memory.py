"""In-memory key/value store."""

from weathercards.cache.base import KeyValueStore


class InMemoryStore(KeyValueStore):
    """
    Dictionary-backed store.

    Best for tests and one-shot runs; contents are lost on exit.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    @property
    def name(self) -> str:
        return "memory"

    async def get_raw(self, key: str) -> str | None:
        return self._data.get(key)

    async def set_raw(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove_raw(self, key: str) -> None:
        self._data.pop(key, None)

    async def close(self) -> None:
        self._data.clear()

    def size(self) -> int:
        """Get current number of keys (sync method for convenience)."""
        return len(self._data)
