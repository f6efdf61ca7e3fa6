"""Pytest configuration and fixtures."""

import asyncio

import pytest

from weathercards.cache.memory import InMemoryStore

START_MS = 1_735_732_800_000  # 2025-01-01 12:00:00 UTC


class FakeClock:
    """
    Controllable epoch-millisecond clock with a matching async sleep.

    Sleepers only wake when advance() moves the clock past their wake time.
    """

    def __init__(self, start_ms: int = START_MS) -> None:
        self.now_ms = start_ms
        self._sleepers: list[tuple[float, asyncio.Future]] = []

    def __call__(self) -> int:
        return self.now_ms

    async def sleep(self, seconds: float) -> None:
        future = asyncio.get_running_loop().create_future()
        self._sleepers.append((self.now_ms + seconds * 1000, future))
        await future

    @property
    def pending(self) -> int:
        """Number of sleepers still waiting."""
        return sum(1 for _, future in self._sleepers if not future.done())

    async def advance(self, ms: int) -> None:
        """Move time forward, wake due sleepers and let them run."""
        self.now_ms += ms
        for wake_at, future in self._sleepers:
            if wake_at <= self.now_ms and not future.done():
                future.set_result(None)
        self._sleepers = [(w, f) for w, f in self._sleepers if not f.done()]
        await settle()


async def settle(rounds: int = 20) -> None:
    """Yield to the event loop so woken tasks can run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def store() -> InMemoryStore:
    """Empty in-memory key/value store."""
    return InMemoryStore()


@pytest.fixture
def sample_users_response() -> dict:
    """Sample random-user API response for testing."""
    return {
        "results": [
            {
                "gender": "female",
                "name": {"title": "Ms", "first": "Ada", "last": "Lovelace"},
                "location": {
                    "street": {"number": 12, "name": "St James's Square"},
                    "city": "London",
                    "state": "England",
                    "country": "United Kingdom",
                },
                "email": "ada@example.com",
                "picture": {
                    "large": "https://randomuser.me/api/portraits/women/1.jpg",
                    "medium": "https://randomuser.me/api/portraits/med/women/1.jpg",
                    "thumbnail": "https://randomuser.me/api/portraits/thumb/women/1.jpg",
                },
            },
            {
                "gender": "male",
                "name": {"title": "Mr", "first": "Alan", "last": "Turing"},
                "location": {
                    "city": "Wilmslow",
                    "state": "Cheshire",
                    "country": "United Kingdom",
                },
                "email": "alan@example.com",
                "picture": {"large": "https://randomuser.me/api/portraits/men/2.jpg"},
            },
        ],
        "info": {"seed": "abc", "results": 2, "page": 1, "version": "1.4"},
    }


@pytest.fixture
def sample_geocode_response() -> dict:
    """Sample OpenCage response for testing."""
    return {
        "results": [
            {
                "formatted": "London, United Kingdom",
                "geometry": {"lat": 51.5074, "lng": -0.1278},
            }
        ],
        "status": {"code": 200, "message": "OK"},
    }


@pytest.fixture
def sample_weather_response() -> dict:
    """Sample Open-Meteo current weather response for testing."""
    return {
        "latitude": 51.5,
        "longitude": -0.12,
        "current": {
            "time": "2025-01-01T12:00",
            "temperature_2m": 7.4,
            "relative_humidity_2m": 81,
            "weather_code": 3,
        },
    }
