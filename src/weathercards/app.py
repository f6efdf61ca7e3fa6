"""Application coordinator wiring services, cache and auto-refresh."""

import asyncio
import logging
from dataclasses import replace
from typing import Callable

from weathercards.cache.base import KeyValueStore
from weathercards.cache.expiring import CacheKey, ExpiringCache
from weathercards.cache.factory import create_store
from weathercards.clock import Clock, now_ms
from weathercards.config import settings
from weathercards.http.client import HttpClient
from weathercards.resilience.fanout import FanOutFetcher
from weathercards.resilience.retry import RetryExecutor, RetryPolicy, Sleep
from weathercards.scheduler.refresh import RefreshScheduler
from weathercards.services.converter import UserWeatherConverter
from weathercards.services.geocoding import GeocodingService
from weathercards.services.models import RefreshSummary, UserWeather, WeatherReport
from weathercards.services.users import UserService
from weathercards.services.weather import WeatherService

logger = logging.getLogger(__name__)

RefreshListener = Callable[[RefreshSummary], None]


def _location_key(report: WeatherReport) -> str:
    return f"{report.coordinates.lat},{report.coordinates.lng}"


class WeatherCardsApp:
    """
    Builds user/weather cards and keeps their weather current.

    Cards are plain UserWeather records; rendering is left to the caller.
    """

    def __init__(
        self,
        http: HttpClient | None = None,
        store: KeyValueStore | None = None,
        refresh_interval_minutes: float | None = None,
        opencage_api_key: str | None = None,
        clock: Clock = now_ms,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Initialize the application.

        Args:
            http: HTTP client (created from settings if omitted)
            store: Key/value store behind the cache (from settings if omitted)
            refresh_interval_minutes: Auto-refresh cadence
            opencage_api_key: Geocoding API key override
            clock: Time source returning epoch milliseconds
            sleep: Awaitable sleep used for retry backoff and the refresh timer
        """
        self.http = http or HttpClient()
        self.cache = ExpiringCache(
            store or create_store(),
            ttl_ms=settings.cache_ttl_ms,
            clock=clock,
        )
        self.retry = RetryExecutor(RetryPolicy.from_settings(), sleep=sleep)
        self.users = UserService(self.http, self.cache, self.retry)
        self.geocoding = GeocodingService(self.http, api_key=opencage_api_key)
        self.weather = WeatherService(self.http, self.retry, clock=clock)
        self.converter = UserWeatherConverter(self.geocoding, self.weather)
        self.scheduler = RefreshScheduler(
            self.refresh_weather,
            interval_minutes=refresh_interval_minutes or settings.refresh_interval_minutes,
            clock=clock,
            sleep=sleep,
        )
        self.cards: list[UserWeather] = []
        self._card_fanout = FanOutFetcher(label="Card build")
        self._listeners: list[RefreshListener] = []

    def add_refresh_listener(self, listener: RefreshListener) -> None:
        """Register a function called with the summary after every weather refresh."""
        self._listeners.append(listener)

    async def load_cards(self, count: int | None = None, fresh: bool = False) -> list[UserWeather]:
        """
        Fetch users and build one card per user.

        A user whose location or weather lookup fails still gets a card.
        When the weather lookup fails, the last cached report for that
        location is used (marked stale once it is too old). Otherwise the
        weather is left empty.

        Args:
            count: Number of users (defaults to settings.user_count)
            fresh: Ignore cached users

        Returns:
            The new cards
        """
        if count is None:
            count = settings.user_count
        if count <= 0:
            logger.warning(f"Nothing to load for count={count}")
            self.cards = []
            return self.cards

        if fresh:
            users = await self.users.fetch_fresh_users(count)
        else:
            users = await self.users.fetch_random_users(count)

        result = await self._card_fanout.fetch_all(users, self.converter.convert)
        self.cards = [
            slot.value if slot.succeeded and slot.value is not None else UserWeather(user=user)
            for user, slot in zip(users, result.slots)
        ]
        await self._apply_cached_weather()

        await self._store_weather()
        logger.info(f"Built {len(self.cards)} cards ({result.success_count} with full data)")
        return self.cards

    async def refresh_weather(self) -> RefreshSummary:
        """
        Refresh weather for every card that has coordinates.

        Failed lookups fall back to the card's previous report when one
        exists, otherwise the card's weather becomes empty.

        Returns:
            How many of the located cards were refreshed
        """
        located = [card for card in self.cards if card.coordinates is not None]
        if not located:
            logger.warning("No cards with coordinates to refresh")
            return RefreshSummary(success_count=0, total=0)

        result = await self.weather.get_weather_for_locations(
            [card.coordinates for card in located],
            fallbacks=[card.weather for card in located],
        )
        for card, slot in zip(located, result.slots):
            card.weather = slot.value if slot.succeeded else None

        await self._store_weather()
        summary = RefreshSummary(success_count=result.success_count, total=result.total)
        logger.info(
            f"Weather refresh complete! Successfully updated "
            f"{summary.success_count} out of {summary.total} cards"
        )
        for listener in self._listeners:
            listener(summary)
        return summary

    async def refresh_if_due(self) -> RefreshSummary | None:
        """Refresh weather only when the last recorded fetch is older than the cache TTL."""
        if not await self.cache.should_refresh(CacheKey.LAST_FETCH):
            logger.info("Weather data is still fresh, skipping refresh")
            return None
        return await self.refresh_weather()

    async def cached_weather(self) -> dict[str, WeatherReport]:
        """Weather reports from the cache keyed by "lat,lng"."""
        cached = await self.cache.get(CacheKey.WEATHER)
        if not isinstance(cached, dict):
            return {}
        reports = {}
        for key, data in cached.items():
            try:
                reports[key] = WeatherReport.from_dict(data)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed cached weather for {key}: {e}")
        return reports

    def start_auto_refresh(self) -> None:
        self.scheduler.start()

    def stop_auto_refresh(self) -> None:
        self.scheduler.stop()

    async def force_refresh(self) -> None:
        await self.scheduler.force_refresh()

    async def clear_cache(self) -> None:
        await self.cache.clear_all()

    async def close(self) -> None:
        """Stop scheduling and release HTTP and store resources."""
        if self.scheduler.is_active:
            self.scheduler.stop()
        await self.http.close()
        await self.cache.store.close()

    async def _apply_cached_weather(self) -> None:
        missing = [c for c in self.cards if c.weather is None and c.coordinates is not None]
        if not missing:
            return

        cached = await self.cached_weather()
        for card in missing:
            report = cached.get(f"{card.coordinates.lat},{card.coordinates.lng}")
            if report is None:
                continue
            if not self.weather.is_weather_data_fresh(report):
                report = replace(report, stale=True)
            card.weather = report
            logger.info(f"Using cached weather for {card.user.full_name}")

    async def _store_weather(self) -> None:
        """Persist the current reports by location and record the fetch time."""
        reports = {
            _location_key(card.weather): card.weather.to_dict()
            for card in self.cards
            if card.weather is not None
        }
        await self.cache.set(CacheKey.WEATHER, reports)
        await self.cache.record_fetch(CacheKey.LAST_FETCH)
