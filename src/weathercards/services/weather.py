"""Open-Meteo current weather client."""

import logging
import math
from typing import Any, Sequence

from weathercards.clock import Clock, now_ms
from weathercards.config import settings
from weathercards.errors import validate_data
from weathercards.http.client import HttpClient
from weathercards.resilience.fanout import FanOutFetcher, FanOutResult
from weathercards.resilience.retry import RetryExecutor
from weathercards.services.models import Coordinates, WeatherReport

logger = logging.getLogger(__name__)

# WMO weather interpretation codes
WEATHER_CODES: dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

FRESHNESS_MS = 30 * 60 * 1000


def describe_weather_code(code: Any) -> str:
    """Map a WMO code to a description."""
    try:
        return WEATHER_CODES.get(int(code), "Unknown")
    except (TypeError, ValueError):
        return "Unknown"


def _valid_coordinate(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class WeatherService:
    """
    Fetches current temperature, humidity and condition for coordinates.

    Every request goes through the retry executor; fallbacks and
    multi-location fan-out are layered on top.
    """

    def __init__(
        self,
        http: HttpClient,
        retry: RetryExecutor,
        url: str | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self._http = http
        self._retry = retry
        self._url = url or settings.weather_url
        self._clock = clock
        self._fanout = FanOutFetcher(label="Weather refresh")

    async def get_current_weather(self, lat: float | None, lng: float | None) -> WeatherReport | None:
        """
        Fetch current weather.

        Returns:
            WeatherReport, or None if the coordinates are missing or invalid

        Raises:
            TransientFailure: If the API keeps failing
            ValidationFailure: If the API keeps omitting current conditions
        """
        if not (_valid_coordinate(lat) and _valid_coordinate(lng)):
            logger.error(f"Invalid coordinates: lat={lat}, lng={lng}")
            return None

        params = {
            "latitude": lat,
            "longitude": lng,
            "current": "temperature_2m,relative_humidity_2m,weather_code",
        }

        async def fetch() -> WeatherReport:
            data = await self._http.fetch_json(self._url, params=params)
            validate_data(
                data,
                lambda d: isinstance(d["current"], dict),
                "No current weather data available",
            )
            current = data["current"]
            validate_data(
                current,
                lambda c: "temperature_2m" in c and "relative_humidity_2m" in c,
                "Incomplete current weather data",
            )
            return WeatherReport(
                temperature=current["temperature_2m"],
                humidity=current["relative_humidity_2m"],
                condition=describe_weather_code(current.get("weather_code")),
                timestamp=self._clock(),
                coordinates=Coordinates(lat=float(lat), lng=float(lng)),
            )

        return await self._retry.run_api_call(fetch, api_name=f"Weather API ({lat}, {lng})")

    def is_weather_data_fresh(self, report: WeatherReport | None) -> bool:
        """Check if a report is less than 30 minutes old."""
        if report is None or not report.timestamp:
            return False
        return self._clock() - report.timestamp < FRESHNESS_MS

    async def get_weather_with_fallback(
        self,
        lat: float,
        lng: float,
        fallback: WeatherReport | None = None,
    ) -> WeatherReport | None:
        """
        Fetch weather, falling back to a previous report on failure.

        A stale fallback is returned with stale=True. Without a fallback
        the fetch error propagates.
        """
        try:
            return await self.get_current_weather(lat, lng)
        except Exception:
            logger.warning(f"Weather API failed, using fallback data for {lat}, {lng}")

            if fallback is not None and self.is_weather_data_fresh(fallback):
                logger.info("Using fresh cached weather data")
                return fallback
            if fallback is not None:
                logger.warning("Cached weather data is stale but will be used as fallback")
                return WeatherReport(
                    temperature=fallback.temperature,
                    humidity=fallback.humidity,
                    condition=fallback.condition,
                    timestamp=fallback.timestamp,
                    coordinates=fallback.coordinates,
                    stale=True,
                )
            logger.error("No fallback weather data available")
            raise

    async def get_weather_for_locations(
        self,
        locations: Sequence[Coordinates],
        fallbacks: Sequence[WeatherReport | None] | None = None,
    ) -> FanOutResult[WeatherReport]:
        """
        Fetch weather for many locations concurrently.

        Args:
            locations: Coordinates to look up
            fallbacks: Optional previous report per location, same order

        Returns:
            FanOutResult with one slot per location
        """
        if fallbacks is None:
            fallbacks = [None] * len(locations)
        if len(fallbacks) != len(locations):
            raise ValueError("fallbacks must align with locations")

        for location in locations:
            logger.info(f"Refreshing weather for coordinates: {location.lat}, {location.lng}")

        return await self._fanout.fetch_all(
            list(zip(locations, fallbacks)),
            lambda item: self.get_weather_with_fallback(item[0].lat, item[0].lng, item[1]),
        )
