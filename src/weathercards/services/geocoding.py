"""OpenCage geocoding client."""

import logging

from weathercards.config import settings
from weathercards.errors import WeatherCardsError
from weathercards.http.client import HttpClient
from weathercards.services.models import Coordinates

logger = logging.getLogger(__name__)


class GeocodingService:
    """Resolves "city, country" to coordinates."""

    def __init__(
        self,
        http: HttpClient,
        api_key: str | None = None,
        url: str | None = None,
    ) -> None:
        self._http = http
        self._api_key = api_key or settings.opencage_api_key
        self._url = url or settings.opencage_url
        if not self._api_key:
            logger.warning("No OpenCage API key provided - geocoding requests will be rejected")

    async def get_coordinates(self, city: str, country: str) -> Coordinates | None:
        """
        Look up the first match for a city.

        Returns:
            Coordinates, or None when nothing matched or the lookup failed
        """
        params = {"q": f"{city},{country}", "key": self._api_key or ""}
        try:
            data = await self._http.fetch_json(self._url, params=params)
        except WeatherCardsError as e:
            logger.error(f"Error getting coordinates for {city}, {country}: {e}")
            return None

        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            return None

        try:
            geometry = results[0]["geometry"]
            return Coordinates(lat=float(geometry["lat"]), lng=float(geometry["lng"]))
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Unexpected geocoding result for {city}, {country}: {e}")
            return None
