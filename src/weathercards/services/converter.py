"""Joins a user profile with the weather at their location."""

import logging

from weathercards.errors import WeatherCardsError
from weathercards.services.geocoding import GeocodingService
from weathercards.services.models import RandomUser, UserWeather
from weathercards.services.weather import WeatherService

logger = logging.getLogger(__name__)


class UserWeatherConverter:
    """Geocodes a user's city, then fetches weather for it."""

    def __init__(self, geocoding: GeocodingService, weather: WeatherService) -> None:
        self._geocoding = geocoding
        self._weather = weather

    async def convert(self, user: RandomUser) -> UserWeather:
        """
        Build the combined record for one user.

        Without coordinates the record has neither coordinates nor
        weather. If only the weather lookup fails the coordinates are
        kept so a later refresh can fill the weather in.
        """
        logger.info(
            f"Processing location for {user.full_name}: "
            f"{user.location.city}, {user.location.country}"
        )

        coordinates = await self._geocoding.get_coordinates(
            user.location.city,
            user.location.country,
        )
        if coordinates is None:
            logger.warning(f"Could not get coordinates for {user.name.first}")
            return UserWeather(user=user)

        logger.info(f"Coordinates: {coordinates.lat}, {coordinates.lng}")
        try:
            weather = await self._weather.get_current_weather(coordinates.lat, coordinates.lng)
        except WeatherCardsError as e:
            logger.warning(f"No weather for {user.name.first}: {e}")
            weather = None
        return UserWeather(user=user, weather=weather, coordinates=coordinates)
