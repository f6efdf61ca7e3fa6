"""Provider clients for users, geocoding and weather."""

from weathercards.services.converter import UserWeatherConverter
from weathercards.services.geocoding import GeocodingService
from weathercards.services.models import (
    Coordinates,
    RandomUser,
    RefreshSummary,
    UserWeather,
    WeatherReport,
)
from weathercards.services.users import UserService
from weathercards.services.weather import WEATHER_CODES, WeatherService

__all__ = [
    "Coordinates",
    "GeocodingService",
    "RandomUser",
    "RefreshSummary",
    "UserService",
    "UserWeather",
    "UserWeatherConverter",
    "WEATHER_CODES",
    "WeatherReport",
    "WeatherService",
]
