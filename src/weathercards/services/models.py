"""Data models shared by the provider services and the renderer."""

from dataclasses import asdict, dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# Pydantic models for response validation
class UserName(BaseModel):
    """Name block from the random-user API."""

    title: str | None = None
    first: str
    last: str


class UserLocation(BaseModel):
    """Location block from the random-user API."""

    model_config = ConfigDict(extra="allow")

    city: str
    country: str


class UserPicture(BaseModel):
    """Picture URLs from the random-user API."""

    large: str | None = None
    medium: str | None = None
    thumbnail: str | None = None


class RandomUser(BaseModel):
    """A user profile from the random-user API."""

    model_config = ConfigDict(extra="allow")

    name: UserName
    location: UserLocation
    email: str | None = None
    picture: UserPicture = Field(default_factory=UserPicture)

    @property
    def full_name(self) -> str:
        return f"{self.name.first} {self.name.last}"


@dataclass(frozen=True)
class Coordinates:
    """Latitude/longitude pair."""

    lat: float
    lng: float


@dataclass
class WeatherReport:
    """Current weather at a location."""

    temperature: float
    humidity: float
    condition: str
    timestamp: int
    """Epoch milliseconds when the report was fetched."""

    coordinates: Coordinates
    stale: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WeatherReport":
        coords = data.get("coordinates", {})
        return cls(
            temperature=data["temperature"],
            humidity=data["humidity"],
            condition=data.get("condition", "Unknown"),
            timestamp=int(data.get("timestamp", 0)),
            coordinates=Coordinates(lat=coords["lat"], lng=coords["lng"]),
            stale=data.get("stale", False),
        )


@dataclass
class UserWeather:
    """A user joined with the weather at their location."""

    user: RandomUser
    weather: WeatherReport | None = None
    coordinates: Coordinates | None = None


@dataclass
class RefreshSummary:
    """Outcome of a weather refresh pass."""

    success_count: int
    total: int
