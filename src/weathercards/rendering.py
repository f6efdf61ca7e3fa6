"""Terminal rendering of user/weather cards."""

from rich.columns import Columns
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from weathercards.services.models import UserWeather, WeatherReport

PLACEHOLDER = "N/A"
NO_WEATHER = "Weather data unavailable"


def weather_fields(weather: WeatherReport | None) -> dict[str, str]:
    """Display strings for a report, with placeholders when it is missing."""
    if weather is None:
        return {
            "temperature": PLACEHOLDER,
            "humidity": PLACEHOLDER,
            "condition": NO_WEATHER,
        }
    condition = weather.condition
    if weather.stale:
        condition = f"{condition} (stale)"
    return {
        "temperature": f"{weather.temperature}°C",
        "humidity": f"{weather.humidity}%",
        "condition": condition,
    }


def render_card(card: UserWeather) -> Panel:
    """Render one card as a rich Panel."""
    user = card.user
    fields = weather_fields(card.weather)

    body = Table.grid(padding=(0, 1))
    body.add_column(style="dim")
    body.add_column()
    body.add_row("Location", f"{user.location.city}, {user.location.country}")
    body.add_row("Temperature", fields["temperature"])
    body.add_row("Humidity", fields["humidity"])
    body.add_row("Condition", Text(fields["condition"], style="italic"))
    if card.coordinates is not None:
        body.add_row("Coordinates", f"{card.coordinates.lat:.4f}, {card.coordinates.lng:.4f}")

    border = "green" if card.weather is not None else "yellow"
    return Panel(body, title=f"[bold]{user.full_name}[/bold]", border_style=border, width=44)


def render_cards(cards: list[UserWeather]) -> Columns:
    """Lay out cards side by side."""
    return Columns([render_card(card) for card in cards], equal=True)
