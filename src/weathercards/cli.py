"""
weathercards CLI
Command-line interface for user/weather cards with auto-refresh.
"""

import asyncio
import json
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from weathercards.app import WeatherCardsApp
from weathercards.cache.expiring import CacheKey
from weathercards.config import settings
from weathercards.errors import WeatherCardsError
from weathercards.rendering import render_cards
from weathercards.services.models import RefreshSummary

console = Console()


def configure_logging(level: str) -> None:
    """Route log records through rich."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@click.group()
@click.option("--log-level", "-l", default=None, help="Logging level (defaults to LOG_LEVEL)")
@click.pass_context
def cli(ctx, log_level: str | None):
    """Random users with the current weather at their location."""
    ctx.ensure_object(dict)
    configure_logging(log_level or settings.log_level)


@cli.command()
@click.option("--count", "-n", default=None, type=int, help="Number of users")
@click.option("--fresh", is_flag=True, help="Ignore cached users")
def show(count: int | None, fresh: bool):
    """Fetch users and show their weather cards."""

    async def run() -> None:
        app = WeatherCardsApp()
        try:
            cards = await app.load_cards(count, fresh=fresh)
            console.print(render_cards(cards))
        finally:
            await app.close()

    try:
        asyncio.run(run())
    except WeatherCardsError as e:
        console.print(f"❌ [red]Failed to load cards: {e}[/red]")
        sys.exit(1)


@cli.command()
@click.option("--count", "-n", default=None, type=int, help="Number of users")
@click.option("--interval", "-i", default=None, type=float, help="Refresh interval in minutes")
@click.option("--cycles", "-c", default=None, type=int, help="Stop after this many refreshes")
def watch(count: int | None, interval: float | None, cycles: int | None):
    """Show cards and refresh their weather periodically."""

    async def run() -> None:
        app = WeatherCardsApp(refresh_interval_minutes=interval)
        refreshed = asyncio.Event()
        remaining = cycles

        def on_refresh(summary: RefreshSummary) -> None:
            console.print(render_cards(app.cards))
            console.print(
                f"Updated {summary.success_count}/{summary.total} cards. "
                f"Next refresh in {app.scheduler.format_time_until_next_fire()}"
            )
            refreshed.set()

        app.add_refresh_listener(on_refresh)
        try:
            cards = await app.load_cards(count)
            console.print(render_cards(cards))
            app.start_auto_refresh()
            while remaining is None or remaining > 0:
                await refreshed.wait()
                refreshed.clear()
                if remaining is not None:
                    remaining -= 1
        finally:
            await app.close()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("🛑 Stopped")
    except WeatherCardsError as e:
        console.print(f"❌ [red]Failed to load cards: {e}[/red]")
        sys.exit(1)


@cli.command("clear-cache")
def clear_cache():
    """Remove cached users, weather and fetch times."""

    async def run() -> None:
        app = WeatherCardsApp()
        try:
            await app.clear_cache()
        finally:
            await app.close()

    asyncio.run(run())
    console.print("🧹 [green]Cache cleared[/green]")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def status(as_json: bool):
    """Show what is currently cached."""

    async def run() -> dict:
        app = WeatherCardsApp()
        try:
            users = await app.users.get_cached_users()
            weather = await app.cached_weather()
            return {
                "cache_backend": app.cache.store.name,
                "cached_users": len(users or []),
                "cached_locations": len(weather),
                "last_fetch": await app.cache.get(CacheKey.LAST_FETCH),
                "refresh_due": await app.cache.should_refresh(CacheKey.LAST_FETCH),
            }
        finally:
            await app.close()

    info = asyncio.run(run())
    if as_json:
        console.print(json.dumps(info, indent=2))
        return

    lines = "\n".join(f"{key}: {value}" for key, value in info.items())
    console.print(Panel(lines, title="Cache status"))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
