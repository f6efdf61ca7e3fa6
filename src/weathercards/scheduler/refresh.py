"""Self-rescheduling auto-refresh timer."""

import asyncio
import logging
import math
from datetime import datetime
from typing import Any, Awaitable, Callable

from weathercards.clock import Clock, now_ms

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], Awaitable[Any]]
Sleep = Callable[[float], Awaitable[None]]

MS_PER_MINUTE = 60 * 1000


class RefreshScheduler:
    """
    Invokes a refresh callback every interval until stopped.

    Each fire arms the next one-shot timer after the callback finishes,
    whether it succeeded or failed, so a failing callback never halts the
    cadence. force_refresh() runs the callback on demand and propagates
    its failure. Callback runs are serialized: a timer fire and a forced
    refresh never execute at the same time.
    """

    def __init__(
        self,
        refresh_callback: RefreshCallback,
        interval_minutes: float = 30,
        clock: Clock = now_ms,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Initialize the scheduler in the idle state.

        Args:
            refresh_callback: Coroutine function invoked on every fire
            interval_minutes: Minutes between fires
            clock: Time source returning epoch milliseconds
            sleep: Awaitable sleep function taking seconds
        """
        if interval_minutes <= 0:
            raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")
        self._callback = refresh_callback
        self._interval_ms = int(interval_minutes * MS_PER_MINUTE)
        self._clock = clock
        self._sleep = sleep
        self._active = False
        self._next_fire_at: int | None = None
        self._timer: asyncio.Task | None = None
        self._run_lock = asyncio.Lock()

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def next_fire_at(self) -> int | None:
        return self._next_fire_at

    def start(self) -> None:
        """Start the auto-refresh cadence. Must be called inside a running loop."""
        if self._active:
            logger.warning("Auto-refresh is already active")
            return

        self._schedule_next()
        self._active = True
        logger.info(
            f"Auto-refresh started - will refresh every "
            f"{self._interval_ms / MS_PER_MINUTE:g} minutes"
        )

    def stop(self) -> None:
        """Stop the cadence and cancel the armed timer."""
        if not self._active:
            logger.warning("Auto-refresh is not active")
            return

        self._cancel_timer()
        self._active = False
        self._next_fire_at = None
        logger.info("Auto-refresh stopped")

    async def force_refresh(self) -> None:
        """
        Run the callback now and restart the interval.

        Raises:
            Exception: Whatever the callback raised; the next timer is
                armed before the error propagates
        """
        if not self._active:
            logger.warning("Cannot force refresh - auto-refresh is not active")
            return

        logger.info("Force refresh triggered")
        self._cancel_timer()

        try:
            await self._invoke()
        except Exception as e:
            logger.error(f"Force refresh failed: {e}")
            raise
        finally:
            if self._active:
                self._schedule_next()

    def update_interval(self, interval_minutes: float) -> None:
        """
        Change the refresh interval.

        An active scheduler is restarted so the new cadence applies
        immediately instead of after the stale interval.
        """
        if interval_minutes <= 0:
            raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")

        new_interval_ms = int(interval_minutes * MS_PER_MINUTE)
        if new_interval_ms == self._interval_ms:
            logger.info("Refresh interval unchanged")
            return

        self._interval_ms = new_interval_ms
        logger.info(f"Updated refresh interval to {interval_minutes:g} minutes")

        if self._active:
            self.stop()
            self.start()

    def time_until_next_fire(self) -> int | None:
        """Milliseconds until the next fire, or None when inactive."""
        if not self._active or self._next_fire_at is None:
            return None
        return max(0, self._next_fire_at - self._clock())

    def format_time_until_next_fire(self) -> str:
        """Human-readable time until the next fire."""
        remaining = self.time_until_next_fire()
        if remaining is None:
            return "Auto-refresh not active"

        minutes = math.ceil(remaining / MS_PER_MINUTE)
        if minutes < 1:
            return "Less than 1 minute"
        if minutes == 1:
            return "1 minute"
        return f"{minutes} minutes"

    def status(self) -> dict[str, Any]:
        """Snapshot of the scheduler state."""
        return {
            "active": self._active,
            "interval_minutes": self._interval_ms / MS_PER_MINUTE,
            "next_fire_at": self._next_fire_at,
            "time_until_next_fire": self.time_until_next_fire(),
            "time_until_next_fire_formatted": self.format_time_until_next_fire(),
        }

    def _schedule_next(self) -> None:
        """Arm a one-shot timer for one interval from now."""
        # Fails outside a running loop before any state changes.
        asyncio.get_running_loop()
        self._cancel_timer()
        self._next_fire_at = self._clock() + self._interval_ms
        self._timer = asyncio.create_task(self._fire_after(self._interval_ms))

        next_fire = datetime.fromtimestamp(self._next_fire_at / 1000)
        logger.info(f"Next auto-refresh scheduled for: {next_fire:%H:%M:%S}")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _fire_after(self, delay_ms: int) -> None:
        await self._sleep(delay_ms / 1000)

        # Release the handle first so stop() from inside the callback
        # does not cancel the running fire.
        self._timer = None
        if not self._active:
            return

        logger.info("Auto-refresh triggered")
        try:
            await self._invoke()
        except Exception as e:
            logger.error(f"Auto-refresh failed: {e}")

        if self._active and self._timer is None:
            self._schedule_next()

    async def _invoke(self) -> None:
        async with self._run_lock:
            await self._callback()
