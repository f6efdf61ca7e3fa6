"""Tests for the auto-refresh scheduler."""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from conftest import FakeClock, settle
from weathercards.scheduler.refresh import RefreshScheduler

MINUTE = 60 * 1000
INTERVAL = 30 * MINUTE


def make_scheduler(
    clock: FakeClock,
    callback: AsyncMock | None = None,
    interval_minutes: float = 30,
) -> RefreshScheduler:
    return RefreshScheduler(
        callback or AsyncMock(),
        interval_minutes=interval_minutes,
        clock=clock,
        sleep=clock.sleep,
    )


class TestSchedulerState:
    """Tests for state transitions and status."""

    def test_initially_idle(self, clock: FakeClock) -> None:
        """Test a new scheduler is idle."""
        scheduler = make_scheduler(clock)

        assert scheduler.is_active is False
        assert scheduler.time_until_next_fire() is None
        assert scheduler.status() == {
            "active": False,
            "interval_minutes": 30,
            "next_fire_at": None,
            "time_until_next_fire": None,
            "time_until_next_fire_formatted": "Auto-refresh not active",
        }

    def test_rejects_non_positive_interval(self, clock: FakeClock) -> None:
        with pytest.raises(ValueError):
            make_scheduler(clock, interval_minutes=0)

    def test_start_outside_loop_stays_idle(self, clock: FakeClock) -> None:
        """Test a start that cannot arm a timer leaves the scheduler idle."""
        scheduler = make_scheduler(clock)

        with pytest.raises(RuntimeError):
            scheduler.start()

        assert scheduler.is_active is False
        assert scheduler.time_until_next_fire() is None

    @pytest.mark.asyncio
    async def test_start_after_failed_start(self, clock: FakeClock) -> None:
        """Test a later start inside a loop arms the timer."""
        scheduler = make_scheduler(clock)
        with pytest.raises(RuntimeError):
            await asyncio.to_thread(scheduler.start)

        scheduler.start()
        await settle()

        assert scheduler.is_active is True
        assert clock.pending == 1
        scheduler.stop()

    @pytest.mark.asyncio
    async def test_start_arms_timer(self, clock: FakeClock) -> None:
        """Test start sets the next fire one interval ahead."""
        scheduler = make_scheduler(clock)
        scheduler.start()
        await settle()

        assert scheduler.is_active is True
        assert scheduler.next_fire_at == clock.now_ms + INTERVAL
        assert scheduler.time_until_next_fire() == INTERVAL
        assert scheduler.format_time_until_next_fire() == "30 minutes"
        assert clock.pending == 1
        scheduler.stop()

    @pytest.mark.asyncio
    async def test_double_start_is_noop(
        self, clock: FakeClock, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test a second start neither re-arms nor duplicates the timer."""
        callback = AsyncMock()
        scheduler = make_scheduler(clock, callback)

        scheduler.start()
        await settle()
        first_fire_at = scheduler.next_fire_at
        clock.now_ms += MINUTE
        scheduler.start()
        await settle()

        assert "already active" in caplog.text
        assert scheduler.next_fire_at == first_fire_at
        assert clock.pending == 1

        await clock.advance(INTERVAL - MINUTE)
        assert callback.await_count == 1
        scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_when_idle_is_noop(
        self, clock: FakeClock, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test stop on an idle scheduler only warns."""
        scheduler = make_scheduler(clock)

        with caplog.at_level(logging.WARNING):
            scheduler.stop()

        assert "not active" in caplog.text
        assert scheduler.is_active is False

    @pytest.mark.asyncio
    async def test_stop_cancels_timer(self, clock: FakeClock) -> None:
        """Test no fire happens after stop."""
        callback = AsyncMock()
        scheduler = make_scheduler(clock, callback)
        scheduler.start()
        await settle()

        scheduler.stop()
        await clock.advance(INTERVAL * 2)

        callback.assert_not_awaited()
        assert scheduler.next_fire_at is None
        assert clock.pending == 0

    @pytest.mark.asyncio
    async def test_time_until_next_fire_clamps_to_zero(self, clock: FakeClock) -> None:
        """Test remaining time never goes negative."""
        scheduler = make_scheduler(clock)
        scheduler.start()
        await settle()

        clock.now_ms += INTERVAL + 5000
        assert scheduler.time_until_next_fire() == 0
        assert scheduler.format_time_until_next_fire() == "Less than 1 minute"
        scheduler.stop()

    @pytest.mark.asyncio
    async def test_format_single_minute(self, clock: FakeClock) -> None:
        """Test partial minutes round up."""
        scheduler = make_scheduler(clock)
        scheduler.start()
        await settle()

        clock.now_ms += INTERVAL - 30_000
        assert scheduler.format_time_until_next_fire() == "1 minute"
        scheduler.stop()


class TestSchedulerFiring:
    """Tests for timer fires."""

    @pytest.mark.asyncio
    async def test_fires_each_interval(self, clock: FakeClock) -> None:
        """Test the callback runs once per elapsed interval."""
        callback = AsyncMock()
        scheduler = make_scheduler(clock, callback)
        scheduler.start()
        await settle()

        await clock.advance(INTERVAL - 1)
        callback.assert_not_awaited()

        await clock.advance(1)
        assert callback.await_count == 1
        assert scheduler.next_fire_at == clock.now_ms + INTERVAL

        await clock.advance(INTERVAL)
        assert callback.await_count == 2
        scheduler.stop()

    @pytest.mark.asyncio
    async def test_failing_callback_keeps_cadence(
        self, clock: FakeClock, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test three intervals with an always-failing callback."""
        callback = AsyncMock(side_effect=RuntimeError("boom"))
        scheduler = make_scheduler(clock, callback, interval_minutes=30)
        scheduler.start()
        await settle()

        for _ in range(3):
            await clock.advance(INTERVAL)

        assert callback.await_count == 3
        assert scheduler.is_active is True
        assert "Auto-refresh failed: boom" in caplog.text
        scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_inside_callback(self, clock: FakeClock) -> None:
        """Test a callback can stop the scheduler without re-arming."""
        scheduler: RefreshScheduler

        async def callback() -> None:
            scheduler.stop()

        scheduler = RefreshScheduler(callback, 30, clock=clock, sleep=clock.sleep)
        scheduler.start()
        await settle()

        await clock.advance(INTERVAL)

        assert scheduler.is_active is False
        assert clock.pending == 0


class TestForceRefresh:
    """Tests for force_refresh."""

    @pytest.mark.asyncio
    async def test_noop_when_idle(self, clock: FakeClock) -> None:
        """Test forcing an idle scheduler does not invoke the callback."""
        callback = AsyncMock()
        scheduler = make_scheduler(clock, callback)

        await scheduler.force_refresh()

        callback.assert_not_awaited()
        assert scheduler.is_active is False

    @pytest.mark.asyncio
    async def test_runs_now_and_restarts_interval(self, clock: FakeClock) -> None:
        """Test force runs immediately and the old fire time is dropped."""
        callback = AsyncMock()
        scheduler = make_scheduler(clock, callback)
        scheduler.start()
        await settle()

        await clock.advance(10 * MINUTE)
        await scheduler.force_refresh()
        await settle()

        assert callback.await_count == 1
        assert scheduler.next_fire_at == clock.now_ms + INTERVAL
        assert clock.pending == 1

        await clock.advance(20 * MINUTE)
        assert callback.await_count == 1

        await clock.advance(10 * MINUTE)
        assert callback.await_count == 2
        scheduler.stop()

    @pytest.mark.asyncio
    async def test_failure_propagates_and_rearms(self, clock: FakeClock) -> None:
        """Test a forced failure reaches the caller and the timer is re-armed."""
        callback = AsyncMock(side_effect=RuntimeError("forced boom"))
        scheduler = make_scheduler(clock, callback)
        scheduler.start()
        await settle()

        with pytest.raises(RuntimeError, match="forced boom"):
            await scheduler.force_refresh()
        await settle()

        assert scheduler.is_active is True
        assert scheduler.next_fire_at == clock.now_ms + INTERVAL
        assert clock.pending == 1
        scheduler.stop()

    @pytest.mark.asyncio
    async def test_force_during_fire_is_serialized(self, clock: FakeClock) -> None:
        """Test a forced refresh waits for a running timer fire."""
        running = 0
        peak = 0
        calls = 0
        gate = asyncio.Event()

        async def callback() -> None:
            nonlocal running, peak, calls
            calls += 1
            running += 1
            peak = max(peak, running)
            await gate.wait()
            running -= 1

        scheduler = RefreshScheduler(callback, 30, clock=clock, sleep=clock.sleep)
        scheduler.start()
        await settle()

        await clock.advance(INTERVAL)
        assert calls == 1

        forced = asyncio.create_task(scheduler.force_refresh())
        await settle()
        assert calls == 1

        gate.set()
        await forced
        await settle()

        assert calls == 2
        assert peak == 1
        assert clock.pending == 1
        scheduler.stop()


class TestUpdateInterval:
    """Tests for update_interval."""

    @pytest.mark.asyncio
    async def test_same_interval_is_noop(
        self, clock: FakeClock, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test setting the current interval changes nothing."""
        scheduler = make_scheduler(clock)
        scheduler.start()
        await settle()
        fire_at = scheduler.next_fire_at

        clock.now_ms += MINUTE
        with caplog.at_level(logging.INFO):
            scheduler.update_interval(30)

        assert "unchanged" in caplog.text
        assert scheduler.next_fire_at == fire_at
        scheduler.stop()

    @pytest.mark.asyncio
    async def test_new_interval_rearms_immediately(self, clock: FakeClock) -> None:
        """Test the next fire uses the new interval from now."""
        callback = AsyncMock()
        scheduler = make_scheduler(clock, callback)
        scheduler.start()
        await settle()

        await clock.advance(10 * MINUTE)
        scheduler.update_interval(5)
        await settle()

        assert scheduler.is_active is True
        assert scheduler.next_fire_at == clock.now_ms + 5 * MINUTE
        assert scheduler.status()["interval_minutes"] == 5
        assert clock.pending == 1

        await clock.advance(5 * MINUTE)
        assert callback.await_count == 1
        scheduler.stop()

    def test_update_while_idle(self, clock: FakeClock) -> None:
        """Test an idle scheduler only records the new interval."""
        scheduler = make_scheduler(clock)

        scheduler.update_interval(10)

        assert scheduler.interval_ms == 10 * MINUTE
        assert scheduler.is_active is False
