"""Tests for the auto-refresh scheduler."""

import asyncio
import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from pulseboard.modules.dashboard.application.scheduler import (
    AutoRefreshScheduler,
    SchedulerState,
)

pytestmark = pytest.mark.anyio

FAST_JITTER = (0.01, 0.02)


def _scheduler(refresh, *, market_open=True, jitter=FAST_JITTER, **kwargs) -> AutoRefreshScheduler:
    is_open = market_open if callable(market_open) else (lambda _now, _tz: market_open)
    return AutoRefreshScheduler(
        refresh,
        realtime_pair=("5m", "1m"),
        jitter=jitter,
        market_open=is_open,
        rng=random.Random(7),
        **kwargs,
    )


async def test_realtime_pair_during_market_hours_arms_task() -> None:
    refresh = AsyncMock()
    scheduler = _scheduler(refresh)

    armed = await scheduler.start("AAPL", "5m", "1m")

    assert armed
    assert scheduler.is_armed
    assert scheduler.state is SchedulerState.SCHEDULED
    refresh.assert_awaited_once_with("AAPL", "5m", "1m")

    await asyncio.sleep(0.1)
    assert refresh.await_count >= 3
    scheduler.stop()


async def test_period_drawn_within_jitter_bounds() -> None:
    scheduler = _scheduler(AsyncMock(), jitter=(2.0, 3.0))

    await scheduler.start("AAPL", "5m", "1m")

    assert 2.0 <= scheduler.period < 3.0
    scheduler.stop()
    assert scheduler.period is None


async def test_other_ranges_refresh_once() -> None:
    refresh = AsyncMock()
    scheduler = _scheduler(refresh)

    armed = await scheduler.start("AAPL", "1mo", "1d")
    await asyncio.sleep(0.05)

    assert not armed
    assert not scheduler.is_armed
    refresh.assert_awaited_once_with("AAPL", "1mo", "1d")


async def test_market_closed_refreshes_once() -> None:
    refresh = AsyncMock()
    scheduler = _scheduler(refresh, market_open=False)

    armed = await scheduler.start("AAPL", "5m", "1m")
    await asyncio.sleep(0.05)

    assert not armed
    assert refresh.await_count == 1


async def test_restart_replaces_previous_task() -> None:
    refresh = AsyncMock()
    scheduler = _scheduler(refresh)

    await scheduler.start("AAPL", "5m", "1m")
    first_task = scheduler._task
    await scheduler.start("MSFT", "5m", "1m")
    await asyncio.sleep(0.1)

    assert first_task.cancelled() or first_task.done()
    assert scheduler.symbol == "MSFT"
    symbols = {call.args[0] for call in refresh.await_args_list[2:]}
    # 旧任务不再触发刷新
    assert symbols == {"MSFT"}
    scheduler.stop()


async def test_stop_prevents_further_refreshes() -> None:
    refresh = AsyncMock()
    scheduler = _scheduler(refresh)
    await scheduler.start("AAPL", "5m", "1m")

    scheduler.stop()
    calls = refresh.await_count
    await asyncio.sleep(0.08)

    assert refresh.await_count == calls
    assert scheduler.state is SchedulerState.IDLE
    assert not scheduler.is_armed


async def test_stop_is_idempotent() -> None:
    scheduler = _scheduler(AsyncMock())

    scheduler.stop()
    scheduler.stop()

    assert scheduler.state is SchedulerState.IDLE


async def test_stop_during_immediate_refresh_wins() -> None:
    scheduler: AutoRefreshScheduler

    async def refresh(*_args) -> None:
        scheduler.stop(reason="paused")

    scheduler = _scheduler(refresh)

    armed = await scheduler.start("AAPL", "5m", "1m")

    assert not armed
    assert not scheduler.is_armed


async def test_refresh_errors_reported_and_loop_continues() -> None:
    refresh = AsyncMock(side_effect=RuntimeError("boom"))
    on_error = MagicMock()
    scheduler = _scheduler(refresh, on_error=on_error)

    armed = await scheduler.start("AAPL", "5m", "1m")
    await asyncio.sleep(0.08)

    assert armed
    assert scheduler.is_armed
    assert on_error.call_count >= 2
    assert isinstance(on_error.call_args.args[0], RuntimeError)
    scheduler.stop()


async def test_stops_after_close_when_configured() -> None:
    states = iter([True])

    def market_open(_now, _tz) -> bool:
        return next(states, False)

    refresh = AsyncMock()
    scheduler = _scheduler(refresh, market_open=market_open, stop_after_close=True)

    armed = await scheduler.start("AAPL", "5m", "1m")
    await asyncio.sleep(0.08)

    assert armed
    assert refresh.await_count == 1
    assert scheduler.state is SchedulerState.IDLE
    assert not scheduler.is_armed


def test_invalid_jitter_rejected() -> None:
    with pytest.raises(ValueError):
        AutoRefreshScheduler(AsyncMock(), jitter=(3.0, 2.0))
