"""Auto-refresh scheduler for the real-time finance panel.

状态机：Idle -> Scheduled(symbol, range, interval, task)。
- start() 总是先 stop()，再立即刷新一次；
- 只有 (range, interval) 为实时组合且处于交易时段时才启动定时任务；
- 周期在 [min, max) 秒内随机抽取一次。
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from enum import Enum
from zoneinfo import ZoneInfo

from loguru import logger

from pulseboard.core.infrastructure.logging import BusinessEvents
from pulseboard.modules.dashboard.domain.market_hours import is_market_open

RefreshCallback = Callable[[str, str, str], Awaitable[None]]


class SchedulerState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"


def _utc_now() -> datetime:
    return datetime.now(UTC)


class AutoRefreshScheduler:
    """At most one live refresh task per instance."""

    def __init__(
        self,
        refresh: RefreshCallback,
        *,
        realtime_pair: tuple[str, str] = ("5m", "1m"),
        jitter: tuple[float, float] = (2.0, 3.0),
        tz: str | ZoneInfo = "America/New_York",
        clock: Callable[[], datetime] = _utc_now,
        market_open: Callable[[datetime, str | ZoneInfo], bool] = is_market_open,
        rng: random.Random | None = None,
        stop_after_close: bool = False,
        on_error: Callable[[Exception], None] | None = None,
    ):
        if jitter[0] > jitter[1]:
            raise ValueError("jitter lower bound must not exceed upper bound")
        self._refresh = refresh
        self.realtime_pair = realtime_pair
        self.jitter = jitter
        self.tz = tz
        self._clock = clock
        self._market_open = market_open
        self._rng = rng or random.Random()
        self.stop_after_close = stop_after_close
        self._on_error = on_error

        self.state = SchedulerState.IDLE
        self.symbol: str | None = None
        self.time_range: str | None = None
        self.interval: str | None = None
        self.period: float | None = None
        self._task: asyncio.Task[None] | None = None
        self._generation = 0

    @property
    def is_armed(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, symbol: str, time_range: str, interval: str) -> bool:
        """Refresh once now; arm the periodic task when eligible.

        Returns True if a periodic task was armed.
        """
        self.stop(reason="restart")
        self._generation += 1
        generation = self._generation
        self.symbol, self.time_range, self.interval = symbol, time_range, interval
        self.state = SchedulerState.SCHEDULED

        await self._run_refresh(symbol, time_range, interval)

        # stop() or a newer start() ran while the immediate refresh was in flight
        if generation != self._generation:
            return False
        if (time_range, interval) != tuple(self.realtime_pair):
            return False
        if not self._market_open(self._clock(), self.tz):
            logger.debug(f"Market closed, not arming auto-refresh for {symbol}")
            return False

        self.period = self._draw_period()
        self._task = asyncio.create_task(
            self._loop(generation, self.period, symbol, time_range, interval),
            name=f"auto-refresh-{symbol}",
        )
        BusinessEvents.scheduler_armed(
            symbol=symbol, time_range=time_range, interval=interval, period_sec=self.period
        )
        return True

    def stop(self, reason: str = "stopped") -> None:
        """Cancel the periodic task; safe to call in any state."""
        was_scheduled = self.state is SchedulerState.SCHEDULED
        self._generation += 1
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self.period = None
        self.state = SchedulerState.IDLE
        if was_scheduled:
            BusinessEvents.scheduler_stopped(symbol=self.symbol, reason=reason)

    def _draw_period(self) -> float:
        low, high = self.jitter
        return low + self._rng.random() * (high - low)

    async def _loop(
        self, generation: int, period: float, symbol: str, time_range: str, interval: str
    ) -> None:
        while True:
            await asyncio.sleep(period)
            if generation != self._generation:
                return
            if self.stop_after_close and not self._market_open(self._clock(), self.tz):
                self._task = None
                self.stop(reason="market_closed")
                return
            await self._run_refresh(symbol, time_range, interval)

    async def _run_refresh(self, symbol: str, time_range: str, interval: str) -> None:
        try:
            await self._refresh(symbol, time_range, interval)
        except Exception as exc:
            logger.exception(f"Auto-refresh failed for {symbol}: {exc}")
            if self._on_error is not None:
                self._on_error(exc)
