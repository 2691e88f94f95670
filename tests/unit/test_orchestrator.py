"""Tests for the dashboard orchestrator."""

import asyncio
import random
from collections import Counter
from datetime import datetime

import httpx
import pytest

from conftest import (
    chart_payload,
    gateway_error,
    json_response,
    mock_http,
    news_payload,
    reddit_payload,
)
from pulseboard.core.domain.exceptions import InvalidParameter
from pulseboard.modules.dashboard.application.scheduler import SchedulerState
from pulseboard.modules.dashboard.infrastructure.dependencies import build_dashboard_session
from pulseboard.modules.feeds.domain.models import FeedKind

pytestmark = pytest.mark.anyio

TRENDS_PAYLOAD = {
    "default": {
        "trendingSearchesDays": [
            {"formattedDate": "Today", "trendingSearches": [{"title": {"query": "Topic"}}]}
        ]
    }
}


class FakeGateway:
    """按路径返回固定响应的网关。"""

    def __init__(self) -> None:
        self.calls: Counter[str] = Counter()
        self.overrides: dict[str, httpx.Response] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        self.calls[path] += 1
        if path in self.overrides:
            return self.overrides[path]
        if path == "/news":
            return json_response(news_payload(12))
        if path == "/trends":
            return json_response(TRENDS_PAYLOAD)
        if path == "/reddit":
            return json_response(reddit_payload(3))
        if path.startswith("/finance/"):
            return json_response(chart_payload([150.0, 151.0, 152.0]))
        return gateway_error(404, "NOT_FOUND", "not found")


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
async def session(test_settings, gateway, market_open_time: datetime):
    dashboard = build_dashboard_session(
        test_settings,
        mock_http(gateway),
        clock=lambda: market_open_time,
        rng=random.Random(3),
    )
    yield dashboard
    await dashboard.aclose()


@pytest.fixture
def orchestrator(session):
    return session.orchestrator


# ============================================
# 启动与刷新
# ============================================


async def test_bootstrap_renders_every_panel(session, orchestrator, gateway) -> None:
    await session.ensure_bootstrapped()
    await session.ensure_bootstrapped()

    assert orchestrator.bootstrapped
    assert gateway.calls["/news"] == 1
    for kind in FeedKind:
        assert orchestrator.views[kind].html
        assert orchestrator.views[kind].error is None
    assert orchestrator.scheduler.is_armed
    assert orchestrator.views[FeedKind.FINANCE].chart is not None


async def test_cached_news_not_refetched_unless_forced(orchestrator, gateway) -> None:
    await orchestrator.refresh(FeedKind.NEWS)
    await orchestrator.refresh(FeedKind.NEWS)
    assert gateway.calls["/news"] == 1

    await orchestrator.refresh(FeedKind.NEWS, force=True)
    assert gateway.calls["/news"] == 2


async def test_reddit_always_live(orchestrator, gateway) -> None:
    await orchestrator.refresh(FeedKind.REDDIT)
    await orchestrator.refresh(FeedKind.REDDIT)

    assert gateway.calls["/reddit"] == 2


async def test_new_params_reset_page(orchestrator) -> None:
    await orchestrator.refresh(FeedKind.NEWS)
    orchestrator.next_page(FeedKind.NEWS)
    assert orchestrator.states[FeedKind.NEWS].current_page == 2

    await orchestrator.refresh(FeedKind.NEWS, {"category": "technology"})

    assert orchestrator.states[FeedKind.NEWS].current_page == 1
    assert orchestrator.states[FeedKind.NEWS].params["category"] == "technology"


async def test_invalid_params_rejected_without_state_change(orchestrator, gateway) -> None:
    with pytest.raises(InvalidParameter):
        await orchestrator.refresh(FeedKind.REDDIT, {"t": "year"})

    assert orchestrator.states[FeedKind.REDDIT].params["t"] == "day"
    assert gateway.calls["/reddit"] == 0


async def test_degraded_fetch_renders_error(orchestrator, gateway) -> None:
    gateway.overrides["/news"] = gateway_error(502, "NETWORK_ERROR", "upstream down")

    view = await orchestrator.refresh(FeedKind.NEWS)

    assert view.error == "Unable to fetch news: HTTP 502"
    assert "panel-error" in view.html


# ============================================
# 分页
# ============================================


async def test_next_and_previous_page(orchestrator) -> None:
    await orchestrator.refresh(FeedKind.NEWS)
    view = orchestrator.views[FeedKind.NEWS]
    assert "Headline 0" in view.html

    orchestrator.next_page(FeedKind.NEWS)
    assert "Headline 5" in view.html
    assert "Headline 0<" not in view.html

    orchestrator.next_page(FeedKind.NEWS)
    orchestrator.next_page(FeedKind.NEWS)
    assert orchestrator.states[FeedKind.NEWS].current_page == 3
    assert not view.show_next

    orchestrator.previous_page(FeedKind.NEWS)
    assert orchestrator.states[FeedKind.NEWS].current_page == 2


# ============================================
# 暂停 / 恢复
# ============================================


async def test_paused_panel_ignores_refresh(orchestrator, gateway) -> None:
    orchestrator.pause(FeedKind.REDDIT)

    await orchestrator.refresh(FeedKind.REDDIT)
    assert gateway.calls["/reddit"] == 0

    await orchestrator.resume(FeedKind.REDDIT)
    assert gateway.calls["/reddit"] == 1
    assert not orchestrator.states[FeedKind.REDDIT].paused


async def test_pausing_finance_stops_scheduler(orchestrator) -> None:
    await orchestrator.select_finance("AAPL", "5m", "1m")
    assert orchestrator.scheduler.is_armed

    await orchestrator.toggle_pause(FeedKind.FINANCE)
    assert orchestrator.states[FeedKind.FINANCE].paused
    assert orchestrator.scheduler.state is SchedulerState.IDLE

    await orchestrator.toggle_pause(FeedKind.FINANCE)
    assert orchestrator.scheduler.is_armed


async def test_scheduled_ticks_refresh_finance(orchestrator, gateway) -> None:
    await orchestrator.select_finance("AAPL", "5m", "1m")
    await asyncio.sleep(0.1)

    assert gateway.calls["/finance/AAPL"] >= 3


async def test_non_realtime_selection_does_not_arm(orchestrator, gateway) -> None:
    await orchestrator.select_finance("MSFT", "1mo", "1d")

    assert not orchestrator.scheduler.is_armed
    assert gateway.calls["/finance/MSFT"] == 1
    assert orchestrator.states[FeedKind.FINANCE].params == {
        "symbol": "MSFT",
        "range": "1mo",
        "interval": "1d",
    }


# ============================================
# 请求令牌
# ============================================


async def test_stale_response_is_discarded(test_settings, market_open_time) -> None:
    release_world = asyncio.Event()
    world_started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("category") == "general":
            world_started.set()
            await release_world.wait()
            return json_response({"articles": [{"title": "World", "url": "https://e.com/w"}]})
        return json_response({"articles": [{"title": "Tech", "url": "https://e.com/t"}]})

    session = build_dashboard_session(
        test_settings, mock_http(handler), clock=lambda: market_open_time
    )
    orchestrator = session.orchestrator
    try:
        slow = asyncio.create_task(orchestrator.refresh(FeedKind.NEWS, {"category": "world"}))
        await world_started.wait()
        await orchestrator.refresh(FeedKind.NEWS, {"category": "technology"})
        release_world.set()
        await slow

        view = orchestrator.views[FeedKind.NEWS]
        assert "Tech" in view.html
        assert "World" not in view.html
        assert orchestrator.states[FeedKind.NEWS].last_model.articles[0].title == "Tech"
    finally:
        await session.aclose()


async def test_pause_discards_in_flight_response(test_settings, market_open_time) -> None:
    release = asyncio.Event()
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await release.wait()
        return json_response({"articles": [{"title": "Late", "url": "https://e.com/late"}]})

    session = build_dashboard_session(
        test_settings, mock_http(handler), clock=lambda: market_open_time
    )
    orchestrator = session.orchestrator
    try:
        pending = asyncio.create_task(orchestrator.refresh(FeedKind.NEWS))
        await started.wait()
        orchestrator.pause(FeedKind.NEWS)
        release.set()
        await pending

        view = orchestrator.views[FeedKind.NEWS]
        assert "Late" not in view.html
        assert orchestrator.states[FeedKind.NEWS].last_model is None
    finally:
        await session.aclose()


# ============================================
# 限流通知
# ============================================


async def test_rate_limit_shows_notice_until_retry(orchestrator, gateway) -> None:
    gateway.overrides["/reddit"] = gateway_error(
        429, "RATE_LIMITED", "Too many requests, please retry later"
    )

    view = await orchestrator.refresh(FeedKind.REDDIT)

    state = orchestrator.states[FeedKind.REDDIT]
    assert state.auto_refresh_disabled
    assert view.notice == (
        "Too many requests, please retry later. Auto-refresh is paused until you retry."
    )

    del gateway.overrides["/reddit"]
    await orchestrator.retry(FeedKind.REDDIT)

    assert not state.auto_refresh_disabled
    assert view.notice is None
    assert "Post 0" in view.html


async def test_rate_limited_finance_stops_scheduler(orchestrator, gateway) -> None:
    await orchestrator.select_finance("AAPL", "5m", "1m")
    assert orchestrator.scheduler.is_armed

    gateway.overrides["/finance/AAPL"] = gateway_error(429, "RATE_LIMITED", "Slow down")
    await orchestrator.refresh(FeedKind.FINANCE)

    assert not orchestrator.scheduler.is_armed
    assert orchestrator.states[FeedKind.FINANCE].auto_refresh_disabled

    calls = gateway.calls["/finance/AAPL"]
    await orchestrator.select_finance()
    # 限流期间只刷新一次，不重新启动定时任务
    assert gateway.calls["/finance/AAPL"] == calls + 1
    assert not orchestrator.scheduler.is_armed

    del gateway.overrides["/finance/AAPL"]
    await orchestrator.retry(FeedKind.FINANCE)
    assert orchestrator.scheduler.is_armed


async def test_dismiss_notice_keeps_auto_refresh_disabled(orchestrator, gateway) -> None:
    gateway.overrides["/news"] = gateway_error(429, "RATE_LIMITED", "Slow down")
    await orchestrator.refresh(FeedKind.NEWS)

    view = orchestrator.dismiss_notice(FeedKind.NEWS)

    assert view.notice is None
    assert orchestrator.states[FeedKind.NEWS].auto_refresh_disabled


async def test_scheduler_error_rendered_inline(orchestrator) -> None:
    orchestrator.scheduler_error(RuntimeError("boom"))

    assert orchestrator.views[FeedKind.FINANCE].error == "Unable to refresh financial data."


async def test_shutdown_stops_scheduler_and_charts(session, orchestrator) -> None:
    await orchestrator.select_finance("AAPL", "5m", "1m")
    chart = orchestrator.views[FeedKind.FINANCE].chart

    orchestrator.shutdown()

    assert not orchestrator.scheduler.is_armed
    assert chart.destroyed
