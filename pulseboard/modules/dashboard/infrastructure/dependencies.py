"""Dashboard module dependencies."""

from collections.abc import Callable
from datetime import datetime
from random import Random

import httpx
from fastapi import FastAPI, Request

from pulseboard.core.config import Settings
from pulseboard.modules.dashboard.application.chat import ChatSession
from pulseboard.modules.dashboard.application.orchestrator import Orchestrator
from pulseboard.modules.dashboard.application.renderers import default_renderers
from pulseboard.modules.dashboard.application.scheduler import (
    AutoRefreshScheduler,
    RefreshCallback,
)
from pulseboard.modules.dashboard.application.session import DashboardSession
from pulseboard.modules.dashboard.domain.view import ChartFactory
from pulseboard.modules.dashboard.infrastructure.charts import ChartJsFactory
from pulseboard.modules.feeds.application.cache import FetchCache
from pulseboard.modules.feeds.domain.config import build_feed_configs
from pulseboard.modules.feeds.domain.models import FeedKind
from pulseboard.modules.feeds.infrastructure.clients import FeedClientFactory

IN_PROCESS_GATEWAY_HOST = "http://gateway"


def build_gateway_client(app: FastAPI, settings: Settings) -> httpx.AsyncClient:
    """HTTP client for the gateway: in-process via ASGI unless a URL is configured."""
    if settings.GATEWAY_BASE_URL:
        return httpx.AsyncClient(
            base_url=settings.GATEWAY_BASE_URL.rstrip("/"),
            timeout=settings.FETCHER_TIMEOUT_SEC,
            headers={"User-Agent": settings.FETCHER_USER_AGENT},
        )
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url=f"{IN_PROCESS_GATEWAY_HOST}{settings.API_PREFIX}",
        timeout=settings.FETCHER_TIMEOUT_SEC,
    )


def default_panel_params(settings: Settings) -> dict[FeedKind, dict[str, str]]:
    realtime_range, realtime_interval = settings.realtime_pair
    return {
        FeedKind.NEWS: {
            "category": settings.DEFAULT_NEWS_CATEGORY,
            "country": settings.DEFAULT_COUNTRY,
            "language": settings.DEFAULT_LANGUAGE,
        },
        FeedKind.TRENDS: {
            "type": settings.DEFAULT_TRENDS_TYPE,
            "category": "all",
            "geo": settings.DEFAULT_TRENDS_GEO,
            "language": settings.DEFAULT_LANGUAGE,
        },
        FeedKind.REDDIT: {"t": settings.DEFAULT_REDDIT_PERIOD},
        FeedKind.FINANCE: {
            "symbol": settings.DEFAULT_SYMBOL,
            "range": realtime_range,
            "interval": realtime_interval,
        },
    }


def build_dashboard_session(
    settings: Settings,
    http: httpx.AsyncClient,
    *,
    chart_factory: ChartFactory | None = None,
    clock: Callable[[], datetime] | None = None,
    rng: Random | None = None,
    owns_http: bool = True,
) -> DashboardSession:
    configs = build_feed_configs(settings)

    def scheduler_factory(
        refresh: RefreshCallback, on_error: Callable[[Exception], None]
    ) -> AutoRefreshScheduler:
        extra = {"clock": clock} if clock is not None else {}
        return AutoRefreshScheduler(
            refresh,
            realtime_pair=settings.realtime_pair,
            jitter=(settings.REFRESH_JITTER_MIN_SEC, settings.REFRESH_JITTER_MAX_SEC),
            tz=settings.MARKET_TIMEZONE,
            rng=rng,
            stop_after_close=settings.SCHEDULER_STOP_AFTER_CLOSE,
            on_error=on_error,
            **extra,
        )

    orchestrator = Orchestrator(
        clients={kind: FeedClientFactory.create(kind, http, configs[kind]) for kind in configs},
        renderers=default_renderers(chart_factory or ChartJsFactory(), settings.CHART_MAX_POINTS),
        configs=configs,
        cache=FetchCache(),
        scheduler_factory=scheduler_factory,
        defaults=default_panel_params(settings),
    )
    chat = ChatSession(
        http,
        max_messages=settings.CHAT_MAX_MESSAGES,
        max_tokens=settings.CHAT_MAX_SESSION_TOKENS,
    )
    return DashboardSession(http=http, orchestrator=orchestrator, chat=chat, owns_http=owns_http)


async def get_dashboard_session(request: Request) -> DashboardSession:
    return request.app.state.dashboard
