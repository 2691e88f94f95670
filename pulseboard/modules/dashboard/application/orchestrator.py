"""Dashboard orchestrator.

把用户操作和定时刷新分派到对应的 (feed client, renderer)，并维护每个面板的
暂停标志、分页和请求令牌。
"""

import asyncio
from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger

from pulseboard.core.domain.exceptions import RateLimited
from pulseboard.core.infrastructure.logging import BusinessEvents
from pulseboard.modules.dashboard.application.renderers import PanelRenderer
from pulseboard.modules.dashboard.application.scheduler import (
    AutoRefreshScheduler,
    RefreshCallback,
)
from pulseboard.modules.dashboard.domain.state import PanelState
from pulseboard.modules.dashboard.domain.view import PanelView
from pulseboard.modules.feeds.application.cache import FetchCache
from pulseboard.modules.feeds.domain.config import FeedConfig
from pulseboard.modules.feeds.domain.models import FeedKind
from pulseboard.modules.feeds.infrastructure.clients.base import BaseFeedClient

SchedulerFactory = Callable[
    [RefreshCallback, Callable[[Exception], None]], AutoRefreshScheduler
]

LIST_PANELS = (FeedKind.NEWS, FeedKind.TRENDS, FeedKind.REDDIT)


class Orchestrator:
    """Owns panel state and drives fetch → cache → render for every panel."""

    def __init__(
        self,
        *,
        clients: Mapping[FeedKind, BaseFeedClient],
        renderers: Mapping[FeedKind, PanelRenderer],
        configs: Mapping[FeedKind, FeedConfig],
        cache: FetchCache,
        scheduler_factory: SchedulerFactory,
        defaults: Mapping[FeedKind, dict[str, str]] | None = None,
    ):
        self.clients = dict(clients)
        self.renderers = dict(renderers)
        self.configs = dict(configs)
        self.cache = cache
        self.defaults = {kind: dict(params) for kind, params in (defaults or {}).items()}
        self.states = {
            kind: PanelState(
                kind=kind,
                page_size=config.page_size,
                params=dict(self.defaults.get(kind, {})),
            )
            for kind, config in self.configs.items()
        }
        self.views = {kind: PanelView(kind=kind) for kind in self.configs}
        self.scheduler = scheduler_factory(
            self._scheduled_finance_refresh, self.scheduler_error
        )
        self.bootstrapped = False

    # ============================================
    # 刷新
    # ============================================

    async def refresh(
        self,
        kind: FeedKind,
        params: Mapping[str, Any] | None = None,
        *,
        force: bool = False,
        scheduled: bool = False,
    ) -> PanelView:
        """Fetch (or reuse the cached model) and render one panel.

        Paused panels are left untouched; scheduled refreshes are also skipped
        while auto-refresh is disabled by a rate limit.

        Raises:
            InvalidParameter: 参数不合法
        """
        state = self.states[kind]
        view = self.views[kind]
        if state.paused:
            logger.debug(f"Refresh suppressed for paused panel {kind.value}")
            return view
        if scheduled and state.auto_refresh_disabled:
            return view

        client = self.clients[kind]
        merged = {**state.params, **{k: v for k, v in (params or {}).items() if v}}
        query = client.query_for(merged)
        if merged != state.params:
            state.params = merged
            state.current_page = 1

        token = state.issue_token()
        try:
            model = await self.cache.get_or_fetch(
                query,
                lambda: client.fetch(merged),
                ttl=self.configs[kind].ttl_sec,
                force_refresh=force,
            )
        except RateLimited as exc:
            if state.is_latest(token) and not state.paused:
                self._disable_auto_refresh(kind, exc)
            return view

        if state.paused or not state.is_latest(token):
            BusinessEvents.render_discarded(
                panel=kind.value, token=token, latest_token=state.latest_token
            )
            return view

        state.last_model = model
        self._render(kind)
        return view

    async def select_finance(
        self,
        symbol: str | None = None,
        time_range: str | None = None,
        interval: str | None = None,
    ) -> PanelView:
        """Switch the finance panel and (re)start its auto-refresh."""
        state = self.states[FeedKind.FINANCE]
        requested = {"symbol": symbol, "range": time_range, "interval": interval}
        merged = {**state.params, **{k: v for k, v in requested.items() if v}}
        prepared = self.clients[FeedKind.FINANCE].prepare(merged)
        state.params = prepared

        if state.paused:
            return self.views[FeedKind.FINANCE]
        if state.auto_refresh_disabled:
            self.scheduler.stop(reason="rate_limited")
            return await self.refresh(FeedKind.FINANCE, prepared)

        await self.scheduler.start(prepared["symbol"], prepared["range"], prepared["interval"])
        return self.views[FeedKind.FINANCE]

    async def _scheduled_finance_refresh(
        self, symbol: str, time_range: str, interval: str
    ) -> None:
        await self.refresh(
            FeedKind.FINANCE,
            {"symbol": symbol, "range": time_range, "interval": interval},
            scheduled=True,
        )

    def scheduler_error(self, exc: Exception) -> None:
        """Show a tick failure inline; the scheduler keeps running."""
        self.renderers[FeedKind.FINANCE].render_error(
            self.views[FeedKind.FINANCE], "Unable to refresh financial data."
        )

    # ============================================
    # 分页
    # ============================================

    def next_page(self, kind: FeedKind) -> PanelView:
        state = self.states[kind]
        if state.page().has_next:
            state.go_to(state.current_page + 1)
            self._render(kind)
        return self.views[kind]

    def previous_page(self, kind: FeedKind) -> PanelView:
        state = self.states[kind]
        if state.page().has_previous:
            state.go_to(state.current_page - 1)
            self._render(kind)
        return self.views[kind]

    # ============================================
    # 暂停 / 恢复 / 通知
    # ============================================

    def pause(self, kind: FeedKind) -> PanelView:
        """Suppress refreshes until resume; in-flight fetches go stale."""
        state = self.states[kind]
        state.paused = True
        state.issue_token()
        if kind is FeedKind.FINANCE:
            self.scheduler.stop(reason="paused")
        return self.views[kind]

    async def resume(self, kind: FeedKind) -> PanelView:
        """Unpause and refresh immediately."""
        state = self.states[kind]
        if not state.paused:
            return self.views[kind]
        state.paused = False
        if kind is FeedKind.FINANCE:
            return await self.select_finance()
        return await self.refresh(kind)

    async def toggle_pause(self, kind: FeedKind) -> PanelView:
        if self.states[kind].paused:
            return await self.resume(kind)
        return self.pause(kind)

    def dismiss_notice(self, kind: FeedKind) -> PanelView:
        self.states[kind].notice = None
        self.views[kind].notice = None
        return self.views[kind]

    async def retry(self, kind: FeedKind) -> PanelView:
        """Clear a rate-limit notice, re-enable auto-refresh and fetch again."""
        state = self.states[kind]
        state.auto_refresh_disabled = False
        self.dismiss_notice(kind)
        if kind is FeedKind.FINANCE:
            return await self.select_finance()
        return await self.refresh(kind, force=True)

    # ============================================
    # 生命周期
    # ============================================

    async def bootstrap(self) -> None:
        """Render every panel once, then start the finance scheduler."""
        await asyncio.gather(*(self.refresh(kind) for kind in LIST_PANELS if kind in self.states))
        if FeedKind.FINANCE in self.states:
            await self.select_finance()
        self.bootstrapped = True
        logger.info("Dashboard bootstrapped")

    def shutdown(self) -> None:
        self.scheduler.stop(reason="shutdown")
        for view in self.views.values():
            view.replace_chart(None)

    def _render(self, kind: FeedKind) -> None:
        state = self.states[kind]
        view = self.views[kind]
        if state.last_model is None:
            return
        try:
            self.renderers[kind].render(state.last_model, state, view)
        except Exception as exc:
            logger.exception(f"Failed to render {kind.value} panel: {exc}")
            self.renderers[kind].render_error(view, f"Unable to display {kind.value}.")

    def _disable_auto_refresh(self, kind: FeedKind, exc: RateLimited) -> None:
        state = self.states[kind]
        state.auto_refresh_disabled = True
        state.notice = f"{exc.message.rstrip('.')}. Auto-refresh is paused until you retry."
        self.views[kind].notice = state.notice
        if kind is FeedKind.FINANCE:
            self.scheduler.stop(reason="rate_limited")
