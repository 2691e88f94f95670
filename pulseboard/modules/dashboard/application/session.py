"""Dashboard session.

每个进程一个会话，持有缓存、调度器、面板状态、feed client、渲染器和聊天会话。
"""

import asyncio

import httpx
from loguru import logger

from pulseboard.modules.dashboard.application.chat import ChatSession
from pulseboard.modules.dashboard.application.orchestrator import Orchestrator


class DashboardSession:
    """Explicit owner of all dashboard state."""

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        orchestrator: Orchestrator,
        chat: ChatSession,
        owns_http: bool = True,
    ):
        self.http = http
        self.orchestrator = orchestrator
        self.chat = chat
        self._owns_http = owns_http
        self._bootstrap_lock = asyncio.Lock()

    @property
    def cache(self):
        return self.orchestrator.cache

    @property
    def scheduler(self):
        return self.orchestrator.scheduler

    async def ensure_bootstrapped(self) -> None:
        """Bootstrap on first page load only."""
        async with self._bootstrap_lock:
            if not self.orchestrator.bootstrapped:
                await self.orchestrator.bootstrap()

    async def aclose(self) -> None:
        self.orchestrator.shutdown()
        if self._owns_http:
            await self.http.aclose()
        logger.info("Dashboard session closed")
