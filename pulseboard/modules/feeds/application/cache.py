"""Fetch cache.

按 FeedQuery 缓存成功的抓取结果。降级模型和抛出的异常都不会写入缓存，
已有的成功条目保持不变。
"""

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from loguru import logger

from pulseboard.core.infrastructure.logging import BusinessEvents
from pulseboard.modules.feeds.domain.models import FeedModel, FeedQuery

M = TypeVar("M", bound=FeedModel)


@dataclass
class CacheEntry:
    query: FeedQuery
    payload: FeedModel
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at


class FetchCache:
    """Per-query TTL cache in front of the feed clients."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[FeedQuery, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, query: object) -> bool:
        return query in self._entries

    def get(self, query: FeedQuery) -> CacheEntry | None:
        return self._entries.get(query)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_fetch(
        self,
        query: FeedQuery,
        fetcher: Callable[[], Awaitable[M]],
        ttl: float,
        force_refresh: bool = False,
    ) -> M:
        """Return a fresh cached payload or run ``fetcher``.

        A ``ttl`` of zero or less never serves from cache.
        """
        entry = self._entries.get(query)
        if entry is not None and not force_refresh and ttl > 0:
            age = entry.age(self._clock())
            if age < ttl:
                BusinessEvents.cache_hit(cache_key=query.cache_key, age_sec=age)
                return entry.payload  # type: ignore[return-value]

        model = await fetcher()

        if model.degraded:
            logger.debug(f"Not caching degraded payload for {query.cache_key}")
            return model
        if ttl > 0:
            self._entries[query] = CacheEntry(
                query=query, payload=model, fetched_at=self._clock()
            )
        return model
