"""Per-feed configuration.

面板分类词汇到上游分类的映射、缓存 TTL 与分页大小。
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from pulseboard.core.config import Settings
from pulseboard.modules.feeds.domain.models import FeedKind

NEWS_CATEGORY_MAP: Mapping[str, str] = MappingProxyType(
    {
        "world": "general",
        "local": "general",
        "general": "general",
        "other": "general",
        "technology": "technology",
        "tech": "technology",
        "science": "science",
        "health": "health",
        "finance": "business",
        "business": "business",
        "economy": "business",
        "sports": "sports",
        "events": "entertainment",
        "entertainment": "entertainment",
    }
)

# Realtime trends use single-letter category codes.
TRENDS_CATEGORY_MAP: Mapping[str, str] = MappingProxyType(
    {
        "all": "all",
        "top": "h",
        "h": "h",
        "technology": "t",
        "tech": "t",
        "science": "t",
        "t": "t",
        "business": "b",
        "finance": "b",
        "f": "b",
        "b": "b",
        "entertainment": "e",
        "e": "e",
        "health": "m",
        "m": "m",
        "sports": "s",
        "s": "s",
    }
)


# 网关路径模板
PATHS: Mapping[FeedKind, str] = MappingProxyType(
    {
        FeedKind.NEWS: "/news",
        FeedKind.TRENDS: "/trends",
        FeedKind.REDDIT: "/reddit",
        FeedKind.FINANCE: "/finance/{symbol}",
    }
)


@dataclass(frozen=True)
class FeedConfig:
    """Static configuration for one feed kind."""

    kind: FeedKind
    path: str
    ttl_sec: float
    page_size: int
    category_map: Mapping[str, str] = field(default_factory=dict)
    default_category: str | None = None

    def map_category(self, category: str | None) -> str | None:
        """Translate a panel category into the upstream vocabulary.

        Unknown values fall back to ``default_category``.
        """
        if not self.category_map:
            return category
        key = (category or "").strip().lower()
        return self.category_map.get(key, self.default_category)


def build_feed_configs(settings: Settings) -> dict[FeedKind, FeedConfig]:
    return {
        FeedKind.NEWS: FeedConfig(
            kind=FeedKind.NEWS,
            path=PATHS[FeedKind.NEWS],
            ttl_sec=settings.NEWS_CACHE_TTL_SEC,
            page_size=settings.NEWS_PAGE_SIZE,
            category_map=NEWS_CATEGORY_MAP,
            default_category="general",
        ),
        FeedKind.TRENDS: FeedConfig(
            kind=FeedKind.TRENDS,
            path=PATHS[FeedKind.TRENDS],
            ttl_sec=settings.TRENDS_CACHE_TTL_SEC,
            page_size=settings.TRENDS_PAGE_SIZE,
            category_map=TRENDS_CATEGORY_MAP,
            default_category="all",
        ),
        FeedKind.REDDIT: FeedConfig(
            kind=FeedKind.REDDIT,
            path=PATHS[FeedKind.REDDIT],
            ttl_sec=settings.REDDIT_CACHE_TTL_SEC,
            page_size=settings.REDDIT_PAGE_SIZE,
        ),
        FeedKind.FINANCE: FeedConfig(
            kind=FeedKind.FINANCE,
            path=PATHS[FeedKind.FINANCE],
            ttl_sec=settings.FINANCE_CACHE_TTL_SEC,
            page_size=1,
        ),
    }
