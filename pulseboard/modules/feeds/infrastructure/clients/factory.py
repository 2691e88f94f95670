"""Feed client 工厂。

根据 feed 类型创建相应的 client 实例。
"""

import httpx

from pulseboard.core.config import Settings
from pulseboard.modules.feeds.domain.config import FeedConfig, build_feed_configs
from pulseboard.modules.feeds.domain.models import FeedKind
from pulseboard.modules.feeds.infrastructure.clients.base import BaseFeedClient
from pulseboard.modules.feeds.infrastructure.clients.finance import FinanceFeedClient
from pulseboard.modules.feeds.infrastructure.clients.news import NewsFeedClient
from pulseboard.modules.feeds.infrastructure.clients.reddit import RedditFeedClient
from pulseboard.modules.feeds.infrastructure.clients.trends import TrendsFeedClient


class FeedClientFactory:
    """Feed client 工厂类。"""

    client_map: dict[FeedKind, type[BaseFeedClient]] = {
        FeedKind.NEWS: NewsFeedClient,
        FeedKind.TRENDS: TrendsFeedClient,
        FeedKind.REDDIT: RedditFeedClient,
        FeedKind.FINANCE: FinanceFeedClient,
    }

    @classmethod
    def create(cls, kind: FeedKind, http: httpx.AsyncClient, config: FeedConfig) -> BaseFeedClient:
        """根据 feed 类型创建 client。

        Raises:
            ValueError: 不支持的 feed 类型
        """
        client_class = cls.client_map.get(kind)
        if client_class is None:
            raise ValueError(f"Unsupported feed kind: {kind}")
        return client_class(http=http, config=config)

    @classmethod
    def create_all(
        cls, http: httpx.AsyncClient, settings: Settings
    ) -> dict[FeedKind, BaseFeedClient]:
        configs = build_feed_configs(settings)
        return {kind: cls.create(kind, http, configs[kind]) for kind in cls.client_map}
