"""上游提供方模块。"""

from pulseboard.modules.gateway.infrastructure.providers.base import UpstreamProvider
from pulseboard.modules.gateway.infrastructure.providers.chat import ChatProvider
from pulseboard.modules.gateway.infrastructure.providers.finance import (
    YahooChartProvider,
)
from pulseboard.modules.gateway.infrastructure.providers.news import NewsApiProvider
from pulseboard.modules.gateway.infrastructure.providers.reddit import RedditProvider
from pulseboard.modules.gateway.infrastructure.providers.trends import (
    GoogleTrendsProvider,
)

__all__ = [
    "UpstreamProvider",
    "ChatProvider",
    "GoogleTrendsProvider",
    "NewsApiProvider",
    "RedditProvider",
    "YahooChartProvider",
]
