"""Feed client 模块。"""

from pulseboard.modules.feeds.infrastructure.clients.base import BaseFeedClient
from pulseboard.modules.feeds.infrastructure.clients.factory import FeedClientFactory
from pulseboard.modules.feeds.infrastructure.clients.finance import FinanceFeedClient
from pulseboard.modules.feeds.infrastructure.clients.news import NewsFeedClient
from pulseboard.modules.feeds.infrastructure.clients.reddit import RedditFeedClient
from pulseboard.modules.feeds.infrastructure.clients.trends import TrendsFeedClient

__all__ = [
    "BaseFeedClient",
    "FeedClientFactory",
    "FinanceFeedClient",
    "NewsFeedClient",
    "RedditFeedClient",
    "TrendsFeedClient",
]
