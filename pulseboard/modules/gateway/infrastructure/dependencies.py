"""Gateway infrastructure dependencies (overridable in tests)."""

from pulseboard.modules.gateway.infrastructure.providers import (
    ChatProvider,
    GoogleTrendsProvider,
    NewsApiProvider,
    RedditProvider,
    YahooChartProvider,
)

_chat_provider: ChatProvider | None = None


async def get_news_provider() -> NewsApiProvider:
    return NewsApiProvider()


async def get_trends_provider() -> GoogleTrendsProvider:
    return GoogleTrendsProvider()


async def get_finance_provider() -> YahooChartProvider:
    return YahooChartProvider()


async def get_reddit_provider() -> RedditProvider:
    return RedditProvider()


async def get_chat_provider() -> ChatProvider:
    # 复用同一个 AsyncOpenAI 客户端（连接池）
    global _chat_provider
    if _chat_provider is None:
        _chat_provider = ChatProvider()
    return _chat_provider
