"""Gateway API routes.

Stateless proxy in front of the external providers: keys are injected here and
never sent to the browser.
"""

from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import RedirectResponse

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import ConfigurationError
from pulseboard.modules.gateway.infrastructure.dependencies import (
    get_chat_provider,
    get_finance_provider,
    get_news_provider,
    get_reddit_provider,
    get_trends_provider,
)
from pulseboard.modules.gateway.infrastructure.providers import (
    ChatProvider,
    GoogleTrendsProvider,
    NewsApiProvider,
    RedditProvider,
    YahooChartProvider,
)
from pulseboard.modules.gateway.interfaces.schemas import (
    ChatRequest,
    ChatResponse,
    ClientConfigResponse,
    PanelDefaults,
)

router = APIRouter(tags=["gateway"])


@router.get("/news", summary="新闻头条", description="按关键词搜索或按分类列出头条")
async def get_news(
    query: str | None = Query(None, description="关键词"),
    category: str | None = Query(None, description="上游分类"),
    country: str = Query(settings.DEFAULT_COUNTRY, description="国家代码"),
    language: str = Query(settings.DEFAULT_LANGUAGE, description="语言"),
    provider: NewsApiProvider = Depends(get_news_provider),
) -> dict[str, Any]:
    return await provider.headlines(
        query=query, category=category, country=country, language=language
    )


@router.get("/trends", summary="搜索趋势", description="daily 或 realtime 趋势")
async def get_trends(
    type: str = Query("daily", description="daily | realtime"),
    category: str = Query("all", description="realtime 分类代码"),
    geo: str | None = Query(None, description="地区"),
    country: str | None = Query(None, description="geo 的别名"),
    language: str = Query(settings.DEFAULT_LANGUAGE, description="语言"),
    provider: GoogleTrendsProvider = Depends(get_trends_provider),
) -> dict[str, Any]:
    return await provider.trends(
        trend_type=type,
        category=category,
        geo=(geo or country or settings.DEFAULT_TRENDS_GEO).upper(),
        language=language,
    )


@router.get("/finance/{symbol}", summary="行情图表数据")
async def get_finance(
    symbol: str = Path(..., description="股票代码"),
    time_range: str = Query("1d", alias="range", description="时间范围"),
    interval: str = Query("1d", description="采样粒度"),
    provider: YahooChartProvider = Depends(get_finance_provider),
) -> dict[str, Any]:
    return await provider.chart(symbol, time_range=time_range, interval=interval)


@router.get("/reddit", summary="Reddit 热门帖子")
async def get_reddit(
    t: str = Query(settings.DEFAULT_REDDIT_PERIOD, description="day | week"),
    provider: RedditProvider = Depends(get_reddit_provider),
) -> dict[str, Any]:
    return await provider.top(t)


@router.get("/googlemaps/script", summary="地图脚本重定向")
async def get_maps_script() -> RedirectResponse:
    if not settings.GOOGLE_MAPS_API_KEY:
        raise ConfigurationError("GOOGLE_MAPS_API_KEY")
    query = urlencode(
        {
            "key": settings.GOOGLE_MAPS_API_KEY,
            "loading": "async",
            "callback": "initMap",
            "libraries": "places,geometry",
        }
    )
    return RedirectResponse(
        f"{settings.GOOGLE_MAPS_SCRIPT_URL}?{query}",
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )


@router.get(
    "/config",
    response_model=ClientConfigResponse,
    summary="客户端配置",
    description="页面所需的非敏感配置，不包含任何密钥",
)
async def get_client_config() -> ClientConfigResponse:
    return ClientConfigResponse(
        defaults=PanelDefaults(
            news_category=settings.DEFAULT_NEWS_CATEGORY,
            country=settings.DEFAULT_COUNTRY,
            language=settings.DEFAULT_LANGUAGE,
            trends_type=settings.DEFAULT_TRENDS_TYPE,
            trends_geo=settings.DEFAULT_TRENDS_GEO,
            reddit_period=settings.DEFAULT_REDDIT_PERIOD,
            symbol=settings.DEFAULT_SYMBOL,
        ),
        realtime_range=settings.REALTIME_RANGE,
        realtime_interval=settings.REALTIME_INTERVAL,
        page_sizes={
            "news": settings.NEWS_PAGE_SIZE,
            "reddit": settings.REDDIT_PAGE_SIZE,
            "trends": settings.TRENDS_PAGE_SIZE,
        },
        maps_script_path=f"{settings.API_PREFIX}/googlemaps/script",
    )


@router.post("/chat", response_model=ChatResponse, summary="聊天助手")
async def post_chat(
    request: ChatRequest,
    provider: ChatProvider = Depends(get_chat_provider),
) -> ChatResponse:
    reply = await provider.reply(request.messages)
    return ChatResponse(reply=reply)
