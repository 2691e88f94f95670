"""
pytest 配置和共享 fixtures。

测试分层：
- unit/: 单元测试（不依赖外部服务，上游全部使用 httpx.MockTransport）

使用方法：
    # 运行所有测试
    pytest

    # 只运行单元测试
    pytest tests/unit/
"""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from pulseboard.core.config import Settings
from pulseboard.modules.feeds.domain.config import build_feed_configs

Handler = Callable[[httpx.Request], httpx.Response]

# ============================================
# 配置 Fixtures
# ============================================


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def test_settings() -> Settings:
    """测试环境配置。"""
    return Settings(
        _env_file=None,
        ENVIRONMENT="local",
        NEWS_API_KEY="test-news-key",
        GOOGLE_MAPS_API_KEY="test-maps-key",
        OPENAI_API_KEY=None,
        REFRESH_JITTER_MIN_SEC=0.01,
        REFRESH_JITTER_MAX_SEC=0.02,
    )


@pytest.fixture
def feed_configs(test_settings):
    return build_feed_configs(test_settings)


# ============================================
# 上游 Mock 工具
# ============================================


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


def gateway_error(status_code: int, code: str, message: str) -> httpx.Response:
    """网关统一错误体。"""
    return json_response(
        {"success": False, "error": {"code": code, "message": message}},
        status_code=status_code,
    )


def mock_http(handler: Handler, base_url: str = "http://gateway/api") -> httpx.AsyncClient:
    """使用 MockTransport 的网关客户端。"""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=base_url)


def news_payload(count: int = 3) -> dict[str, Any]:
    return {
        "articles": [
            {
                "title": f"Headline {i}",
                "url": f"https://example.com/news/{i}",
                "description": f"Summary {i}",
                "urlToImage": f"https://example.com/img/{i}.jpg",
                "author": "Reporter",
                "publishedAt": "2026-10-19T12:00:00Z",
                "source": {"name": "Example"},
            }
            for i in range(count)
        ],
        "totalResults": count,
    }


def reddit_payload(count: int = 3) -> dict[str, Any]:
    return {
        "data": {
            "children": [
                {
                    "kind": "t3",
                    "data": {
                        "title": f"Post {i}",
                        "permalink": f"/r/test/comments/{i}/post/",
                        "score": 100 + i,
                    },
                }
                for i in range(count)
            ]
        }
    }


def chart_payload(
    closes: list[float | None],
    *,
    start: int = 1_760_880_600,
    step: int = 60,
    meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "chart": {
            "result": [
                {
                    "meta": meta or {},
                    "timestamp": [start + i * step for i in range(len(closes))],
                    "indicators": {"quote": [{"close": closes}]},
                }
            ],
            "error": None,
        }
    }


@pytest.fixture
def market_open_time() -> datetime:
    """周一 10:00 America/New_York（UTC-4）。"""
    return datetime(2026, 10, 19, 14, 0, tzinfo=UTC)


@pytest.fixture
def market_closed_time() -> datetime:
    """周六。"""
    return datetime(2026, 10, 24, 14, 0, tzinfo=UTC)


# ============================================
# HTTP Client Fixtures
# ============================================


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """异步 HTTP 客户端（用于 API 测试）。"""
    from main import app

    overrides = dict(app.dependency_overrides)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    # 恢复依赖覆盖
    app.dependency_overrides.clear()
    app.dependency_overrides.update(overrides)

