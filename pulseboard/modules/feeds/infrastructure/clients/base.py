"""Feed client 基类。

所有 feed client 都通过网关获取数据：参数校验失败立即抛出 InvalidParameter，
网关 429 抛出 RateLimited，其余网络或格式错误转换为降级模型。
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, ClassVar

import httpx
from loguru import logger
from pydantic import ValidationError

from pulseboard.core.domain.exceptions import (
    NetworkError,
    RateLimited,
    UpstreamShapeError,
)
from pulseboard.core.infrastructure.logging import BusinessEvents
from pulseboard.modules.feeds.domain.config import FeedConfig
from pulseboard.modules.feeds.domain.models import FeedKind, FeedModel, FeedQuery

# 网关返回这些错误码时，面板只显示“暂不可用”
UNAVAILABLE_CODES = frozenset({"CONFIGURATION_ERROR", "GEO_RESTRICTED"})


class BaseFeedClient(ABC):
    """Fetch one feed kind through the gateway and normalize it."""

    kind: ClassVar[FeedKind]
    label: ClassVar[str]
    model_cls: ClassVar[type[FeedModel]]

    def __init__(self, http: httpx.AsyncClient, config: FeedConfig):
        self.http = http
        self.config = config

    def query_for(self, params: Mapping[str, Any] | None = None) -> FeedQuery:
        """Validate caller parameters and build the cache key."""
        return FeedQuery.create(self.kind, self.prepare(dict(params or {})))

    async def fetch(self, params: Mapping[str, Any] | None = None) -> FeedModel:
        """执行抓取。

        Raises:
            InvalidParameter: 参数不在允许范围内
            RateLimited: 网关或上游限流
        """
        start_time = time.time()
        prepared = self.prepare(dict(params or {}))
        query = FeedQuery.create(self.kind, prepared)
        path, request_params = self.request_for(prepared)

        try:
            payload = await self._get_json(path, request_params)
            model = self._normalize_safely(payload, prepared)
        except (NetworkError, UpstreamShapeError) as exc:
            BusinessEvents.feed_degraded(
                feed=self.kind.value, reason=exc.message, cache_key=query.cache_key
            )
            return self.model_cls.failed(
                f"Unable to fetch {self.label}: {exc.message}",
                error_code=exc.error_code,
            )

        BusinessEvents.feed_fetched(
            feed=self.kind.value,
            cache_key=query.cache_key,
            items=len(model.items),
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return model

    def _normalize_safely(self, payload: Any, params: dict[str, str]) -> FeedModel:
        """normalize 中的类型错误统一视为上游格式错误。"""
        try:
            return self.normalize(payload, params)
        except UpstreamShapeError:
            raise
        except (
            ValidationError,
            TypeError,
            AttributeError,
            KeyError,
            ValueError,
            OverflowError,
            OSError,
        ) as exc:
            logger.warning(f"Malformed {self.kind.value} payload: {exc.__class__.__name__}")
            raise UpstreamShapeError("malformed data received") from exc

    @abstractmethod
    def prepare(self, params: dict[str, Any]) -> dict[str, str]:
        """Apply defaults and validate caller parameters."""

    @abstractmethod
    def request_for(self, params: dict[str, str]) -> tuple[str, dict[str, str]]:
        """Return the gateway path and query string for prepared parameters."""

    @abstractmethod
    def normalize(self, payload: Any, params: dict[str, str]) -> FeedModel:
        """Turn the provider-shaped JSON into a panel model."""

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        try:
            response = await self.http.get(path, params=params)
        except httpx.TimeoutException as exc:
            raise NetworkError("gateway timeout") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"gateway unreachable ({exc.__class__.__name__})") from exc

        code, message = self._error_body(response)
        if response.status_code == 429 or code == "RATE_LIMITED":
            BusinessEvents.feed_rate_limited(feed=self.kind.value)
            raise RateLimited(message or "Too many requests, please retry later")
        if response.status_code >= 400:
            if code in UNAVAILABLE_CODES:
                raise NetworkError("service unavailable", status_code=response.status_code)
            raise NetworkError(
                f"HTTP {response.status_code}", status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamShapeError("received non-JSON response") from exc

    @staticmethod
    def _error_body(response: httpx.Response) -> tuple[str | None, str | None]:
        """Read ``{"error": {"code", "message"}}`` from a gateway error response."""
        if response.status_code < 400:
            return None, None
        try:
            body = response.json()
        except ValueError:
            return None, None
        error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(error, dict):
            return None, None
        code = error.get("code")
        message = error.get("message")
        return (
            code if isinstance(code, str) else None,
            message if isinstance(message, str) else None,
        )

    @staticmethod
    def _clean_text(text: Any) -> str | None:
        """清理文本中的多余空白。"""
        if not isinstance(text, str):
            return None
        cleaned = " ".join(text.split())
        return cleaned or None

    @staticmethod
    def _parse_datetime(value: Any) -> datetime | None:
        if isinstance(value, int | float):
            return datetime.fromtimestamp(value, UTC)
        if not isinstance(value, str) or not value:
            return None
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Unparseable timestamp: {value!r}")
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed
