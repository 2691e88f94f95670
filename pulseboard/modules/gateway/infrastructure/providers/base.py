"""上游提供方基类定义。

所有具体提供方（新闻/趋势/行情/Reddit）都继承此基类，统一超时、请求头与错误映射。
"""

import json
from typing import Any

import httpx
from loguru import logger

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import (
    NetworkError,
    RateLimited,
    UpstreamShapeError,
)


class UpstreamProvider:
    """Base class for gateway calls to an external provider.

    Transport failures and non-2xx responses surface as ``NetworkError``,
    HTTP 429 as ``RateLimited`` and undecodable bodies as ``UpstreamShapeError``.
    """

    name: str = "upstream"

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_sec: float | None = None,
    ) -> None:
        """初始化提供方。

        Args:
            client: 共享的 httpx 客户端（测试时注入 MockTransport），为空则每次请求新建
            timeout_sec: 请求超时秒数
        """
        self._client = client
        self.timeout_sec = timeout_sec or settings.FETCHER_TIMEOUT_SEC

    async def _send(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        request_headers = {
            "User-Agent": settings.FETCHER_USER_AGENT,
            "Accept": "application/json",
            **(headers or {}),
        }
        try:
            if self._client is not None:
                response = await self._client.get(
                    url, params=params, headers=request_headers
                )
            else:
                async with httpx.AsyncClient(
                    timeout=self.timeout_sec,
                    follow_redirects=True,
                ) as client:
                    response = await client.get(
                        url, params=params, headers=request_headers
                    )
        except httpx.TimeoutException as exc:
            logger.warning(f"{self.name} upstream timeout: {exc}")
            raise NetworkError(f"Timeout contacting {self.name} provider") from exc
        except httpx.HTTPError as exc:
            logger.warning(f"{self.name} upstream error: {exc}")
            raise NetworkError(f"Error contacting {self.name} provider") from exc

        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            logger.warning(f"{self.name} upstream rate limit reached")
            raise RateLimited(f"{self.name} provider rate limit reached")
        if response.status_code >= 400:
            logger.warning(
                f"{self.name} upstream HTTP error: {response.status_code}"
            )
            raise NetworkError(
                f"HTTP {response.status_code}", status_code=response.status_code
            )
        return response

    async def _get_json(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = await self._send(url, params=params, headers=headers)
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise UpstreamShapeError(
                f"{self.name} provider returned a non-JSON response"
            ) from exc

    async def _get_text(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        response = await self._send(url, params=params, headers=headers)
        return response.text

    @staticmethod
    def _require_dict(payload: Any, what: str) -> dict[str, Any]:
        if not isinstance(payload, dict):
            raise UpstreamShapeError(f"{what} payload must be a JSON object")
        return payload
