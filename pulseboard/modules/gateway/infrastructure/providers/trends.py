"""Google Trends provider implementation."""

import json
from typing import Any

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import InvalidParameter, UpstreamShapeError
from pulseboard.modules.gateway.infrastructure.providers.base import UpstreamProvider

TREND_TYPES = ("daily", "realtime")


class GoogleTrendsProvider(UpstreamProvider):
    """Fetch daily or realtime trending searches."""

    name = "trends"

    def __init__(self, *, base_url: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.base_url = (base_url or settings.TRENDS_API_BASE_URL).rstrip("/")

    async def trends(
        self,
        *,
        trend_type: str = "daily",
        category: str = "all",
        geo: str = "US",
        language: str = "en",
    ) -> dict[str, Any]:
        """Return the provider-shaped JSON for ``trend_type``."""
        if trend_type == "daily":
            url = f"{self.base_url}/dailytrends"
            params = {"hl": language, "geo": geo, "tz": "0", "ns": "15"}
        elif trend_type == "realtime":
            url = f"{self.base_url}/realtimetrends"
            params = {
                "hl": language,
                "geo": geo,
                "cat": category or "all",
                "tz": "0",
                "fi": "0",
                "fs": "0",
                "ri": "300",
                "rs": "20",
                "sort": "0",
            }
        else:
            raise InvalidParameter("type", trend_type, " or ".join(TREND_TYPES))

        text = await self._get_text(url, params=params)
        return self._parse_guarded_json(text)

    @staticmethod
    def _parse_guarded_json(text: str) -> dict[str, Any]:
        """Strip the anti-hijacking prefix (``)]}',``) and decode the body."""
        start = text.find("{")
        if start < 0:
            raise UpstreamShapeError("Trends response contains no JSON object")
        try:
            payload = json.loads(text[start:])
        except json.JSONDecodeError as exc:
            raise UpstreamShapeError("Trends response is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise UpstreamShapeError("Trends payload must be a JSON object")
        return payload
