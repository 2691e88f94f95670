"""Market quote provider (Yahoo chart API) implementation."""

import re
from typing import Any
from urllib.parse import quote

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import InvalidParameter, UpstreamShapeError
from pulseboard.modules.gateway.infrastructure.providers.base import UpstreamProvider

SYMBOL_PATTERN = re.compile(r"^[A-Za-z0-9.^=\-]{1,15}$")
RANGE_PATTERN = re.compile(r"^\d{1,3}(m|h|d|wk|mo|y)$|^(ytd|max)$")


class YahooChartProvider(UpstreamProvider):
    """Proxy the chart endpoint for one symbol."""

    name = "finance"

    def __init__(self, *, base_url: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.base_url = (base_url or settings.FINANCE_API_BASE_URL).rstrip("/")

    async def chart(
        self, symbol: str, *, time_range: str = "1d", interval: str = "1d"
    ) -> dict[str, Any]:
        if not SYMBOL_PATTERN.match(symbol):
            raise InvalidParameter("symbol", symbol)
        if not RANGE_PATTERN.match(time_range):
            raise InvalidParameter("range", time_range)
        if not RANGE_PATTERN.match(interval):
            raise InvalidParameter("interval", interval)

        url = f"{self.base_url}/{quote(symbol.upper(), safe='^=.-')}"
        payload = self._require_dict(
            await self._get_json(url, params={"range": time_range, "interval": interval}),
            "Finance",
        )
        if not isinstance(payload.get("chart"), dict):
            raise UpstreamShapeError("Finance response missing chart object")
        return payload
