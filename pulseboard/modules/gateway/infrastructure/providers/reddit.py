"""Reddit top-posts provider implementation."""

from typing import Any

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import InvalidParameter
from pulseboard.modules.gateway.infrastructure.providers.base import UpstreamProvider

TIME_PERIODS = ("day", "week")


class RedditProvider(UpstreamProvider):
    """Proxy ``top.json`` so the browser never hits Reddit directly."""

    name = "reddit"

    def __init__(self, *, base_url: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.base_url = (base_url or settings.REDDIT_API_BASE_URL).rstrip("/")

    async def top(self, time_period: str = "day") -> dict[str, Any]:
        if time_period not in TIME_PERIODS:
            raise InvalidParameter("t", time_period, " or ".join(TIME_PERIODS))
        return self._require_dict(
            await self._get_json(
                f"{self.base_url}/top.json",
                params={"sort": "top", "t": time_period},
            ),
            "Reddit",
        )
