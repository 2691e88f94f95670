"""News provider (NewsAPI) implementation."""

from typing import Any

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import ConfigurationError, UpstreamShapeError
from pulseboard.modules.gateway.infrastructure.providers.base import UpstreamProvider


class NewsApiProvider(UpstreamProvider):
    """Search or list headlines; the API key never leaves the server."""

    name = "news"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key if api_key is not None else settings.NEWS_API_KEY
        self.base_url = (base_url or settings.NEWS_API_BASE_URL).rstrip("/")

    async def headlines(
        self,
        *,
        query: str | None = None,
        category: str | None = None,
        country: str | None = None,
        language: str | None = None,
    ) -> dict[str, Any]:
        """Return ``{"articles": [...], "totalResults": n}``.

        A free-text ``query`` uses the "everything" search, otherwise the
        top headlines of ``category`` in ``country`` are listed.
        """
        if not self.api_key:
            raise ConfigurationError("NEWS_API_KEY")

        if query:
            url = f"{self.base_url}/everything"
            params = {"q": query}
            if language:
                params["language"] = language
        else:
            url = f"{self.base_url}/top-headlines"
            params = {"category": category or "general"}
            if country:
                params["country"] = country

        payload = self._require_dict(
            await self._get_json(url, params=params, headers={"X-Api-Key": self.api_key}),
            "News",
        )
        articles = payload.get("articles")
        if not isinstance(articles, list):
            raise UpstreamShapeError("News response missing articles list")
        return {
            "articles": articles,
            "totalResults": payload.get("totalResults", len(articles)),
        }
