"""News feed client."""

from typing import Any

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import UpstreamShapeError
from pulseboard.modules.feeds.domain.models import Article, FeedKind, NewsModel
from pulseboard.modules.feeds.infrastructure.clients.base import BaseFeedClient


class NewsFeedClient(BaseFeedClient):
    """Headlines by panel category, or articles matching a keyword."""

    kind = FeedKind.NEWS
    label = "news"
    model_cls = NewsModel

    def prepare(self, params: dict[str, Any]) -> dict[str, str]:
        prepared = {
            "category": str(params.get("category") or settings.DEFAULT_NEWS_CATEGORY)
            .strip()
            .lower(),
            "country": str(params.get("country") or settings.DEFAULT_COUNTRY)
            .strip()
            .lower(),
            "language": str(params.get("language") or settings.DEFAULT_LANGUAGE)
            .strip()
            .lower(),
        }
        query = str(params.get("query") or "").strip()
        if query:
            prepared["query"] = query
        return prepared

    def request_for(self, params: dict[str, str]) -> tuple[str, dict[str, str]]:
        request = {"country": params["country"], "language": params["language"]}
        if "query" in params:
            request["query"] = params["query"]
        else:
            request["category"] = self.config.map_category(params["category"]) or "general"
        return self.config.path, request

    def normalize(self, payload: Any, params: dict[str, str]) -> NewsModel:
        if not isinstance(payload, dict) or not isinstance(payload.get("articles"), list):
            raise UpstreamShapeError("news response missing articles list")

        articles: list[Article] = []
        seen_urls: set[str] = set()
        for raw in payload["articles"]:
            if not isinstance(raw, dict):
                continue
            title = self._clean_text(raw.get("title"))
            url = raw.get("url")
            if not title or not isinstance(url, str) or not url or url in seen_urls:
                continue
            seen_urls.add(url)
            source = raw.get("source")
            articles.append(
                Article(
                    title=title,
                    url=url,
                    description=self._clean_text(raw.get("description")),
                    image_url=raw.get("urlToImage") or None,
                    author=self._clean_text(raw.get("author")),
                    published_at=self._parse_datetime(raw.get("publishedAt")),
                    source_name=self._clean_text(source.get("name"))
                    if isinstance(source, dict)
                    else None,
                )
            )
        return NewsModel(articles=articles)
