"""Trends feed client.

支持两种上游结构：
- daily: ``default.trendingSearchesDays[].trendingSearches[]``
- realtime: ``storySummaries.trendingStories[]``
"""

import html
from typing import Any

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import InvalidParameter, UpstreamShapeError
from pulseboard.modules.feeds.domain.models import (
    FeedKind,
    Topic,
    TopicArticle,
    TrendsModel,
)
from pulseboard.modules.feeds.infrastructure.clients.base import BaseFeedClient

TREND_TYPES = ("daily", "realtime")
MAX_ARTICLES_PER_TOPIC = 5


def _decode(text: Any) -> str | None:
    """Unescape HTML entities and collapse whitespace."""
    if not isinstance(text, str):
        return None
    cleaned = " ".join(html.unescape(text).split())
    return cleaned or None


def _first_paragraph(text: Any) -> str | None:
    if not isinstance(text, str):
        return None
    return _decode(text.split("\n", 1)[0])


def _image_url(raw: dict[str, Any], *keys: str) -> str | None:
    image = raw.get("image")
    if not isinstance(image, dict):
        return None
    for key in keys:
        value = image.get(key)
        if isinstance(value, str) and value:
            return value
    return None


class TrendsFeedClient(BaseFeedClient):
    """Daily or realtime trending searches."""

    kind = FeedKind.TRENDS
    label = "trends"
    model_cls = TrendsModel

    def prepare(self, params: dict[str, Any]) -> dict[str, str]:
        trend_type = str(params.get("type") or settings.DEFAULT_TRENDS_TYPE).strip().lower()
        if trend_type not in TREND_TYPES:
            raise InvalidParameter("type", trend_type, " or ".join(TREND_TYPES))
        geo = params.get("geo") or params.get("country") or settings.DEFAULT_TRENDS_GEO
        return {
            "type": trend_type,
            "category": str(params.get("category") or "all").strip().lower(),
            "geo": str(geo).strip().upper(),
            "language": str(params.get("language") or settings.DEFAULT_LANGUAGE)
            .strip()
            .lower(),
        }

    def request_for(self, params: dict[str, str]) -> tuple[str, dict[str, str]]:
        request = {
            "type": params["type"],
            "geo": params["geo"],
            "language": params["language"],
        }
        if params["type"] == "realtime":
            request["category"] = self.config.map_category(params["category"]) or "all"
        return self.config.path, request

    def normalize(self, payload: Any, params: dict[str, str]) -> TrendsModel:
        if not isinstance(payload, dict):
            raise UpstreamShapeError("unexpected data format received")

        days = (payload.get("default") or {}).get("trendingSearchesDays")
        if isinstance(days, list):
            return TrendsModel(trend_type="daily", topics=self._daily_topics(days))

        stories = (payload.get("storySummaries") or {}).get("trendingStories")
        if isinstance(stories, list):
            return TrendsModel(trend_type="realtime", topics=self._realtime_topics(stories))

        raise UpstreamShapeError("unexpected data format received")

    def _daily_topics(self, days: list[Any]) -> list[Topic]:
        topics: list[Topic] = []
        for day in days:
            if not isinstance(day, dict):
                continue
            date_label = _decode(day.get("formattedDate"))
            for search in day.get("trendingSearches") or []:
                if not isinstance(search, dict):
                    continue
                title = search.get("title")
                query = title.get("query") if isinstance(title, dict) else title
                decoded = _decode(query)
                if not decoded:
                    continue
                topics.append(
                    Topic(
                        title=decoded,
                        traffic_label=search.get("formattedTraffic") or None,
                        image_url=_image_url(search, "imageUrl", "imgUrl"),
                        date_label=date_label,
                        articles=self._articles(search.get("articles"), "title"),
                    )
                )
        return topics

    def _realtime_topics(self, stories: list[Any]) -> list[Topic]:
        topics: list[Topic] = []
        for story in stories:
            if not isinstance(story, dict):
                continue
            decoded = _decode(story.get("title"))
            if not decoded:
                continue
            topics.append(
                Topic(
                    title=decoded,
                    traffic_label=story.get("formattedTraffic") or None,
                    image_url=_image_url(story, "imgUrl", "imageUrl"),
                    articles=self._articles(story.get("articles"), "articleTitle"),
                )
            )
        return topics

    @staticmethod
    def _articles(raw_articles: Any, title_key: str) -> list[TopicArticle]:
        if not isinstance(raw_articles, list):
            return []
        articles: list[TopicArticle] = []
        for raw in raw_articles:
            if len(articles) >= MAX_ARTICLES_PER_TOPIC:
                break
            if not isinstance(raw, dict):
                continue
            title = _decode(raw.get(title_key) or raw.get("title"))
            url = raw.get("url")
            if not title or not isinstance(url, str) or not url:
                continue
            articles.append(
                TopicArticle(
                    title=title,
                    url=url,
                    snippet=_first_paragraph(raw.get("snippet")),
                    source=_decode(raw.get("source")),
                    time_label=_decode(raw.get("time") or raw.get("timeAgo")),
                    image_url=_image_url(raw, "imageUrl", "imgUrl"),
                    video_url=raw.get("videoUrl") or None,
                )
            )
        return articles
