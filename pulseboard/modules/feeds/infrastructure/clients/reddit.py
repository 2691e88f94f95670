"""Reddit feed client."""

import html
from typing import Any

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import InvalidParameter, UpstreamShapeError
from pulseboard.modules.feeds.domain.models import FeedKind, Post, RedditModel
from pulseboard.modules.feeds.infrastructure.clients.base import BaseFeedClient

TIME_PERIODS = ("day", "week")


class RedditFeedClient(BaseFeedClient):
    """Top posts of the day or the week."""

    kind = FeedKind.REDDIT
    label = "Reddit posts"
    model_cls = RedditModel

    def prepare(self, params: dict[str, Any]) -> dict[str, str]:
        period = str(
            params.get("t") or params.get("time_period") or settings.DEFAULT_REDDIT_PERIOD
        ).strip().lower()
        if period not in TIME_PERIODS:
            raise InvalidParameter("time_period", period, " or ".join(TIME_PERIODS))
        return {"t": period}

    def request_for(self, params: dict[str, str]) -> tuple[str, dict[str, str]]:
        return self.config.path, {"t": params["t"]}

    def normalize(self, payload: Any, params: dict[str, str]) -> RedditModel:
        data = payload.get("data") if isinstance(payload, dict) else None
        children = data.get("children") if isinstance(data, dict) else None
        if not isinstance(children, list):
            raise UpstreamShapeError("invalid Reddit API response format")

        posts: list[Post] = []
        for child in children:
            # 只保留 t3（帖子）类型
            if not isinstance(child, dict) or child.get("kind") != "t3":
                continue
            raw = child.get("data")
            if not isinstance(raw, dict):
                continue
            title = self._clean_text(raw.get("title"))
            permalink = raw.get("permalink")
            if not title or not isinstance(permalink, str) or not permalink:
                continue
            try:
                score = int(raw.get("score") or 0)
            except (TypeError, ValueError):
                score = 0
            posts.append(
                Post(
                    title=html.unescape(title),
                    permalink=permalink,
                    score=score,
                    preview_image_url=self._preview_url(raw.get("preview")),
                    video_url=self._video_url(raw.get("media")),
                )
            )
        return RedditModel(posts=posts)

    @staticmethod
    def _preview_url(preview: Any) -> str | None:
        """First preview image; Reddit escapes ``&`` in these URLs."""
        if not isinstance(preview, dict):
            return None
        images = preview.get("images")
        if not isinstance(images, list) or not images or not isinstance(images[0], dict):
            return None
        source = images[0].get("source")
        url = source.get("url") if isinstance(source, dict) else None
        if not isinstance(url, str) or not url:
            return None
        return html.unescape(url)

    @staticmethod
    def _video_url(media: Any) -> str | None:
        if not isinstance(media, dict):
            return None
        video = media.get("reddit_video")
        url = video.get("fallback_url") if isinstance(video, dict) else None
        return url if isinstance(url, str) and url else None
