"""Feed domain models.

每个面板只消费归一化后的模型；抓取失败时返回带 degraded 标记的模型而不是抛异常。
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field


class FeedKind(str, Enum):
    """Feed 类型枚举。"""

    NEWS = "news"
    TRENDS = "trends"
    REDDIT = "reddit"
    FINANCE = "finance"


@dataclass(frozen=True)
class FeedQuery:
    """A feed kind plus its canonicalized parameters; used as the cache key."""

    kind: FeedKind
    parameters: tuple[tuple[str, str], ...] = ()

    @classmethod
    def create(cls, kind: FeedKind, params: Mapping[str, Any] | None = None) -> Self:
        canonical = []
        for key, value in (params or {}).items():
            if value is None:
                continue
            text = str(value).strip()
            if text:
                canonical.append((str(key), text))
        return cls(kind=kind, parameters=tuple(sorted(canonical)))

    @property
    def params(self) -> dict[str, str]:
        return dict(self.parameters)

    @property
    def cache_key(self) -> str:
        parts = [f"{key}={value}" for key, value in self.parameters]
        return "|".join([self.kind.value, *parts])


# ============================================
# 条目模型
# ============================================


class Article(BaseModel):
    """A news headline."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="标题")
    url: str = Field(..., description="原文URL")
    description: str | None = Field(default=None, description="摘要")
    image_url: str | None = Field(default=None, description="缩略图")
    author: str | None = Field(default=None, description="作者")
    published_at: datetime | None = Field(default=None, description="发布时间")
    source_name: str | None = Field(default=None, description="来源")


class TopicArticle(BaseModel):
    """An article attached to a trending topic."""

    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    snippet: str | None = None
    source: str | None = None
    time_label: str | None = None
    image_url: str | None = None
    video_url: str | None = None


class Topic(BaseModel):
    """A trending search topic."""

    model_config = ConfigDict(frozen=True)

    title: str
    traffic_label: str | None = None
    image_url: str | None = None
    date_label: str | None = None
    articles: list[TopicArticle] = Field(default_factory=list)


class Post(BaseModel):
    """A Reddit top post."""

    model_config = ConfigDict(frozen=True)

    title: str
    permalink: str
    score: int = 0
    preview_image_url: str | None = None
    video_url: str | None = None

    @property
    def url(self) -> str:
        if self.permalink.startswith("http"):
            return self.permalink
        return f"https://www.reddit.com{self.permalink}"


class PricePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    price: float | None = None


class FinanceSeries(BaseModel):
    """Closing prices for one symbol over a time range."""

    symbol: str
    time_range: str
    interval: str
    points: list[PricePoint] = Field(default_factory=list)

    @property
    def prices(self) -> list[float | None]:
        return [point.price for point in self.points]


class FinanceQuote(BaseModel):
    """Latest quote for one symbol."""

    symbol: str
    price: float | None = None
    absolute_change: float = 0.0
    percent_change: float = 0.0
    as_of: datetime


# ============================================
# Feed 模型
# ============================================


class FeedModel(BaseModel):
    """Base of every panel-ready model.

    ``degraded`` marks a handled failure; ``message`` is then a one-line,
    display-safe explanation.
    """

    kind: FeedKind
    degraded: bool = False
    message: str | None = None
    error_code: str | None = None

    @classmethod
    def failed(cls, message: str, error_code: str | None = None) -> Self:
        """创建降级模型。"""
        return cls(degraded=True, message=message, error_code=error_code)

    @property
    def items(self) -> list[Any]:
        return []


class NewsModel(FeedModel):
    kind: Literal[FeedKind.NEWS] = FeedKind.NEWS
    articles: list[Article] = Field(default_factory=list)

    @property
    def items(self) -> list[Article]:
        return self.articles


class TrendsModel(FeedModel):
    kind: Literal[FeedKind.TRENDS] = FeedKind.TRENDS
    trend_type: str = "daily"
    topics: list[Topic] = Field(default_factory=list)

    @property
    def items(self) -> list[Topic]:
        return self.topics


class RedditModel(FeedModel):
    kind: Literal[FeedKind.REDDIT] = FeedKind.REDDIT
    posts: list[Post] = Field(default_factory=list)

    @property
    def items(self) -> list[Post]:
        return self.posts


class FinanceModel(FeedModel):
    kind: Literal[FeedKind.FINANCE] = FeedKind.FINANCE
    series: FinanceSeries | None = None
    quote: FinanceQuote | None = None

    @property
    def insufficient_data(self) -> bool:
        """Fewer than two usable prices: no chart, zero change."""
        if self.series is None:
            return True
        return sum(1 for price in self.series.prices if price is not None) < 2
