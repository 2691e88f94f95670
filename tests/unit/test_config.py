"""Tests for settings and per-feed configuration."""

import pytest
from pydantic import ValidationError

from pulseboard.core.config import Settings
from pulseboard.modules.feeds.domain.config import (
    NEWS_CATEGORY_MAP,
    TRENDS_CATEGORY_MAP,
    build_feed_configs,
)
from pulseboard.modules.feeds.domain.models import FeedKind


def test_defaults(test_settings: Settings) -> None:
    assert test_settings.realtime_pair == ("5m", "1m")
    assert test_settings.NEWS_CACHE_TTL_SEC == 300
    assert test_settings.REDDIT_CACHE_TTL_SEC == 0
    assert "CN" in test_settings.RESTRICTED_COUNTRIES


def test_comma_separated_lists(monkeypatch) -> None:
    monkeypatch.setenv("RESTRICTED_COUNTRIES", "RU, KP")
    monkeypatch.setenv("BACKEND_CORS_ORIGINS", "http://localhost:3000,https://example.com/")

    settings = Settings(_env_file=None)

    assert settings.RESTRICTED_COUNTRIES == ["RU", "KP"]
    assert settings.all_cors_origins == ["http://localhost:3000", "https://example.com"]


def test_jitter_bounds_validated() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, REFRESH_JITTER_MIN_SEC=5, REFRESH_JITTER_MAX_SEC=3)


def test_placeholder_secret_rejected_outside_local() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, ENVIRONMENT="production", NEWS_API_KEY="changethis")


class TestFeedConfig:
    def test_news_categories(self, feed_configs) -> None:
        news = feed_configs[FeedKind.NEWS]
        assert news.map_category("world") == "general"
        assert news.map_category("Finance") == "business"
        assert news.map_category("events") == "entertainment"
        assert news.map_category("unknown") == "general"
        assert news.map_category(None) == "general"

    def test_trends_categories(self, feed_configs) -> None:
        trends = feed_configs[FeedKind.TRENDS]
        assert trends.map_category("technology") == "t"
        assert trends.map_category("top") == "h"
        assert trends.map_category("finance") == "b"
        assert trends.map_category("bogus") == "all"

    def test_feeds_without_map_pass_through(self, feed_configs) -> None:
        assert feed_configs[FeedKind.REDDIT].map_category("anything") == "anything"

    def test_page_sizes_and_ttls(self, test_settings) -> None:
        configs = build_feed_configs(test_settings)
        assert configs[FeedKind.NEWS].page_size == 5
        assert configs[FeedKind.TRENDS].page_size == 1
        assert configs[FeedKind.FINANCE].ttl_sec == 0
        assert configs[FeedKind.FINANCE].path.format(symbol="AAPL") == "/finance/AAPL"

    def test_maps_are_read_only(self) -> None:
        with pytest.raises(TypeError):
            NEWS_CATEGORY_MAP["new"] = "x"  # type: ignore[index]
        assert set(TRENDS_CATEGORY_MAP.values()) <= {"all", "h", "t", "b", "e", "m", "s"}
