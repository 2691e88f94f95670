"""Tests for panel pagination and state."""

import pytest

from pulseboard.modules.dashboard.domain.state import (
    PanelState,
    clamp_page,
    page_count,
    paginate,
)
from pulseboard.modules.feeds.domain.models import Article, FeedKind, NewsModel


def _news_model(count: int) -> NewsModel:
    return NewsModel(
        articles=[
            Article(title=f"Headline {i}", url=f"https://example.com/{i}")
            for i in range(count)
        ]
    )


class TestPaginate:
    def test_twelve_items_page_size_five(self) -> None:
        items = list(range(12))

        first = paginate(items, 1, 5)
        last = paginate(items, 3, 5)

        assert first.total_pages == 3
        assert first.items == [0, 1, 2, 3, 4]
        assert not first.has_previous
        assert first.has_next
        assert last.items == [10, 11]
        assert last.has_previous
        assert not last.has_next

    def test_page_is_clamped(self) -> None:
        assert paginate(list(range(12)), 9, 5).number == 3
        assert paginate(list(range(12)), 0, 5).number == 1

    def test_empty_list_has_one_page(self) -> None:
        page = paginate([], 1, 5)
        assert page.total_pages == 1
        assert page.items == []
        assert not page.has_next
        assert not page.has_previous

    def test_page_count(self) -> None:
        assert page_count(10, 5) == 2
        assert page_count(11, 5) == 3
        assert page_count(0, 5) == 1
        with pytest.raises(ValueError):
            page_count(3, 0)

    def test_clamp_page(self) -> None:
        assert clamp_page(-2, 3) == 1
        assert clamp_page(2, 3) == 2
        assert clamp_page(7, 0) == 1


class TestPanelState:
    def test_tokens_increase(self) -> None:
        state = PanelState(kind=FeedKind.NEWS, page_size=5)

        first = state.issue_token()
        second = state.issue_token()

        assert second > first
        assert state.is_latest(second)
        assert not state.is_latest(first)

    def test_page_shrinks_with_new_model(self) -> None:
        state = PanelState(kind=FeedKind.NEWS, page_size=5, last_model=_news_model(12))
        state.go_to(3)

        state.last_model = _news_model(4)

        assert state.page().number == 1
        assert state.current_page == 1

    def test_go_to_clamps(self) -> None:
        state = PanelState(kind=FeedKind.NEWS, page_size=5, last_model=_news_model(12))
        assert state.go_to(10) == 3
        assert state.go_to(-1) == 1

    def test_no_model_means_no_items(self) -> None:
        state = PanelState(kind=FeedKind.REDDIT, page_size=5)
        assert state.items == []
        assert state.page().total_pages == 1
