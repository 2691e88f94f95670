"""Panel state and pagination."""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from pulseboard.modules.feeds.domain.models import FeedKind, FeedModel

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of items plus the neighbour flags that drive the controls."""

    items: list[T]
    number: int
    total_pages: int
    total_items: int

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages


def page_count(total_items: int, page_size: int) -> int:
    """ceil(total/page_size), never below 1 so an empty panel still has page 1."""
    if page_size < 1:
        raise ValueError("page_size must be positive")
    return max(1, math.ceil(total_items / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    return min(max(page, 1), max(total_pages, 1))


def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    """Slice ``items`` for ``page`` after clamping it to the valid range."""
    total_pages = page_count(len(items), page_size)
    number = clamp_page(page, total_pages)
    start = (number - 1) * page_size
    return Page(
        items=list(items[start : start + page_size]),
        number=number,
        total_pages=total_pages,
        total_items=len(items),
    )


@dataclass
class PanelState:
    """Mutable state owned by one panel.

    ``latest_token`` increases on every issued fetch; a render carrying an
    older token is stale and must be discarded.
    """

    kind: FeedKind
    page_size: int
    params: dict[str, str] = field(default_factory=dict)
    paused: bool = False
    current_page: int = 1
    last_model: FeedModel | None = None
    auto_refresh_disabled: bool = False
    notice: str | None = None
    latest_token: int = 0

    def issue_token(self) -> int:
        self.latest_token += 1
        return self.latest_token

    def is_latest(self, token: int) -> bool:
        return token == self.latest_token

    @property
    def items(self) -> list:
        return self.last_model.items if self.last_model is not None else []

    def page(self) -> Page:
        page = paginate(self.items, self.current_page, self.page_size)
        self.current_page = page.number
        return page

    def go_to(self, page: int) -> int:
        """移动到指定页（越界时夹紧）。"""
        self.current_page = clamp_page(page, page_count(len(self.items), self.page_size))
        return self.current_page
