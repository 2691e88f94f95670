"""Panel renderers.

渲染总是整体替换面板内容；finance 面板重绘前先销毁旧图表。
"""

from abc import ABC, abstractmethod
from typing import ClassVar

from pulseboard.core.infrastructure.template_loader import render_template
from pulseboard.modules.dashboard.domain.state import PanelState
from pulseboard.modules.dashboard.domain.view import ChartFactory, ChartHandle, PanelView
from pulseboard.modules.feeds.domain.models import (
    FeedKind,
    FeedModel,
    FinanceModel,
    FinanceSeries,
)
from pulseboard.modules.feeds.domain.series import decimate, forward_fill

TIME_UNITS = {
    "1m": "minute",
    "5m": "minute",
    "1h": "hour",
    "1d": "minute",
    "5d": "hour",
    "1mo": "day",
    "1y": "week",
}
DEFAULT_TIME_UNIT = "day"

# 日内区间允许更多点再抽稀
INTRADAY_MAX_POINTS = 400


def time_unit_for(time_range: str) -> str:
    return TIME_UNITS.get(time_range, DEFAULT_TIME_UNIT)


def decimation_threshold(time_range: str, max_points: int) -> int:
    """Series longer than this are decimated to ``max_points``."""
    intraday = time_range == "1d" or time_range.endswith(("m", "h"))
    return max(max_points, INTRADAY_MAX_POINTS) if intraday else max_points


class PanelRenderer(ABC):
    """Render a feed model into a panel view."""

    kind: ClassVar[FeedKind]
    template: ClassVar[str]

    def render(self, model: FeedModel, state: PanelState, view: PanelView) -> None:
        view.notice = state.notice
        if model.degraded:
            self.render_error(view, model.message or f"{self.kind.value} is unavailable.")
            return
        view.error = None
        self._render(model, state, view)

    def render_error(self, view: PanelView, message: str) -> None:
        """Replace the panel with a one-line error."""
        view.clear()
        view.error = message
        view.html = render_template("panels/error.html", kind=self.kind.value, message=message)

    @abstractmethod
    def _render(self, model: FeedModel, state: PanelState, view: PanelView) -> None:
        pass


class ListPanelRenderer(PanelRenderer):
    """Paginated list panels."""

    empty_message: ClassVar[str] = "No items found."

    def _render(self, model: FeedModel, state: PanelState, view: PanelView) -> None:
        page = state.page()
        view.show_previous = page.has_previous
        view.show_next = page.has_next
        view.html = render_template(
            self.template,
            kind=self.kind.value,
            page=page,
            model=model,
            empty_message=self.empty_message,
        )


class NewsRenderer(ListPanelRenderer):
    kind = FeedKind.NEWS
    template = "panels/news.html"
    empty_message = "No news articles found."


class TrendsRenderer(ListPanelRenderer):
    kind = FeedKind.TRENDS
    template = "panels/trends.html"
    empty_message = "No trending topics found."


class RedditRenderer(ListPanelRenderer):
    kind = FeedKind.REDDIT
    template = "panels/reddit.html"
    empty_message = "No Reddit posts found."


class FinanceRenderer(PanelRenderer):
    """Quote box plus a price chart."""

    kind = FeedKind.FINANCE
    template = "panels/finance.html"

    def __init__(self, chart_factory: ChartFactory, max_points: int = 200):
        self.chart_factory = chart_factory
        self.max_points = max_points

    def _render(self, model: FeedModel, state: PanelState, view: PanelView) -> None:
        if not isinstance(model, FinanceModel):
            raise TypeError(f"FinanceRenderer cannot render {type(model).__name__}")
        view.show_previous = False
        view.show_next = False

        # 旧图表必须先销毁再创建新图表
        view.replace_chart(None)
        chart: ChartHandle | None = None
        if not model.insufficient_data and model.series is not None:
            chart = self._build_chart(model.series)
            view.replace_chart(chart)

        view.html = render_template(
            self.template,
            kind=self.kind.value,
            quote=model.quote,
            series=model.series,
            chart_config=chart.to_config() if chart is not None else None,
        )

    def chart_points(self, series: FinanceSeries) -> tuple[list[str], list[float | None]]:
        """Forward-fill gaps, drop leading gaps, then decimate long series."""
        filled = forward_fill(series.prices)
        points = [
            (point.timestamp.isoformat(), price)
            for point, price in zip(series.points, filled, strict=True)
            if price is not None
        ]
        if len(points) > decimation_threshold(series.time_range, self.max_points):
            points = decimate(points, self.max_points)
        return [label for label, _ in points], [price for _, price in points]

    def _build_chart(self, series: FinanceSeries) -> ChartHandle:
        labels, prices = self.chart_points(series)
        return self.chart_factory.create(
            symbol=series.symbol,
            labels=labels,
            prices=prices,
            time_unit=time_unit_for(series.time_range),
        )


def default_renderers(chart_factory: ChartFactory, max_points: int) -> dict[FeedKind, PanelRenderer]:
    return {
        FeedKind.NEWS: NewsRenderer(),
        FeedKind.TRENDS: TrendsRenderer(),
        FeedKind.REDDIT: RedditRenderer(),
        FeedKind.FINANCE: FinanceRenderer(chart_factory, max_points=max_points),
    }
