"""Panel view: the rendered region of one panel."""

from dataclasses import dataclass, field
from typing import Any, Protocol

from pulseboard.modules.feeds.domain.models import FeedKind


class ChartHandle(Protocol):
    """A live chart instance owned by exactly one panel view."""

    @property
    def destroyed(self) -> bool: ...

    def destroy(self) -> None: ...

    def to_config(self) -> dict[str, Any]: ...


class ChartFactory(Protocol):
    def create(
        self,
        *,
        symbol: str,
        labels: list[str],
        prices: list[float | None],
        time_unit: str,
    ) -> ChartHandle: ...


@dataclass
class PanelView:
    """Current visible content of a panel.

    Rendering replaces ``html`` and the control flags; it never appends.
    The chart handle is only replaced through :meth:`replace_chart`.
    """

    kind: FeedKind
    html: str = ""
    show_previous: bool = False
    show_next: bool = False
    error: str | None = None
    notice: str | None = None
    _chart: ChartHandle | None = field(default=None, repr=False)

    @property
    def chart(self) -> ChartHandle | None:
        return self._chart

    def replace_chart(self, chart: ChartHandle | None) -> None:
        """Destroy the current chart (if any) and take ownership of ``chart``."""
        if self._chart is not None and not self._chart.destroyed:
            self._chart.destroy()
        self._chart = chart

    def clear(self) -> None:
        self.replace_chart(None)
        self.html = ""
        self.show_previous = False
        self.show_next = False
        self.error = None
