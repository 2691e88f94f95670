"""Chart.js chart factory.

生成页面端 Chart.js 所需的配置对象；图表句柄由面板视图独占。
"""

from dataclasses import dataclass, field
from typing import Any

from pulseboard.core.domain.exceptions import DomainException


class ChartDestroyedError(DomainException):
    """Raised when a destroyed chart is used again."""

    error_code = "CHART_DESTROYED"


@dataclass
class ChartJsHandle:
    """One Chart.js line chart."""

    config: dict[str, Any]
    destroyed: bool = field(default=False)

    def destroy(self) -> None:
        self.destroyed = True

    def to_config(self) -> dict[str, Any]:
        if self.destroyed:
            raise ChartDestroyedError("Chart has already been destroyed")
        return self.config


class ChartJsFactory:
    """Build line charts with zoom/pan and a time axis."""

    border_color = "rgba(75, 192, 192, 1)"
    background_color = "rgba(75, 192, 192, 0.2)"

    def create(
        self,
        *,
        symbol: str,
        labels: list[str],
        prices: list[float | None],
        time_unit: str,
    ) -> ChartJsHandle:
        config = {
            "type": "line",
            "data": {
                "labels": labels,
                "datasets": [
                    {
                        "label": f"{symbol} Closing Prices",
                        "data": prices,
                        "borderColor": self.border_color,
                        "backgroundColor": self.background_color,
                        "fill": True,
                    }
                ],
            },
            "options": {
                "responsive": True,
                "interaction": {"mode": "index", "intersect": False},
                "plugins": {
                    "zoom": {
                        "pan": {"enabled": True, "mode": "xy"},
                        "zoom": {
                            "wheel": {"enabled": True},
                            "pinch": {"enabled": True},
                            "mode": "xy",
                        },
                    },
                },
                "scales": {"x": {"type": "time", "time": {"unit": time_unit}}},
            },
        }
        return ChartJsHandle(config=config)
