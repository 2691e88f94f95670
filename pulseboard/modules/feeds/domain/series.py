"""Price series helpers used by the finance client and the chart renderer."""

import math
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def _is_missing(value: float | None) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def forward_fill(values: Sequence[float | None]) -> list[float | None]:
    """Replace missing samples with the previous sample.

    Leading gaps stay ``None`` since there is nothing to carry forward.

    >>> forward_fill([10, None, None, 13])
    [10, 10, 10, 13]
    """
    filled: list[float | None] = []
    last: float | None = None
    for value in values:
        if _is_missing(value):
            filled.append(last)
        else:
            last = value
            filled.append(value)
    return filled


def decimate(points: Sequence[T], max_points: int) -> list[T]:
    """Fixed-stride down-sampling to at most ``max_points`` items.

    The first and last points are always kept and the sampled indices are
    strictly increasing, so the overall shape is preserved.
    """
    if max_points < 2:
        raise ValueError("max_points must be at least 2")
    total = len(points)
    if total <= max_points:
        return list(points)
    stride = (total - 1) / (max_points - 1)
    return [points[round(i * stride)] for i in range(max_points)]


def derive_change(prices: Sequence[float | None]) -> tuple[float, float]:
    """Absolute and percent change between the first and last usable price.

    Returns ``(0.0, 0.0)`` for series with fewer than two usable prices.
    """
    usable = [price for price in prices if not _is_missing(price)]
    if len(usable) < 2:
        return 0.0, 0.0
    first, last = float(usable[0]), float(usable[-1])
    change = last - first
    if first == 0:
        return change, 0.0
    return change, change / first * 100
