"""Finance feed client.

一次请求同时产出图表序列与实时报价。上游 meta 缺少涨跌额时，
由序列首尾价格推导。
"""

import re
from datetime import UTC, datetime
from typing import Any

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import InvalidParameter, UpstreamShapeError
from pulseboard.modules.feeds.domain.models import (
    FeedKind,
    FinanceModel,
    FinanceQuote,
    FinanceSeries,
    PricePoint,
)
from pulseboard.modules.feeds.domain.series import derive_change
from pulseboard.modules.feeds.infrastructure.clients.base import BaseFeedClient

SYMBOL_PATTERN = re.compile(r"^[A-Z0-9.\-^=]{1,15}$")
RANGE_PATTERN = re.compile(r"^\d{1,3}(m|h|d|wk|mo|y)$|^(ytd|max)$")


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)


class FinanceFeedClient(BaseFeedClient):
    """Price series plus latest quote for one symbol."""

    kind = FeedKind.FINANCE
    label = "financial data"
    model_cls = FinanceModel

    def prepare(self, params: dict[str, Any]) -> dict[str, str]:
        symbol = str(params.get("symbol") or settings.DEFAULT_SYMBOL).strip().upper()
        if not SYMBOL_PATTERN.match(symbol):
            raise InvalidParameter("symbol", symbol, "a ticker symbol")
        default_range, default_interval = settings.realtime_pair
        time_range = str(params.get("range") or params.get("time_range") or default_range)
        interval = str(params.get("interval") or default_interval)
        for name, value in (("range", time_range), ("interval", interval)):
            if not RANGE_PATTERN.match(value.strip()):
                raise InvalidParameter(name, value)
        return {"symbol": symbol, "range": time_range.strip(), "interval": interval.strip()}

    def request_for(self, params: dict[str, str]) -> tuple[str, dict[str, str]]:
        return (
            self.config.path.format(symbol=params["symbol"]),
            {"range": params["range"], "interval": params["interval"]},
        )

    def normalize(self, payload: Any, params: dict[str, str]) -> FinanceModel:
        chart = payload.get("chart") if isinstance(payload, dict) else None
        results = chart.get("result") if isinstance(chart, dict) else None
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            raise UpstreamShapeError("chart result missing")
        result = results[0]

        timestamps = result.get("timestamp") or []
        quotes = (result.get("indicators") or {}).get("quote") or [{}]
        closes = quotes[0].get("close") if isinstance(quotes[0], dict) else None
        closes = closes or []
        if not isinstance(timestamps, list) or not isinstance(closes, list):
            raise UpstreamShapeError("invalid data format for chart")
        if len(timestamps) != len(closes):
            raise UpstreamShapeError("timestamps and prices differ in length")

        points = [
            PricePoint(timestamp=datetime.fromtimestamp(ts, UTC), price=_number(price))
            for ts, price in zip(timestamps, closes, strict=True)
            if isinstance(ts, int | float)
        ]
        series = FinanceSeries(
            symbol=params["symbol"],
            time_range=params["range"],
            interval=params["interval"],
            points=points,
        )
        meta = result.get("meta") if isinstance(result.get("meta"), dict) else {}
        return FinanceModel(series=series, quote=self._quote(series, meta))

    @staticmethod
    def _quote(series: FinanceSeries, meta: dict[str, Any]) -> FinanceQuote:
        prices = series.prices
        usable = [price for price in prices if price is not None]

        price = _number(meta.get("regularMarketPrice"))
        if price is None and usable:
            price = usable[-1]

        change = _number(meta.get("regularMarketChange"))
        percent = _number(meta.get("regularMarketChangePercent"))
        if change is None or percent is None or len(usable) < 2:
            change, percent = derive_change(prices)

        market_time = _number(meta.get("regularMarketTime"))
        if market_time is not None:
            as_of = datetime.fromtimestamp(market_time, UTC)
        elif series.points:
            as_of = series.points[-1].timestamp
        else:
            as_of = datetime.now(UTC)

        return FinanceQuote(
            symbol=series.symbol,
            price=price,
            absolute_change=change,
            percent_change=percent,
            as_of=as_of,
        )
