"""Market hours predicate.

交易时段：周一至周五 09:30–16:00（交易所时区），16:00 这一分钟仍算开市。
"""

from datetime import UTC, datetime, time
from zoneinfo import ZoneInfo

MARKET_OPEN = time(9, 30)
MARKET_CLOSE = time(16, 0)


def is_market_open(now: datetime, tz: str | ZoneInfo = "America/New_York") -> bool:
    """Return True while the exchange is in its regular session.

    Naive datetimes are treated as UTC.
    """
    zone = ZoneInfo(tz) if isinstance(tz, str) else tz
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    local = now.astimezone(zone)

    if local.weekday() >= 5:  # 5 = Saturday, 6 = Sunday
        return False

    minute = local.time().replace(second=0, microsecond=0)
    return MARKET_OPEN <= minute <= MARKET_CLOSE
