"""Gateway access policy: coarse geo restriction and per-IP rate limiting."""

import time
from collections import defaultdict, deque
from collections.abc import Callable, Iterable, Mapping

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import DomainException, GeoRestricted, RateLimited
from pulseboard.core.infrastructure.logging import BusinessEvents
from pulseboard.core.interfaces.http.exceptions import error_json

LOOPBACK_IPS = frozenset({"127.0.0.1", "::1"})
UNRESTRICTED_PATHS = frozenset({"/health"})


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` per key within a sliding window."""

    _PRUNE_THRESHOLD = 10_000

    def __init__(
        self,
        max_requests: int,
        window_sec: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_sec = window_sec
        self._clock = clock
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    def allow(self, key: str) -> bool:
        now = self._clock()
        cutoff = now - self.window_sec
        hits = self._hits[key]
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if len(hits) >= self.max_requests:
            return False
        hits.append(now)
        if len(self._hits) > self._PRUNE_THRESHOLD:
            self._prune(cutoff)
        return True

    def _prune(self, cutoff: float) -> None:
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]


class AccessPolicy:
    """Decide whether a caller may use the gateway."""

    def __init__(
        self,
        *,
        restricted_countries: Iterable[str],
        country_header: str,
        allow_list: Iterable[str],
        limiter: SlidingWindowRateLimiter | None = None,
    ) -> None:
        self.restricted_countries = frozenset(c.upper() for c in restricted_countries)
        self.country_header = country_header
        self.allow_list = frozenset(allow_list)
        self.limiter = limiter

    @classmethod
    def from_settings(cls) -> "AccessPolicy":
        limiter = (
            SlidingWindowRateLimiter(settings.RATE_LIMIT_PER_MIN)
            if settings.RATE_LIMIT_ENABLED
            else None
        )
        return cls(
            restricted_countries=settings.RESTRICTED_COUNTRIES,
            country_header=settings.GEO_COUNTRY_HEADER,
            allow_list=LOOPBACK_IPS | {settings.DEV_IP},
            limiter=limiter,
        )

    def check(self, client_ip: str, headers: Mapping[str, str]) -> None:
        """Raise ``GeoRestricted`` or ``RateLimited`` when the caller is refused."""
        country = (headers.get(self.country_header) or "").strip().upper()
        if country and country in self.restricted_countries:
            BusinessEvents.access_denied(client_ip, "geo", country=country)
            raise GeoRestricted()

        if self.limiter is None or client_ip in self.allow_list:
            return
        if not self.limiter.allow(client_ip):
            BusinessEvents.access_denied(client_ip, "rate_limit")
            raise RateLimited()


class AccessPolicyMiddleware(BaseHTTPMiddleware):
    """Apply ``AccessPolicy`` to every request except health checks."""

    def __init__(self, app: ASGIApp, policy: AccessPolicy | None = None) -> None:
        super().__init__(app)
        self.policy = policy or AccessPolicy.from_settings()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path not in UNRESTRICTED_PATHS:
            client_ip = request.client.host if request.client else ""
            try:
                self.policy.check(client_ip, request.headers)
            except DomainException as exc:
                return error_json(exc.http_status_code, exc.error_code, exc.message)
        return await call_next(request)
