"""Tests for the gateway access policy."""

import httpx
import pytest
from fastapi import FastAPI

from pulseboard.core.domain.exceptions import GeoRestricted, RateLimited
from pulseboard.modules.gateway.infrastructure.access import (
    AccessPolicy,
    AccessPolicyMiddleware,
    SlidingWindowRateLimiter,
)

pytestmark = pytest.mark.anyio


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _policy(limit: int = 2, clock=None) -> AccessPolicy:
    return AccessPolicy(
        restricted_countries=["cn", "RU"],
        country_header="CF-IPCountry",
        allow_list={"127.0.0.1", "203.0.113.7"},
        limiter=SlidingWindowRateLimiter(limit, window_sec=60, clock=clock or FakeClock()),
    )


class TestSlidingWindowRateLimiter:
    def test_limit_per_window(self) -> None:
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(2, window_sec=60, clock=clock)

        assert limiter.allow("a")
        assert limiter.allow("a")
        assert not limiter.allow("a")
        assert limiter.allow("b")

        clock.now = 60.5
        assert limiter.allow("a")


class TestAccessPolicy:
    def test_restricted_country_refused(self) -> None:
        with pytest.raises(GeoRestricted):
            _policy().check("198.51.100.1", {"CF-IPCountry": "cn"})

    def test_missing_country_header_allowed(self) -> None:
        _policy().check("198.51.100.1", {})

    def test_rate_limit(self) -> None:
        policy = _policy(limit=2)
        policy.check("198.51.100.1", {})
        policy.check("198.51.100.1", {})

        with pytest.raises(RateLimited):
            policy.check("198.51.100.1", {})

    def test_allow_listed_ip_skips_rate_limit(self) -> None:
        policy = _policy(limit=1)
        for _ in range(5):
            policy.check("203.0.113.7", {})

    def test_allow_list_does_not_bypass_geo(self) -> None:
        with pytest.raises(GeoRestricted):
            _policy().check("127.0.0.1", {"CF-IPCountry": "RU"})


# ============================================
# 中间件
# ============================================


def _app(policy: AccessPolicy) -> FastAPI:
    app = FastAPI()
    app.add_middleware(AccessPolicyMiddleware, policy=policy)

    @app.get("/api/news")
    async def news() -> dict[str, str]:
        return {"ok": "yes"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    return app


def _client(app: FastAPI, ip: str = "198.51.100.9") -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app, client=(ip, 50000)),
        base_url="http://test",
    )


async def test_middleware_returns_uniform_error_bodies() -> None:
    async with _client(_app(_policy(limit=1))) as client:
        assert (await client.get("/api/news")).status_code == 200

        limited = await client.get("/api/news")
        assert limited.status_code == 429
        assert limited.json()["error"]["code"] == "RATE_LIMITED"

        geo = await client.get("/api/news", headers={"CF-IPCountry": "CN"})
        assert geo.status_code == 403
        assert geo.json()["error"] == {
            "code": "GEO_RESTRICTED",
            "message": "Access restricted from your location",
        }


async def test_health_is_never_restricted() -> None:
    async with _client(_app(_policy(limit=1))) as client:
        for _ in range(3):
            response = await client.get("/health", headers={"CF-IPCountry": "CN"})
            assert response.status_code == 200
