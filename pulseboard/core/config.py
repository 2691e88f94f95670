"""Application configuration."""

import warnings
from typing import Annotated, Any, Literal, Self

from pydantic import AnyUrl, BeforeValidator, HttpUrl, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_list(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "pulseboard"
    SERVER_PORT: int = 3000
    API_PREFIX: str = "/api"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_list)
    ] = []

    @computed_field
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    # Sentry
    SENTRY_DSN: HttpUrl | None = None

    # News provider
    NEWS_API_KEY: str | None = None
    NEWS_API_BASE_URL: str = "https://newsapi.org/v2"

    # Maps provider
    GOOGLE_MAPS_API_KEY: str | None = None
    GOOGLE_MAPS_SCRIPT_URL: str = "https://maps.googleapis.com/maps/api/js"

    # Chat provider
    OPENAI_API_KEY: str | None = None
    OPENAI_API_BASE: str = "https://api.openai.com/v1"
    OPENAI_CHAT_MODEL: str = "gpt-3.5-turbo"
    CHAT_MAX_TOKENS: int = 333

    # Other upstreams
    TRENDS_API_BASE_URL: str = "https://trends.google.com/trends/api"
    FINANCE_API_BASE_URL: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    REDDIT_API_BASE_URL: str = "https://www.reddit.com"
    FETCHER_TIMEOUT_SEC: float = 15.0
    FETCHER_USER_AGENT: str = "pulseboard/0.1 (+https://github.com/pulseboard)"

    # Access policy
    DEV_IP: str = "127.0.0.1"
    RESTRICTED_COUNTRIES: Annotated[list[str] | str, BeforeValidator(parse_list)] = [
        "RU", "CN", "KP", "IR", "NG", "UA", "BR", "BI", "AF", "SD", "CD", "VE", "CU",
    ]  # fmt: skip
    GEO_COUNTRY_HEADER: str = "CF-IPCountry"
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MIN: int = 1000

    # Dashboard
    GATEWAY_BASE_URL: str | None = None  # None 表示进程内调用网关
    NEWS_CACHE_TTL_SEC: float = 300  # 5 minutes
    TRENDS_CACHE_TTL_SEC: float = 300
    REDDIT_CACHE_TTL_SEC: float = 0  # always live
    FINANCE_CACHE_TTL_SEC: float = 0  # always live
    NEWS_PAGE_SIZE: int = 5
    REDDIT_PAGE_SIZE: int = 5
    TRENDS_PAGE_SIZE: int = 1

    # Auto refresh
    REFRESH_JITTER_MIN_SEC: float = 2.0
    REFRESH_JITTER_MAX_SEC: float = 3.0
    REALTIME_RANGE: str = "5m"
    REALTIME_INTERVAL: str = "1m"
    MARKET_TIMEZONE: str = "America/New_York"
    SCHEDULER_STOP_AFTER_CLOSE: bool = False
    CHART_MAX_POINTS: int = 200

    # Panel defaults
    DEFAULT_NEWS_CATEGORY: str = "world"
    DEFAULT_COUNTRY: str = "us"
    DEFAULT_LANGUAGE: str = "en"
    DEFAULT_TRENDS_TYPE: str = "daily"
    DEFAULT_TRENDS_GEO: str = "US"
    DEFAULT_REDDIT_PERIOD: str = "day"
    DEFAULT_SYMBOL: str = "AAPL"

    # Chat session limits
    CHAT_MAX_MESSAGES: int = 10
    CHAT_MAX_SESSION_TOKENS: int = 999

    @computed_field
    @property
    def realtime_pair(self) -> tuple[str, str]:
        return (self.REALTIME_RANGE, self.REALTIME_INTERVAL)

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        self._check_default_secret("NEWS_API_KEY", self.NEWS_API_KEY)
        self._check_default_secret("GOOGLE_MAPS_API_KEY", self.GOOGLE_MAPS_API_KEY)
        self._check_default_secret("OPENAI_API_KEY", self.OPENAI_API_KEY)
        return self

    @model_validator(mode="after")
    def _check_jitter_bounds(self) -> Self:
        if self.REFRESH_JITTER_MIN_SEC > self.REFRESH_JITTER_MAX_SEC:
            raise ValueError("REFRESH_JITTER_MIN_SEC must not exceed REFRESH_JITTER_MAX_SEC")
        return self


settings = Settings()
