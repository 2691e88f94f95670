"""Logging configuration with structlog integration.

提供两种日志记录方式：
1. loguru: 用于一般调试日志
2. structlog: 用于关键业务事件的结构化日志
"""

import sys
from typing import Any

import structlog
from loguru import logger

from pulseboard.core.config import settings


def setup_logging() -> None:
    """Configure application logging with structlog and loguru."""
    _configure_structlog()
    _configure_loguru()

    logger.info(f"Logging configured with level: {settings.LOG_LEVEL}")


def _configure_structlog() -> None:
    """配置 structlog 处理器链。"""
    if settings.ENVIRONMENT == "local":
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _get_log_level_number(settings.LOG_LEVEL)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _configure_loguru() -> None:
    """配置 loguru。"""
    logger.remove()

    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if settings.ENVIRONMENT != "local":
        logger.add(
            "logs/pulseboard_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="14 days",
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )


def _get_log_level_number(level: str) -> int:
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


# ============================================================================
# 业务事件日志记录器
# ============================================================================


class BusinessEvents:
    """业务事件日志助手类。

    Usage:
        from pulseboard.core.infrastructure.logging import BusinessEvents

        BusinessEvents.feed_fetched(feed="news", cache_key="news|country=us", items=20)
    """

    _log = structlog.get_logger("business.events")

    @classmethod
    def feed_fetched(
        cls,
        feed: str,
        cache_key: str,
        items: int,
        duration_ms: int = 0,
        **extra: Any,
    ) -> None:
        """记录 feed 抓取成功事件。"""
        cls._log.info(
            "feed_fetched",
            event_type="fetch",
            feed=feed,
            cache_key=cache_key,
            items=items,
            duration_ms=duration_ms,
            **extra,
        )

    @classmethod
    def feed_degraded(cls, feed: str, reason: str, **extra: Any) -> None:
        """记录 feed 降级事件。"""
        cls._log.warning(
            "feed_degraded",
            event_type="degradation",
            feed=feed,
            reason=reason,
            **extra,
        )

    @classmethod
    def cache_hit(cls, cache_key: str, age_sec: float, **extra: Any) -> None:
        cls._log.debug(
            "cache_hit",
            event_type="cache",
            cache_key=cache_key,
            age_sec=round(age_sec, 3),
            **extra,
        )

    @classmethod
    def render_discarded(
        cls, panel: str, token: int, latest_token: int, **extra: Any
    ) -> None:
        """记录过期响应被丢弃事件。"""
        cls._log.info(
            "render_discarded",
            event_type="render",
            panel=panel,
            token=token,
            latest_token=latest_token,
            **extra,
        )

    @classmethod
    def scheduler_armed(
        cls, symbol: str, time_range: str, interval: str, period_sec: float
    ) -> None:
        cls._log.info(
            "scheduler_armed",
            event_type="scheduler",
            symbol=symbol,
            time_range=time_range,
            interval=interval,
            period_sec=round(period_sec, 3),
        )

    @classmethod
    def scheduler_stopped(cls, symbol: str | None, reason: str) -> None:
        cls._log.info(
            "scheduler_stopped",
            event_type="scheduler",
            symbol=symbol,
            reason=reason,
        )

    @classmethod
    def feed_rate_limited(cls, feed: str, **extra: Any) -> None:
        """记录上游限流事件。"""
        cls._log.warning(
            "feed_rate_limited",
            event_type="rate_limit",
            feed=feed,
            **extra,
        )

    @classmethod
    def access_denied(cls, client_ip: str, reason: str, **extra: Any) -> None:
        cls._log.warning(
            "access_denied",
            event_type="access",
            client_ip=client_ip,
            reason=reason,
            **extra,
        )

    @classmethod
    def chat_replied(
        cls, messages: int, tokens_used: int, model: str | None = None
    ) -> None:
        cls._log.info(
            "chat_replied",
            event_type="chat",
            messages=messages,
            tokens_used=tokens_used,
            model=model,
        )
