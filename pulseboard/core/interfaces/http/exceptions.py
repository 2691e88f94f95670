"""HTTP exception handlers.

提供统一的异常处理机制，将领域异常转换为标准 HTTP 响应。
各模块的异常类通过定义 http_status_code 和 error_code 类属性来自定义响应。
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from pulseboard.core.domain.exceptions import ConfigurationError, DomainException
from pulseboard.core.interfaces.http.response import ErrorResponse


def error_json(status_code: int, code: str, message: str) -> JSONResponse:
    """Build the uniform error body used by every gateway failure."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse.create(code=code, message=message).model_dump(),
    )


async def domain_exception_handler(
    _request: Request, exc: DomainException
) -> JSONResponse:
    """Handle domain exceptions.

    通过读取异常类的 http_status_code 和 error_code 类属性来确定响应。
    """
    status_code = getattr(exc, "http_status_code", 400)
    error_code = getattr(exc, "error_code", "DOMAIN_ERROR")

    if isinstance(exc, ConfigurationError):
        logger.error(f"{exc.setting} is not set in the environment variables")
    elif status_code >= 500:
        logger.warning(f"Upstream failure ({error_code}): {exc.message}")

    return error_json(status_code, error_code, exc.message)


async def global_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Handle all unhandled exceptions."""
    logger.exception(f"Unhandled exception: {exc}")
    return error_json(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )
