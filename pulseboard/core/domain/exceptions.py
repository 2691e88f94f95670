"""Base domain exceptions.

所有领域异常都应继承自 DomainException，并可以通过定义 http_status_code 和 error_code
类属性来指定 HTTP 响应细节。
"""

from fastapi import status


class DomainException(Exception):
    """Base exception for all domain errors.

    子类可以通过定义以下类属性来自定义 HTTP 响应：
    - http_status_code: HTTP 状态码（默认 400）
    - error_code: 错误代码字符串（默认 "DOMAIN_ERROR"）
    """

    http_status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str = "A domain error occurred"):
        self.message = message
        super().__init__(self.message)


class NetworkError(DomainException):
    """Raised on transport failures and non-2xx upstream responses."""

    http_status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "NETWORK_ERROR"

    def __init__(self, message: str = "Network error", status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class UpstreamShapeError(DomainException):
    """Raised when a provider payload is missing expected fields."""

    http_status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "UPSTREAM_SHAPE_ERROR"


class InvalidParameter(DomainException):
    """Raised when a caller-supplied value is outside the accepted set."""

    http_status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_PARAMETER"

    def __init__(self, name: str, value: object, allowed: str | None = None):
        message = f"Invalid value for '{name}': {value!r}"
        if allowed:
            message = f"{message} (expected {allowed})"
        self.name = name
        self.value = value
        super().__init__(message)


class RateLimited(DomainException):
    """Raised when a provider (or the gateway itself) answers 429."""

    http_status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = "RATE_LIMITED"

    def __init__(self, message: str = "Too many requests, please retry later"):
        super().__init__(message)


class GeoRestricted(DomainException):
    """Raised by the access policy for callers in restricted countries."""

    http_status_code = status.HTTP_403_FORBIDDEN
    error_code = "GEO_RESTRICTED"

    def __init__(self, message: str = "Access restricted from your location"):
        super().__init__(message)


class ConfigurationError(DomainException):
    """Raised when a required server secret is missing."""

    http_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "CONFIGURATION_ERROR"

    def __init__(self, setting: str):
        self.setting = setting
        super().__init__("Server configuration error")


class ChatLimitReached(DomainException):
    """Raised when a chat session exhausts its message or token allowance."""

    http_status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = "CHAT_LIMIT_REACHED"
