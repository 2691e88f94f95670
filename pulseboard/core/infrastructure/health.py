"""统一的健康检查类型定义。"""

from enum import Enum

from pydantic import BaseModel, Field

from pulseboard.core.config import Settings


class HealthStatus(str, Enum):
    """健康检查状态枚举。"""

    OK = "ok"
    ERROR = "error"


class ProviderHealthResult(BaseModel):
    """上游提供方配置检查结果。"""

    status: HealthStatus = Field(..., description="健康状态")
    configured: bool = Field(..., description="密钥是否已配置")
    requires_key: bool = Field(True, description="是否需要服务端密钥")

    def to_dict(self) -> dict[str, str | bool]:
        return self.model_dump(mode="json")


def check_providers(settings: Settings) -> dict[str, ProviderHealthResult]:
    """Report which upstream providers can be served with the current secrets."""
    keyed = {
        "news": settings.NEWS_API_KEY,
        "maps": settings.GOOGLE_MAPS_API_KEY,
        "chat": settings.OPENAI_API_KEY,
    }
    results = {
        name: ProviderHealthResult(
            status=HealthStatus.OK if value else HealthStatus.ERROR,
            configured=bool(value),
        )
        for name, value in keyed.items()
    }
    for name in ("trends", "finance", "reddit"):
        results[name] = ProviderHealthResult(
            status=HealthStatus.OK, configured=True, requires_key=False
        )
    return results
