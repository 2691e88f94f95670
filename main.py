"""pulseboard - 多数据源信息看板入口。"""

import sentry_sdk
from fastapi import FastAPI
from fastapi.concurrency import asynccontextmanager
from fastapi.responses import RedirectResponse
from fastapi.routing import APIRoute
from loguru import logger
from starlette.middleware.cors import CORSMiddleware

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import DomainException
from pulseboard.core.infrastructure.health import HealthStatus, check_providers
from pulseboard.core.infrastructure.logging import setup_logging
from pulseboard.core.interfaces.http.exceptions import (
    domain_exception_handler,
    global_exception_handler,
)
from pulseboard.core.interfaces.http.routers import api_router
from pulseboard.modules.dashboard.application import dependencies as dashboard_app_deps
from pulseboard.modules.dashboard.infrastructure import (
    dependencies as dashboard_infra_deps,
)
from pulseboard.modules.dashboard.interfaces.router import router as dashboard_router
from pulseboard.modules.gateway.infrastructure.access import AccessPolicyMiddleware


def custom_generate_unique_id(route: APIRoute) -> str:
    """Generate unique operation IDs for OpenAPI."""
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name


# Initialize Sentry if configured
if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(
        dsn=str(settings.SENTRY_DSN),
        enable_tracing=True,
        environment=settings.ENVIRONMENT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging()
    logger.info("Starting pulseboard...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    http = dashboard_infra_deps.build_gateway_client(app, settings)
    app.state.dashboard = dashboard_infra_deps.build_dashboard_session(settings, http)
    logger.info(
        "Dashboard gateway: "
        f"{settings.GATEWAY_BASE_URL or 'in-process'}"
    )

    yield

    logger.info("Shutting down pulseboard...")
    await app.state.dashboard.aclose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description=(
        "新闻、趋势、Reddit 与行情聚合看板\n\n"
        "- `/api/*`: 隐藏密钥的上游代理网关\n"
        "- `/dashboard`: 服务端渲染的看板页面"
    ),
    version="0.1.0",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    generate_unique_id_function=custom_generate_unique_id,
    lifespan=lifespan,
)

# Dependency overrides (application -> infrastructure)
app.dependency_overrides[dashboard_app_deps.get_dashboard_session] = (
    dashboard_infra_deps.get_dashboard_session
)

# Exception handlers
app.add_exception_handler(DomainException, domain_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# Access policy (geo restriction + rate limit)
app.add_middleware(AccessPolicyMiddleware)

# CORS middleware
if settings.all_cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.all_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Include routers
app.include_router(api_router, prefix=settings.API_PREFIX)
app.include_router(dashboard_router)


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint.

    报告各上游提供方的密钥配置情况：
    - healthy: 全部已配置
    - degraded: 部分密钥缺失（相关面板显示不可用）
    """
    providers = check_providers(settings)
    all_ok = all(result.status is HealthStatus.OK for result in providers.values())
    return {
        "status": "healthy" if all_ok else "degraded",
        "environment": settings.ENVIRONMENT,
        "version": "0.1.0",
        "components": {name: result.to_dict() for name, result in providers.items()},
    }


@app.get("/", tags=["root"], include_in_schema=False)
async def root() -> RedirectResponse:
    """Root endpoint."""
    return RedirectResponse("/dashboard")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.SERVER_PORT,
        reload=settings.ENVIRONMENT == "local",
    )
