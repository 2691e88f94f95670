"""Dashboard module application dependencies."""

from typing import NoReturn

from pulseboard.modules.dashboard.application.session import DashboardSession


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_dashboard_session() -> DashboardSession:
    _missing_dependency("DashboardSession")
