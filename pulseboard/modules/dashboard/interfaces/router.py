"""Dashboard routes.

页面与面板片段均为服务端渲染的 HTML；聊天接口返回 JSON。
"""

from typing import Any

from fastapi import APIRouter, Depends, Path, Query, Request
from fastapi.responses import HTMLResponse

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import InvalidParameter
from pulseboard.core.infrastructure.template_loader import render_template
from pulseboard.modules.dashboard.application.dependencies import get_dashboard_session
from pulseboard.modules.dashboard.application.session import DashboardSession
from pulseboard.modules.dashboard.interfaces.schemas import (
    ChatMessageRequest,
    ChatMessageResponse,
)
from pulseboard.modules.feeds.domain.models import FeedKind

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

PANEL_TITLES = {
    FeedKind.NEWS: "News",
    FeedKind.TRENDS: "Trends",
    FeedKind.REDDIT: "Reddit",
    FeedKind.FINANCE: "Finance",
}

# 面板刷新接受的查询参数
PANEL_PARAMS = ("category", "country", "language", "query", "type", "geo", "t")


def get_panel_kind(
    kind: str = Path(..., description="news | trends | reddit | finance"),
) -> FeedKind:
    try:
        return FeedKind(kind.lower())
    except ValueError:
        raise InvalidParameter(
            "kind", kind, ", ".join(k.value for k in FeedKind)
        ) from None


def _panel_context(session: DashboardSession, kind: FeedKind) -> dict[str, Any]:
    orchestrator = session.orchestrator
    state = orchestrator.states[kind]
    view = orchestrator.views[kind]
    return {
        "kind": kind.value,
        "title": PANEL_TITLES[kind],
        "body": view.html,
        "notice": view.notice,
        "paused": state.paused,
        "live": kind is FeedKind.FINANCE and orchestrator.scheduler.is_armed,
        "params": state.params,
    }


def _panel_response(session: DashboardSession, kind: FeedKind) -> HTMLResponse:
    return HTMLResponse(render_template("panels/panel.html", **_panel_context(session, kind)))


@router.get("", response_class=HTMLResponse, summary="仪表盘页面")
async def get_dashboard(
    session: DashboardSession = Depends(get_dashboard_session),
) -> HTMLResponse:
    await session.ensure_bootstrapped()
    panels = [_panel_context(session, kind) for kind in PANEL_TITLES]
    return HTMLResponse(
        render_template(
            "dashboard.html",
            project_name=settings.PROJECT_NAME,
            panels=panels,
            chat=session.chat,
            realtime_range=settings.REALTIME_RANGE,
            realtime_interval=settings.REALTIME_INTERVAL,
            maps_script_path=f"{settings.API_PREFIX}/googlemaps/script",
        )
    )


@router.get("/panels/{kind}", response_class=HTMLResponse, summary="面板片段")
async def get_panel(
    kind: FeedKind = Depends(get_panel_kind),
    session: DashboardSession = Depends(get_dashboard_session),
) -> HTMLResponse:
    return _panel_response(session, kind)


@router.post("/panels/{kind}/refresh", response_class=HTMLResponse, summary="刷新面板")
async def refresh_panel(
    request: Request,
    kind: FeedKind = Depends(get_panel_kind),
    force: bool = Query(False, description="忽略缓存"),
    session: DashboardSession = Depends(get_dashboard_session),
) -> HTMLResponse:
    orchestrator = session.orchestrator
    if kind is FeedKind.FINANCE:
        await orchestrator.select_finance(
            symbol=request.query_params.get("symbol"),
            time_range=request.query_params.get("range"),
            interval=request.query_params.get("interval"),
        )
    else:
        params = {
            key: value for key, value in request.query_params.items() if key in PANEL_PARAMS
        }
        await orchestrator.refresh(kind, params or None, force=force)
    return _panel_response(session, kind)


@router.post("/panels/{kind}/next", response_class=HTMLResponse, summary="下一页")
async def next_page(
    kind: FeedKind = Depends(get_panel_kind),
    session: DashboardSession = Depends(get_dashboard_session),
) -> HTMLResponse:
    session.orchestrator.next_page(kind)
    return _panel_response(session, kind)


@router.post("/panels/{kind}/previous", response_class=HTMLResponse, summary="上一页")
async def previous_page(
    kind: FeedKind = Depends(get_panel_kind),
    session: DashboardSession = Depends(get_dashboard_session),
) -> HTMLResponse:
    session.orchestrator.previous_page(kind)
    return _panel_response(session, kind)


@router.post("/panels/{kind}/pause", response_class=HTMLResponse, summary="暂停面板")
async def pause_panel(
    kind: FeedKind = Depends(get_panel_kind),
    session: DashboardSession = Depends(get_dashboard_session),
) -> HTMLResponse:
    session.orchestrator.pause(kind)
    return _panel_response(session, kind)


@router.post("/panels/{kind}/resume", response_class=HTMLResponse, summary="恢复面板")
async def resume_panel(
    kind: FeedKind = Depends(get_panel_kind),
    session: DashboardSession = Depends(get_dashboard_session),
) -> HTMLResponse:
    await session.orchestrator.resume(kind)
    return _panel_response(session, kind)


@router.post("/panels/{kind}/toggle", response_class=HTMLResponse, summary="切换暂停")
async def toggle_panel(
    kind: FeedKind = Depends(get_panel_kind),
    session: DashboardSession = Depends(get_dashboard_session),
) -> HTMLResponse:
    await session.orchestrator.toggle_pause(kind)
    return _panel_response(session, kind)


@router.post("/panels/{kind}/dismiss", response_class=HTMLResponse, summary="关闭通知")
async def dismiss_notice(
    kind: FeedKind = Depends(get_panel_kind),
    session: DashboardSession = Depends(get_dashboard_session),
) -> HTMLResponse:
    session.orchestrator.dismiss_notice(kind)
    return _panel_response(session, kind)


@router.post("/panels/{kind}/retry", response_class=HTMLResponse, summary="重试")
async def retry_panel(
    kind: FeedKind = Depends(get_panel_kind),
    session: DashboardSession = Depends(get_dashboard_session),
) -> HTMLResponse:
    await session.orchestrator.retry(kind)
    return _panel_response(session, kind)


@router.post("/finance", response_class=HTMLResponse, summary="选择行情")
async def select_finance(
    symbol: str | None = Query(None, description="股票代码"),
    time_range: str | None = Query(None, alias="range", description="时间范围"),
    interval: str | None = Query(None, description="采样粒度"),
    session: DashboardSession = Depends(get_dashboard_session),
) -> HTMLResponse:
    await session.orchestrator.select_finance(
        symbol=symbol, time_range=time_range, interval=interval
    )
    return _panel_response(session, FeedKind.FINANCE)


@router.post("/chat", response_model=ChatMessageResponse, summary="发送聊天消息")
async def post_chat_message(
    request: ChatMessageRequest,
    session: DashboardSession = Depends(get_dashboard_session),
) -> ChatMessageResponse:
    reply = await session.chat.send(request.message)
    return ChatMessageResponse(
        reply=reply,
        messages_sent=session.chat.messages_sent,
        messages_remaining=max(session.chat.max_messages - session.chat.messages_sent, 0),
        tokens_used=session.chat.tokens_used,
    )
