"""Visitor analytics endpoints: event tracking, presence pings, admin stats."""

import json
import math
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import ValidationError

from payout_checker.config import Settings, get_settings
from payout_checker.deps import (
    get_analytics_store,
    is_primary_host,
    request_ip,
    require_admin_token,
    require_primary_host,
)
from payout_checker.routers import metrics
from payout_checker.schemas import (
    AdminStatsResponse,
    EventOut,
    LogIpResponse,
    PingResponse,
    SessionOut,
    StatsBreakdowns,
    StatsTotals,
    TrackEventRequest,
)
from payout_checker.services.analytics import (
    AnalyticsStore,
    AnalyticsSummary,
    classify_client,
    is_browser,
)

router = APIRouter(prefix="/api")
logger = structlog.get_logger(__name__)


def _parse_track_body(raw: bytes) -> dict[str, Any]:
    """Decode a tracker body; sendBeacon may deliver JSON as a JSON string."""
    try:
        payload: Any = json.loads(raw or b"{}")
        if isinstance(payload, str):
            payload = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return payload if isinstance(payload, dict) else {}


def _to_stats_response(summary: AnalyticsSummary) -> AdminStatsResponse:
    return AdminStatsResponse(
        now=summary.now,
        totals=StatsTotals(
            total_sessions=summary.total_sessions,
            active_sessions=summary.active_sessions,
            avg_duration_sec=summary.avg_duration_sec,
            affiliate_clicks=summary.affiliate_clicks,
        ),
        breakdowns=StatsBreakdowns(
            devices=summary.devices,
            browsers=summary.browsers,
            accounts=summary.accounts,
            referrers=summary.referrers,
        ),
        recent_sessions=[
            SessionOut(
                ip_hash=s.ip_hash,
                first_seen=s.first_seen,
                last_seen=s.last_seen,
                device=s.device,
                browser=s.browser,
                referrer=s.referrer,
                duration_ms=s.duration_ms,
            )
            for s in summary.recent_sessions
        ],
        recent_events=[
            EventOut(ts=e.ts, session_id=e.session_id, event=e.event, data=e.data)
            for e in summary.recent_events
        ],
    )


@router.post("/track", status_code=status.HTTP_204_NO_CONTENT)
async def track_event(
    request: Request,
    store: AnalyticsStore = Depends(get_analytics_store),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Record an analytics event from the tracker script.

    Requests from other hosts or non-browser agents are dropped silently
    (204, nothing recorded).
    """
    user_agent = request.headers.get("user-agent", "")
    if not is_primary_host(request, settings) or not is_browser(user_agent):
        metrics.record_track_event("ignored")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    payload = _parse_track_body(await request.body())
    try:
        body = TrackEventRequest.model_validate(payload)
    except ValidationError:
        body = TrackEventRequest()

    if not body.session_id or not body.event:
        metrics.record_track_event("rejected")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing sessionId or event",
        )

    ts: Optional[int] = None
    if body.ts and math.isfinite(body.ts):
        ts = int(body.ts)

    is_new = store.record_event(
        session_id=body.session_id,
        event=body.event,
        data=body.data,
        ts=ts,
        ip=request_ip(request),
        user_agent=user_agent,
    )
    metrics.record_track_event("recorded")
    logger.debug(
        "Analytics event recorded",
        event_name=body.event,
        new_session=is_new,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/admin-stats", response_model=AdminStatsResponse)
async def admin_stats(
    _host: bool = Depends(require_primary_host),
    _admin: bool = Depends(require_admin_token),
    store: AnalyticsStore = Depends(get_analytics_store),
) -> AdminStatsResponse:
    """Analytics snapshot: totals, breakdowns, latest sessions and events."""
    return _to_stats_response(store.summarize())


@router.get("/ping", response_model=PingResponse, response_model_exclude_none=True)
async def ping(
    request: Request,
    session: Optional[str] = Query(None, description="Client session id"),
    store: AnalyticsStore = Depends(get_analytics_store),
    settings: Settings = Depends(get_settings),
) -> PingResponse:
    """
    Presence heartbeat. Each ping refreshes the visitor and sweeps visitors
    that went quiet, logging how long they stayed.
    """
    user_agent = request.headers.get("user-agent", "")
    if not is_primary_host(request, settings) or not is_browser(user_agent) or not session:
        return PingResponse(type="IGNORED")

    store.heartbeat(session, request_ip(request))
    metrics.set_present_visitors(store.present_count)
    return PingResponse()


@router.get("/log-ip", response_model=LogIpResponse)
async def log_ip(request: Request) -> LogIpResponse:
    """Report and log who is calling (browser, edge function, health check)."""
    user_agent = request.headers.get("user-agent", "")
    ip = request_ip(request)
    client_type = classify_client(user_agent)

    logger.info("Client classified", client_type=client_type.value, ip=ip)

    return LogIpResponse(type=client_type.value, ip=ip, user_agent=user_agent)
