"""Health check endpoint."""

import structlog
from fastapi import APIRouter, Depends, Request

from payout_checker import __version__
from payout_checker.config import Settings, get_settings
from payout_checker.schemas import HealthResponse

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """
    Report service status.

    Degraded when the analytics store is missing or the trade import relay
    is not configured; the eligibility checker itself has no dependencies.
    """
    store = getattr(request.app.state, "analytics_store", None)
    relay = getattr(request.app.state, "import_relay", None)

    overall_status = "ok" if store is not None and relay is not None else "degraded"
    if overall_status != "ok":
        logger.info(
            "Health check degraded",
            analytics_store=store is not None,
            trade_import=relay is not None,
        )

    return HealthResponse(
        status=overall_status,
        version=__version__,
        git_sha=settings.git_sha,
        trade_import_enabled=relay is not None,
        tracked_sessions=store.counters.total_sessions if store else 0,
        present_visitors=store.present_count if store else 0,
    )
