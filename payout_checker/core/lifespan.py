"""Application lifespan management - startup and shutdown logic."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from fastapi import FastAPI

from payout_checker import __version__
from payout_checker.config import Settings, get_settings
from payout_checker.services.analytics import AnalyticsStore
from payout_checker.services.trade_import import ImportRelay, TradesVizClient

logger = structlog.get_logger(__name__)


def _init_analytics_store(settings: Settings) -> AnalyticsStore:
    """Create the process-lifetime analytics store."""
    store = AnalyticsStore(
        event_buffer_size=settings.analytics_event_buffer_size,
        active_window_ms=settings.analytics_active_window_ms,
        presence_idle_timeout_ms=settings.presence_idle_timeout_ms,
        recent_sessions_limit=settings.admin_recent_sessions,
        recent_events_limit=settings.admin_recent_events,
        max_sessions=settings.analytics_max_sessions,
    )
    logger.info(
        "Analytics store initialized",
        primary_host=settings.primary_host,
        event_buffer_size=settings.analytics_event_buffer_size,
    )
    return store


def _init_trade_import(settings: Settings) -> Optional[ImportRelay]:
    """Build the TradesViz relay, or None when no API key is configured."""
    if not settings.tradesviz_enabled:
        logger.warning(
            "Trade import relay disabled. Set TRADESVIZ_API_KEY to enable uploads."
        )
        return None

    client = TradesVizClient(
        api_key=settings.tradesviz_api_key,
        base_url=settings.tradesviz_base_url,
        timeout=settings.tradesviz_timeout,
    )
    logger.info(
        "Trade import relay initialized",
        base_url=settings.tradesviz_base_url,
        max_polls=settings.tradesviz_max_polls,
        poll_interval_s=settings.tradesviz_poll_interval_s,
    )
    return ImportRelay(
        client,
        max_polls=settings.tradesviz_max_polls,
        poll_interval=settings.tradesviz_poll_interval_s,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "Starting Payout Checker",
        version=__version__,
        git_sha=settings.git_sha or "unknown",
        host=settings.service_host,
        port=settings.service_port,
    )

    app.state.analytics_store = _init_analytics_store(settings)
    app.state.import_relay = _init_trade_import(settings)

    yield

    logger.info("Shutting down Payout Checker")

    relay: Optional[ImportRelay] = app.state.import_relay
    if relay is not None:
        await relay.client.close()
        logger.info("TradesViz client closed")
    app.state.import_relay = None
