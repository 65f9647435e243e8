"""Payout Checker - FastAPI Application."""

import logging

import structlog
from fastapi import FastAPI

from payout_checker import __version__
from payout_checker.api.router import api_router
from payout_checker.config import Settings, get_settings
from payout_checker.core.lifespan import lifespan
from payout_checker.core.middleware import setup_middleware
from payout_checker.core.sentry import init_sentry


def configure_logging(settings: Settings) -> None:
    """Configure structured JSON logging."""
    logging.basicConfig(format="%(message)s", level=settings.log_level.upper())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    settings = get_settings()
    configure_logging(settings)
    init_sentry(settings)

    # Conditionally disable docs in production (set DOCS_ENABLED=false)
    app = FastAPI(
        title="Payout Checker",
        description="Prop-firm payout eligibility checker with visitor analytics",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.docs_enabled else None,
        redoc_url="/redoc" if settings.docs_enabled else None,
        openapi_url="/openapi.json" if settings.docs_enabled else None,
    )

    if not settings.docs_enabled:
        logger.info("API docs disabled (DOCS_ENABLED=false)")

    setup_middleware(app, settings)
    app.include_router(api_router)

    return app


app = create_app()

