"""API router aggregation - includes all application routers."""

from fastapi import APIRouter

from payout_checker.routers import (
    analytics,
    checker,
    eligibility,
    health,
    metrics,
    trade_import,
)

# Main API router
api_router = APIRouter()

# Health and metrics
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(metrics.router)  # Metrics endpoint (excluded from OpenAPI)

# Payout eligibility
api_router.include_router(eligibility.router, tags=["Eligibility"])
api_router.include_router(checker.router)

# Visitor analytics
api_router.include_router(analytics.router, tags=["Analytics"])

# Trade import relay
api_router.include_router(trade_import.router, tags=["Trade Import"])
