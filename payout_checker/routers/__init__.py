"""API routers for the payout checker."""

from payout_checker.routers import (
    analytics,
    checker,
    eligibility,
    health,
    metrics,
    trade_import,
)

__all__ = ["analytics", "checker", "eligibility", "health", "metrics", "trade_import"]
