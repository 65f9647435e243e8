"""Dependencies that hand process-lifetime services to routes.

Instances are created in the app lifespan and kept on app.state; tests
either set app.state directly or use dependency_overrides.
"""

from fastapi import HTTPException, Request, status

from payout_checker.services.analytics import AnalyticsStore
from payout_checker.services.trade_import import ImportRelay


def get_analytics_store(request: Request) -> AnalyticsStore:
    store = getattr(request.app.state, "analytics_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analytics store not initialized",
        )
    return store


def get_import_relay(request: Request) -> ImportRelay:
    relay = getattr(request.app.state, "import_relay", None)
    if relay is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Trade import not configured. Set TRADESVIZ_API_KEY.",
        )
    return relay
