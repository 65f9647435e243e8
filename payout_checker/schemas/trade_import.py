"""Trade import relay schemas."""

from typing import Any, Optional

from pydantic import Field

from payout_checker.schemas.analytics import CamelModel


class TradeImportResponse(CamelModel):
    """Parsed trades from a completed TradesViz import."""

    ok: bool = True
    import_id: str
    trades: list[dict[str, Any]] = Field(default_factory=list)


class TradeImportErrorResponse(CamelModel):
    """Relay failure body (upstream rejection or timeout)."""

    error: str
    import_id: Optional[str] = None
    details: Any = None
