"""Analytics and visitor lookup schemas.

Wire format is camelCase to match the browser tracker script.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrackEventRequest(CamelModel):
    """Body posted by the tracker script. Both ids are checked by the route."""

    session_id: Optional[str] = None
    event: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)
    ts: Optional[float] = None

    @field_validator("data", mode="before")
    @classmethod
    def _data_as_dict(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}

    @field_validator("ts", mode="before")
    @classmethod
    def _loose_ts(cls, v: Any) -> Any:
        # Unparseable timestamps fall back to the server clock
        try:
            return float(v) if v is not None else None
        except (TypeError, ValueError):
            return None


class SessionOut(CamelModel):
    ip_hash: str
    first_seen: int
    last_seen: int
    device: str
    browser: str
    referrer: str
    duration_ms: int


class EventOut(CamelModel):
    ts: int
    session_id: str
    event: str
    data: dict[str, Any]


class StatsTotals(CamelModel):
    total_sessions: int
    active_sessions: int
    avg_duration_sec: int
    affiliate_clicks: int


class StatsBreakdowns(CamelModel):
    devices: dict[str, int]
    browsers: dict[str, int]
    accounts: dict[str, int]
    referrers: dict[str, int]


class AdminStatsResponse(CamelModel):
    """Analytics snapshot for the admin dashboard."""

    now: int
    totals: StatsTotals
    breakdowns: StatsBreakdowns
    recent_sessions: list[SessionOut]
    recent_events: list[EventOut]


class LogIpResponse(CamelModel):
    ok: bool = True
    type: str
    ip: str
    user_agent: str


class PingResponse(CamelModel):
    ok: bool = True
    type: Optional[str] = None
