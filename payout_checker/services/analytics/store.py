"""
In-memory analytics store.

Holds visitor sessions, counters, a rolling buffer of recent events and the
ping-based presence table. One instance lives for the process lifetime
(created in the app lifespan) and is handed to routes via a dependency, so
tests can build their own with a fake clock.

State resets on restart. All mutation happens from async route handlers on
the event loop thread, so no locking is needed.
"""

import math
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import structlog

from payout_checker.services.analytics.classify import browser_for, device_for, hash_ip

logger = structlog.get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class SessionRecord:
    """A tracked visitor session."""

    ip_hash: str
    first_seen: int
    last_seen: int
    device: str
    browser: str
    referrer: str
    duration_ms: int = 0


@dataclass(frozen=True)
class AnalyticsEvent:
    ts: int
    session_id: str
    event: str
    data: dict[str, Any]


@dataclass
class Counters:
    total_sessions: int = 0
    affiliate_clicks: int = 0
    account_selections: dict[str, int] = field(default_factory=dict)
    referrers: dict[str, int] = field(default_factory=dict)
    devices: dict[str, int] = field(
        default_factory=lambda: {"mobile": 0, "desktop": 0, "unknown": 0}
    )
    browsers: dict[str, int] = field(default_factory=dict)


@dataclass
class PresenceRecord:
    ip: str
    start: int
    last: int


@dataclass(frozen=True)
class EndedVisit:
    """A presence entry that went idle and was swept."""

    session_id: str
    ip: str
    duration_ms: int

    @property
    def display(self) -> str:
        secs = self.duration_ms // 1000
        return f"{secs // 60}m {secs % 60}s"


@dataclass(frozen=True)
class AnalyticsSummary:
    """Snapshot served by the admin stats endpoint."""

    now: int
    total_sessions: int
    active_sessions: int
    avg_duration_sec: int
    affiliate_clicks: int
    devices: dict[str, int]
    browsers: dict[str, int]
    accounts: dict[str, int]
    referrers: dict[str, int]
    recent_sessions: list[SessionRecord]
    recent_events: list[AnalyticsEvent]


def _bump(counter: dict[str, int], key: Optional[str]) -> None:
    key = key or "unknown"
    counter[key] = counter.get(key, 0) + 1


def _referrer_for(data: dict[str, Any]) -> str:
    """Referrer domain from the beacon; anything but a non-empty string is direct."""
    value = data.get("referrerDomain")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return "direct"


class AnalyticsStore:
    """
    Process-local analytics state.

    Usage:
        store = AnalyticsStore()
        store.record_event("s-1", "page_view", {}, ip="1.2.3.4", user_agent=ua)
        summary = store.summarize()
    """

    def __init__(
        self,
        clock: Callable[[], int] = _now_ms,
        event_buffer_size: int = 100,
        active_window_ms: int = 25_000,
        presence_idle_timeout_ms: int = 20_000,
        recent_sessions_limit: int = 20,
        recent_events_limit: int = 30,
        max_sessions: int = 10_000,
    ):
        self._clock = clock
        self.max_sessions = max_sessions
        self.active_window_ms = active_window_ms
        self.presence_idle_timeout_ms = presence_idle_timeout_ms
        self.recent_sessions_limit = recent_sessions_limit
        self.recent_events_limit = recent_events_limit

        self._sessions: dict[str, SessionRecord] = {}
        self._counters = Counters()
        self._events: deque[AnalyticsEvent] = deque(maxlen=event_buffer_size)
        self._presence: dict[str, PresenceRecord] = {}

    @property
    def counters(self) -> Counters:
        return self._counters

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        return self._sessions.get(session_id)

    def record_event(
        self,
        session_id: str,
        event: str,
        data: Optional[dict[str, Any]] = None,
        ts: Optional[int] = None,
        ip: str = "unknown",
        user_agent: str = "",
    ) -> bool:
        """
        Record an analytics event.

        Args:
            session_id: Client-generated session identifier
            event: Event name (page_view, account_select, affiliate_click, session_end, ...)
            data: Event payload
            ts: Client timestamp in ms; falls back to the store clock
            ip: Client IP (only its hash is kept)
            user_agent: Client user agent, used for device/browser breakdowns

        Returns:
            True if this event started a new session.
        """
        data = data or {}
        now = ts or self._clock()

        session = self._sessions.get(session_id)
        is_new = session is None
        if session is None:
            device = device_for(user_agent)
            browser = browser_for(user_agent)
            referrer = _referrer_for(data)
            session = SessionRecord(
                ip_hash=hash_ip(ip),
                first_seen=now,
                last_seen=now,
                device=device,
                browser=browser,
                referrer=referrer,
            )
            self._sessions[session_id] = session
            if len(self._sessions) > self.max_sessions:
                # Oldest session record goes first; counters keep their totals
                del self._sessions[next(iter(self._sessions))]

            self._counters.total_sessions += 1
            _bump(self._counters.devices, device)
            _bump(self._counters.browsers, browser)
            _bump(self._counters.referrers, referrer)
        else:
            session.last_seen = now

        if event == "account_select" and data.get("account"):
            _bump(self._counters.account_selections, str(data["account"]))

        if event == "affiliate_click":
            self._counters.affiliate_clicks += 1

        duration = data.get("durationMs")
        if (
            event == "session_end"
            and isinstance(duration, (int, float))
            and not isinstance(duration, bool)
            and math.isfinite(duration)
        ):
            session.duration_ms = int(duration)

        self._events.append(
            AnalyticsEvent(ts=now, session_id=session_id, event=event, data=data)
        )
        return is_new

    def list_recent(self, limit: Optional[int] = None) -> list[AnalyticsEvent]:
        """Most recent events, newest first."""
        if limit is None:
            limit = self.recent_events_limit
        if limit <= 0:
            return []
        return list(self._events)[-limit:][::-1]

    def summarize(self, now: Optional[int] = None) -> AnalyticsSummary:
        now = now if now is not None else self._clock()
        sessions = list(self._sessions.values())

        active_cutoff = now - self.active_window_ms
        active = [s for s in sessions if s.last_seen and s.last_seen >= active_cutoff]

        durations = [s.duration_ms for s in sessions if s.duration_ms > 0]
        avg_duration_sec = (
            round(sum(durations) / len(durations) / 1000) if durations else 0
        )

        recent_sessions = sorted(sessions, key=lambda s: s.last_seen or 0, reverse=True)

        return AnalyticsSummary(
            now=now,
            total_sessions=self._counters.total_sessions,
            active_sessions=len(active),
            avg_duration_sec=avg_duration_sec,
            affiliate_clicks=self._counters.affiliate_clicks,
            devices=dict(self._counters.devices),
            browsers=dict(self._counters.browsers),
            accounts=dict(self._counters.account_selections),
            referrers=dict(self._counters.referrers),
            recent_sessions=recent_sessions[: self.recent_sessions_limit],
            recent_events=self.list_recent(),
        )

    # -------------------------------------------------------------------------
    # Presence (ping heartbeats)
    # -------------------------------------------------------------------------

    def heartbeat(
        self, session_id: str, ip: str, now: Optional[int] = None
    ) -> list[EndedVisit]:
        """Create or refresh a presence entry, then sweep idle ones."""
        now = now if now is not None else self._clock()
        record = self._presence.get(session_id)
        if record is None:
            self._presence[session_id] = PresenceRecord(ip=ip, start=now, last=now)
        else:
            record.last = now
        return self.sweep_presence(now)

    def sweep_presence(self, now: Optional[int] = None) -> list[EndedVisit]:
        """Remove presence entries idle for longer than the timeout."""
        now = now if now is not None else self._clock()
        ended = []
        for session_id, record in list(self._presence.items()):
            if now - record.last > self.presence_idle_timeout_ms:
                visit = EndedVisit(
                    session_id=session_id,
                    ip=record.ip,
                    duration_ms=record.last - record.start,
                )
                del self._presence[session_id]
                ended.append(visit)
                logger.info(
                    "visitor_left",
                    client_type="HUMAN",
                    ip=visit.ip,
                    stayed=visit.display,
                    duration_ms=visit.duration_ms,
                )
        return ended

    @property
    def present_count(self) -> int:
        return len(self._presence)
