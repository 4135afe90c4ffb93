"""Forex session tracker: which trading sessions are open right now.

Session hours are fixed UTC approximations; daylight-saving shifts are not
modelled. Sessions that cross midnight (Sydney) wrap around.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import NamedTuple

from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

TZ_UTC = timezone.utc


class SessionStatus(str, Enum):
    OPEN = "open"
    UPCOMING = "upcoming"  # opens within the next hour
    CLOSED = "closed"


class ForexSession(NamedTuple):
    """A trading session with open/close hours in UTC."""

    name: str
    open_hour: int  # UTC, inclusive
    close_hour: int  # UTC, exclusive
    tz: ZoneInfo  # for local-time display only


SESSIONS: tuple[ForexSession, ...] = (
    ForexSession("Sydney", 21, 6, ZoneInfo("Australia/Sydney")),
    ForexSession("Tokyo", 0, 9, ZoneInfo("Asia/Tokyo")),
    ForexSession("London", 8, 17, ZoneInfo("Europe/London")),
    ForexSession("New York", 13, 22, ZoneInfo("America/New_York")),
)


def _as_utc(at: datetime | None) -> datetime:
    if at is None:
        return datetime.now(TZ_UTC)
    if at.tzinfo is None:
        return at.replace(tzinfo=TZ_UTC)
    return at.astimezone(TZ_UTC)


def _hour_in_session(hour: int, session: ForexSession) -> bool:
    if session.open_hour > session.close_hour:
        return hour >= session.open_hour or hour < session.close_hour
    return session.open_hour <= hour < session.close_hour


def session_status(session: ForexSession, at_utc: datetime | None = None) -> SessionStatus:
    """Open, opening within the hour, or closed."""
    hour = _as_utc(at_utc).hour

    if _hour_in_session(hour, session):
        return SessionStatus.OPEN
    if (hour + 1) % 24 == session.open_hour:
        return SessionStatus.UPCOMING
    return SessionStatus.CLOSED


def session_status_summary(at_utc: datetime | None = None) -> list[dict]:
    """Status of every session, suitable for API responses."""
    at_utc = _as_utc(at_utc)

    results = []
    for session in SESSIONS:
        results.append({
            "session": session.name,
            "status": session_status(session, at_utc).value,
            "hours_utc": f"{session.open_hour:02d}:00 - {session.close_hour:02d}:00",
            "local_time": at_utc.astimezone(session.tz).strftime("%H:%M %Z"),
        })
    return results


def overlapping_sessions(at_utc: datetime | None = None) -> list[str]:
    """Names of all sessions open at the same time (overlaps are the liquid hours)."""
    return [
        s.name for s in SESSIONS if session_status(s, at_utc) == SessionStatus.OPEN
    ]
