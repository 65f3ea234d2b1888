from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo


Clock = Callable[[], datetime]


def store_zone(tz_name: Optional[str] = None):
    """Zone for the store's calendar; None means the host's local zone."""
    if tz_name:
        return ZoneInfo(tz_name)
    return datetime.now().astimezone().tzinfo


def make_clock(tz_name: Optional[str] = None) -> Clock:
    """Clock returning aware 'now' in the store zone."""
    zone = store_zone(tz_name)

    def _now() -> datetime:
        return datetime.now(timezone.utc).astimezone(zone)

    return _now


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string, keeping its offset.

    - None / "" -> None
    - "...Z" is accepted as UTC
    - naive values are interpreted as UTC
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serialize an aware datetime with its offset. Naive values are treated as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def local_date(dt: datetime, zone) -> date:
    """Calendar date of dt as seen in the store zone."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(zone).date()
