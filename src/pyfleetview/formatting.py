"""Display helpers for device views."""

from __future__ import annotations

from datetime import UTC, datetime

from pyfleetview.models._base import ensure_utc

UNKNOWN = "Unknown"


def format_datetime(value: datetime | None) -> str:
    """Render *value* in the local time zone, or ``"Unknown"``."""
    if value is None:
        return UNKNOWN
    aware = ensure_utc(value)
    assert aware is not None  # noqa: S101
    return aware.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def format_time_ago(value: datetime | None, now: datetime | None = None) -> str:
    """Render the age of *value* as ``Just now``, ``5m ago``, ``3h ago`` or ``2d ago``."""
    if value is None:
        return UNKNOWN
    if now is None:
        now = datetime.now(UTC)
    aware = ensure_utc(value)
    assert aware is not None  # noqa: S101
    seconds = int((now - aware).total_seconds())
    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def format_coordinates(latitude: float | None, longitude: float | None) -> str:
    if latitude is None or longitude is None:
        return UNKNOWN
    return f"{latitude:.6f}, {longitude:.6f}"
