"""Datetime utilities for timezone-aware UTC timestamps and display dates.

Usage:
    from libs.common.datetime_utils import parse_datetime, today

    draft["payment_date"] = today().isoformat()
    sent_at = parse_datetime(payload["payment_date"])
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional, Union

NOT_AVAILABLE = "N/A"


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    This replaces the deprecated datetime.utcnow() which returns naive datetimes.
    """
    return datetime.now(timezone.utc)


def today() -> date:
    """Current UTC calendar date."""
    return utc_now().date()


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes (the API's LocalDateTime values) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_datetime(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-8601 date or timestamp into an aware datetime.

    Returns None for empty input; raises ValueError for anything unparseable.
    A bare date becomes midnight UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    if len(text) == 10:
        return datetime.combine(date.fromisoformat(text), time.min, tzinfo=timezone.utc)
    return ensure_aware(datetime.fromisoformat(text))


def to_iso_timestamp(value: Union[str, date, datetime]) -> str:
    """ISO-8601 UTC timestamp as sent to the API."""
    parsed = parse_datetime(value)
    if parsed is None:
        raise ValueError("A date is required")
    return parsed.astimezone(timezone.utc).isoformat()


def format_date(value: Union[str, date, datetime, None]) -> str:
    """Short display date, e.g. ``Jan 5, 2024``."""
    try:
        parsed = parse_datetime(value)
    except ValueError:
        return NOT_AVAILABLE
    if parsed is None:
        return NOT_AVAILABLE
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def format_datetime(value: Union[str, date, datetime, None]) -> str:
    """Display date with time of day, e.g. ``Jan 5, 2024, 09:30 AM``."""
    try:
        parsed = parse_datetime(value)
    except ValueError:
        return NOT_AVAILABLE
    if parsed is None:
        return NOT_AVAILABLE
    return f"{format_date(parsed)}, {parsed:%I:%M %p}"
