"""Utility functions for the application."""

from __future__ import annotations

import datetime
from typing import Any, Optional


def isoformat_utc(moment: datetime.datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC.

    This is the shape the SPA produces with ``Date.toISOString()``, so stored
    timestamps sort and compare the same whichever side wrote them.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(datetime.timezone.utc)
    millis = moment.microsecond // 1000
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{millis:03d}Z"


def utcnow_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return isoformat_utc(datetime.datetime.now(datetime.timezone.utc))


def utc_midnight_iso(day: datetime.date) -> str:
    """Return midnight UTC of the given day as an ISO-8601 string."""
    return f"{day.isoformat()}T00:00:00.000Z"


def parse_iso_datetime(value: str) -> datetime.datetime:
    """Parse an ISO-8601 date or datetime string.

    Raises:
        ValueError: If the string is not ISO-8601.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.datetime.fromisoformat(text)


def coerce_date(value: Any) -> Optional[datetime.date]:
    """Convert a stored date value to a ``date``, or None if it is not one.

    Firestore hands back timestamps as datetimes, while the SPA stores plain
    ISO strings; both are accepted.
    """
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return parse_iso_datetime(value).date()
        except ValueError:
            return None
    return None
