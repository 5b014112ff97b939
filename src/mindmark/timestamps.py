"""Timestamp helpers for the metadata comment and UI-friendly dates."""

from __future__ import annotations

from datetime import datetime

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def datetime_to_string(value: datetime | None) -> str:
    """Render *value* in the metadata comment format; ``""`` when unset."""
    if value is None:
        return ""
    return value.strftime(TIMESTAMP_FORMAT)


def string_to_datetime(text: str | None) -> datetime | None:
    """Inverse of :func:`datetime_to_string`; ``None`` for blank or bad input."""
    if not text or not text.strip():
        return None
    try:
        return datetime.strptime(text.strip(), TIMESTAMP_FORMAT)
    except ValueError:
        return None


def datetime_to_pretty(value: datetime | None, now: datetime | None = None) -> str:
    """Short human form: time today, ``Mon DD`` this year, full date otherwise."""
    if value is None:
        return ""
    now = now or datetime.now()
    if value.date() == now.date():
        return value.strftime("%H:%M")
    if value.year == now.year:
        return value.strftime("%b %d")
    return value.strftime("%Y-%m-%d")
