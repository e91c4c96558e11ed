"""Coarse relative-age labels ("3h ago") for timestamps."""

from datetime import datetime, timezone
from typing import Optional


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_relative_time(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """
    Convert a timestamp into a relative-age label.

    Args:
        timestamp: Moment to describe; naive values are treated as UTC
        now: Reference time, defaults to the current wall clock

    Returns:
        One of ``just now``, ``{m}m ago``, ``{h}h ago``, ``{d}d ago``,
        ``{w}w ago`` or ``{mo}mo ago``
    """
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    elapsed_seconds = int((now - as_utc(timestamp)).total_seconds())

    if elapsed_seconds < 60:
        return "just now"

    minutes = elapsed_seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"

    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"

    days = hours // 24
    if days < 7:
        return f"{days}d ago"

    weeks = days // 7
    if weeks < 4:
        return f"{weeks}w ago"

    # Not calendar aware
    return f"{days // 30}mo ago"
