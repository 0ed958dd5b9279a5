"""
UTC time helpers shared by pricing and tier code.

Validity windows are closed on both ends: a rule is in force at T when
effective_from <= T and (effective_until is None or effective_until >= T).
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise a datetime to aware UTC.

    Some drivers (SQLite) hand back naive values for timezone-aware
    columns; those are stored as UTC, so they are tagged rather than shifted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_month(moment: datetime) -> datetime:
    """Midnight UTC on the first day of the month containing ``moment``."""
    moment = as_utc(moment)
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def window_contains(
    effective_from: Optional[datetime],
    effective_until: Optional[datetime],
    moment: datetime,
) -> bool:
    """True if ``moment`` falls inside the validity window."""
    start = as_utc(effective_from)
    if start is None:
        return False
    moment = as_utc(moment)
    end = as_utc(effective_until)
    return start <= moment and (end is None or end >= moment)
