"""
Time helpers. All timestamps are handled in UTC.

SQLite hands back naive datetimes even for ``DateTime(timezone=True)``
columns, so values read from the database go through ``as_utc`` before being
compared with ``utc_now()``.
"""

from datetime import datetime, time, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Single source of truth for "now" (timezone-aware, UTC)."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_overdue(deadline: Optional[datetime], status: str, now: Optional[datetime] = None) -> bool:
    """A task is overdue when its deadline has passed and it is not DONE."""
    if deadline is None or status == "DONE":
        return False
    return as_utc(deadline) < (now or utc_now())


def start_of_day(now: Optional[datetime] = None) -> datetime:
    now = now or utc_now()
    return datetime.combine(now.date(), time.min, tzinfo=timezone.utc)


def today_range(now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """[start of today, start of tomorrow) in UTC."""
    start = start_of_day(now)
    return start, start + timedelta(days=1)


def week_range(now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """[start of today, start of today + 7 days] in UTC."""
    start = start_of_day(now)
    return start, start + timedelta(days=7)
