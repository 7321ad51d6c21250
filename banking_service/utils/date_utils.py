"""Date manipulation utilities"""

from datetime import date, datetime, time, timezone
from typing import Optional, Tuple


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def day_bounds(
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Expand a date range to datetimes covering both days fully (inclusive)"""
    start_at = datetime.combine(start, time.min, tzinfo=timezone.utc) if start else None
    end_at = datetime.combine(end, time.max, tzinfo=timezone.utc) if end else None
    return start_at, end_at
