"""
Time and rounding helpers shared by sessions, goals, grading and recommendations.
"""

import calendar
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string or datetime into an aware UTC datetime; None if unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).strip())
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def duration_minutes(start: Any, end: Any) -> int:
    """Whole minutes between two timestamps, half-up rounded."""
    start_dt = parse_timestamp(start)
    end_dt = parse_timestamp(end)
    if start_dt is None or end_dt is None:
        raise ValueError("start and end must be valid timestamps")
    return round_half_up((end_dt - start_dt).total_seconds() / 60)


def subtract_one_month(moment: datetime) -> datetime:
    """Same day-of-month one calendar month earlier, clamped to the month's last day."""
    year, month = moment.year, moment.month - 1
    if month == 0:
        year, month = year - 1, 12
    last_day = calendar.monthrange(year, month)[1]
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))


def window_start(period: str, now: Optional[datetime] = None) -> datetime:
    """Start of the trailing goal window: 7 days for weekly, 1 calendar month for monthly."""
    now = now or datetime.now(timezone.utc)
    if period == "weekly":
        return now - timedelta(days=7)
    return subtract_one_month(now)


def short_date(moment: datetime) -> str:
    """M/D/YYYY, as shown in quiz titles"""
    return f"{moment.month}/{moment.day}/{moment.year}"
