from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, time, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_month(value: str) -> date:
    """Parse YYYY-MM string into the first day of that month."""
    return datetime.strptime(value, "%Y-%m").date()


def month_bounds(month: date) -> tuple[date, date]:
    first = month.replace(day=1)
    last = first.replace(day=monthrange(first.year, first.month)[1])
    return first, last


def day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """Half-open datetime window covering the inclusive date range."""
    return datetime.combine(start, time.min), datetime.combine(end + timedelta(days=1), time.min)


def whole_minutes_between(start: datetime, end: datetime) -> int:
    minutes = int((end - start).total_seconds() // 60)
    return max(minutes, 0)


def now_local() -> datetime:
    """Default clock for the attendance engine (naive local time)."""
    return datetime.now()
