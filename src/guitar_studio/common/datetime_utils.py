from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Any, Tuple

from ..core.exceptions import ValidationError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_datetime(value: Any, field_name: str = "date") -> datetime:
    """Accept a datetime, a date, 'YYYY-MM-DD' (local midnight) or an ISO timestamp."""

    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        v = value.strip()
        try:
            if _ISO_DATE.match(v):
                return datetime.combine(parse_iso_date(v), time.min)
            parsed = datetime.fromisoformat(v.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"{field_name} không hợp lệ")
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed
    raise ValidationError(f"{field_name} không hợp lệ")


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def day_bounds(value: datetime) -> Tuple[datetime, datetime]:
    """Return [00:00:00, 23:59:59.999] of the day containing value."""
    start = start_of_day(value)
    return start, start + timedelta(days=1) - timedelta(milliseconds=1)


def day_of_week(value: date) -> int:
    """Weekday index with 0 = Sunday ... 6 = Saturday."""
    return (value.weekday() + 1) % 7


def at_time(day: datetime, hhmm: str) -> datetime:
    """Same calendar day as `day` at the given 'HH:MM'."""
    hours, minutes = (int(p) for p in hhmm.split(":"))
    return datetime.combine(day.date(), time(hour=hours, minute=minutes))
