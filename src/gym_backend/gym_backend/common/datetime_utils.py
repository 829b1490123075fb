from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value) -> Optional[datetime]:
    """Accept datetime, date or ISO string (date or datetime); None passes through."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max)


def start_of_month(value: datetime) -> datetime:
    return datetime(value.year, value.month, 1)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes between two instants, half-up rounding."""
    return int(math.floor((end - start).total_seconds() / 60 + 0.5))


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=int(days))
