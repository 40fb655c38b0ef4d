from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterator

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_clock_time(value: str) -> time:
    """Parse HH:MM (or HH:MM:SS) string into time."""
    v = (value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid time (HH:MM): {value!r}")


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
