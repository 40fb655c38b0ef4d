from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from ..common.datetime_utils import iter_days
from ..core.constants import DEFAULT_STATS_DAYS
from ..core.enums import DayStatus
from .model import AttendanceRecord, DailyHours, HoursSummary


def summarize(records: Iterable[AttendanceRecord], *, start: date, end: date) -> HoursSummary:
    """Bucket records by day over [start, end]; days without a finished record count zero hours."""
    by_day = {r.work_date: r for r in records if start <= r.work_date <= end}

    days = []
    total = 0.0
    worked = 0
    for day in iter_days(start, end):
        rec = by_day.get(day)
        if rec is None:
            days.append(DailyHours(day=day, hours=0.0, status=DayStatus.ABSENT))
            continue
        hours = rec.hours_worked
        if hours is None:
            days.append(DailyHours(day=day, hours=0.0, status=DayStatus.INCOMPLETE))
            continue
        days.append(DailyHours(day=day, hours=round(hours, 2), status=DayStatus.PRESENT))
        total += hours
        worked += 1

    return HoursSummary(days=tuple(days), total_hours=round(total, 2), days_worked=worked)


def recent_days(records: Iterable[AttendanceRecord], *, today: date, days: int = DEFAULT_STATS_DAYS) -> HoursSummary:
    """The ``days`` most recent calendar days ending today, oldest first."""
    return summarize(records, start=today - timedelta(days=days - 1), end=today)
