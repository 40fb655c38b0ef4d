"""Working-day arithmetic.

A day is excluded when it falls on the weekly-off weekday or is listed as a
holiday; every other day in the inclusive range is a working day. The functions
here are pure: the holiday set is passed in, so a result can be replayed from
the same snapshot later.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import AbstractSet, Tuple

from ..common.datetime_utils import iter_days
from ..core.constants import DEFAULT_WEEKLY_OFF_DAY
from ..core.exceptions import InvalidRange


@dataclass(frozen=True)
class DayFlag:
    day: date
    weekly_off: bool
    holiday: bool

    @property
    def excluded(self) -> bool:
        return self.weekly_off or self.holiday


@dataclass(frozen=True)
class WorkingDays:
    start: date
    end: date
    days: Tuple[DayFlag, ...]

    @property
    def total_days(self) -> int:
        return len(self.days)

    @property
    def excluded_days(self) -> int:
        return sum(1 for d in self.days if d.excluded)

    @property
    def count(self) -> int:
        return self.total_days - self.excluded_days

    @property
    def excluded_dates(self) -> Tuple[date, ...]:
        return tuple(d.day for d in self.days if d.excluded)


def is_excluded(day: date, *, weekly_off: int = DEFAULT_WEEKLY_OFF_DAY, holidays: AbstractSet[date] = frozenset()) -> bool:
    return day.weekday() == weekly_off or day in holidays


def working_days(
    start: date,
    end: date,
    *,
    weekly_off: int = DEFAULT_WEEKLY_OFF_DAY,
    holidays: AbstractSet[date] = frozenset(),
) -> WorkingDays:
    """Flag every day of [start, end]; a reversed range gives an empty result (count 0)."""
    flags = tuple(
        DayFlag(day=d, weekly_off=d.weekday() == weekly_off, holiday=d in holidays)
        for d in iter_days(start, end)
    )
    return WorkingDays(start=start, end=end, days=flags)


def require_range(start: date, end: date) -> None:
    if end < start:
        raise InvalidRange("End date cannot be before start date")
