from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, FrozenSet, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_WEEKLY_OFF_DAY
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from .calendar_rules import WorkingDays, require_range, working_days
from .model import Holiday
from .repository import HolidayRepository

logger = logging.getLogger(__name__)


class HolidayCalendar:
    """Append-only holiday list plus the working-day rule built on it."""

    def __init__(
        self,
        holidays: HolidayRepository,
        *,
        weekly_off: int = DEFAULT_WEEKLY_OFF_DAY,
        clock: Callable[[], datetime] = now_local,
    ):
        if not 0 <= int(weekly_off) <= 6:
            raise ValueError("weekly_off must be a weekday number 0..6")
        self._holidays = holidays
        self._weekly_off = int(weekly_off)
        self._clock = clock

    @property
    def weekly_off(self) -> int:
        return self._weekly_off

    def add_holiday(self, *, current_role: Role, holiday_date: date, name: str, description: str = "") -> Holiday:
        if current_role != Role.HR:
            raise AuthorizationError("Only HR can manage holidays")

        name = require_non_empty(name, "Holiday name")
        created_at = self._clock()
        holiday_id = self._holidays.add(
            holiday_date=holiday_date,
            name=name,
            description=optional_text(description),
            created_at=created_at,
        )
        logger.info("holiday %s added on %s", name, holiday_date.isoformat())
        return Holiday(
            holiday_id=holiday_id,
            holiday_date=holiday_date,
            name=name,
            description=optional_text(description),
            created_at=created_at,
        )

    def list_year(self, year: Optional[int] = None) -> Sequence[Holiday]:
        year = year or self._clock().year
        return self._holidays.list_between(start=date(year, 1, 1), end=date(year, 12, 31))

    def upcoming(self, *, today: Optional[date] = None, limit: int = 10) -> Sequence[Holiday]:
        today = today or self._clock().date()
        items = self._holidays.list_between(start=today, end=date(today.year + 1, 12, 31))
        return list(items)[: int(limit)]

    def snapshot(self, start: date, end: date, *, as_of: Optional[datetime] = None) -> FrozenSet[date]:
        """Holiday dates in range as known at ``as_of`` (default: now)."""
        as_of = as_of or self._clock()
        return frozenset(h.holiday_date for h in self._holidays.list_between(start=start, end=end, as_of=as_of))

    def working_days(self, start: date, end: date, *, as_of: Optional[datetime] = None) -> WorkingDays:
        require_range(start, end)
        return working_days(start, end, weekly_off=self._weekly_off, holidays=self.snapshot(start, end, as_of=as_of))

    def count_working_days(self, start: date, end: date, *, as_of: Optional[datetime] = None) -> int:
        result = self.working_days(start, end, as_of=as_of)
        if result.count == 0:
            raise ValidationError("Selected dates contain no working days")
        return result.count
