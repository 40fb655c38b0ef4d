from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import Holiday


class HolidayRepository(Protocol):
    def add(self, *, holiday_date: date, name: str, description: Optional[str], created_at: datetime) -> int:
        """Insert a holiday; raises ValidationError when the date is already listed."""

        raise NotImplementedError

    def list_between(self, *, start: date, end: date, as_of: Optional[datetime] = None) -> Sequence[Holiday]:
        """Holidays in [start, end]; with ``as_of`` only those created at or before it."""

        raise NotImplementedError
