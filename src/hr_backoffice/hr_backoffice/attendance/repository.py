from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, GeoPoint


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int, *, for_update: bool = False) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(
        self,
        employee_id: str,
        work_date: date,
        *,
        for_update: bool = False,
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: str, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_between(self, employee_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_punch_in(
        self,
        *,
        employee_id: str,
        work_date: date,
        punch_in: datetime,
        location: Optional[GeoPoint],
        employee_name: str = "",
        employee_code: str = "",
    ) -> int:
        """Insert the day's record; raises DuplicatePunchIn if (employee, date) exists."""

        raise NotImplementedError

    def set_punch_out(self, *, attendance_id: int, punch_out: datetime, location: Optional[GeoPoint]) -> bool:
        """Set punch-out only while it is still empty."""

        raise NotImplementedError

    def update_punch_out(self, *, attendance_id: int, punch_out: datetime) -> bool:
        """Fill in a missing punch-out from an approved edit request.

        Returns False when the record already has a punch-out.
        """

        raise NotImplementedError
