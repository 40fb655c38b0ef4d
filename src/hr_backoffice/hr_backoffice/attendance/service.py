from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_STATS_DAYS
from ..core.exceptions import AlreadyPunchedOut, NoPunchInFound, NotFoundError, ValidationError
from ..database.connection import TransactionManager
from ..database.mysql_base import retry_on_conflict
from ..employees.service import EmployeeService
from .model import AttendanceRecord, GeoPoint, HoursSummary
from .repository import AttendanceRepository
from .stats import recent_days, summarize

logger = logging.getLogger(__name__)


class AttendanceService:
    """Daily punch-in / punch-out ledger, one record per employee and date."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeService,
        transactions: TransactionManager,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._employees = employees
        self._tx = transactions
        self._clock = clock

    @retry_on_conflict
    def punch_in(
        self,
        employee_id: str,
        *,
        at: datetime | None = None,
        location: GeoPoint | None = None,
    ) -> AttendanceRecord:
        at = at or self._clock()
        employee = self._employees.get_active(employee_id)

        with self._tx.atomic():
            attendance_id = self._attendance.create_punch_in(
                employee_id=employee.employee_id,
                work_date=at.date(),
                punch_in=at,
                location=location,
                employee_name=employee.name,
                employee_code=employee.employee_code,
            )

        logger.info("punch-in employee=%s date=%s", employee_id, at.date())
        return AttendanceRecord(
            attendance_id=attendance_id,
            employee_id=employee.employee_id,
            work_date=at.date(),
            punch_in=at,
            punch_in_location=location,
            employee_name=employee.name,
            employee_code=employee.employee_code,
        )

    @retry_on_conflict
    def punch_out(
        self,
        employee_id: str,
        *,
        at: datetime | None = None,
        location: GeoPoint | None = None,
    ) -> AttendanceRecord:
        at = at or self._clock()

        with self._tx.atomic():
            record = self._attendance.get_for_employee_and_date(employee_id, at.date(), for_update=True)
            if record is None:
                raise NoPunchInFound("No punch-in found for today")
            if record.punch_out is not None:
                raise AlreadyPunchedOut("You have already punched out today")
            if at < record.punch_in:
                raise ValidationError("Punch-out cannot be earlier than punch-in")

            if not self._attendance.set_punch_out(attendance_id=record.attendance_id, punch_out=at, location=location):
                raise AlreadyPunchedOut("You have already punched out today")

        logger.info("punch-out employee=%s date=%s", employee_id, at.date())
        return AttendanceRecord(
            attendance_id=record.attendance_id,
            employee_id=record.employee_id,
            work_date=record.work_date,
            punch_in=record.punch_in,
            punch_in_location=record.punch_in_location,
            punch_out=at,
            punch_out_location=location,
            employee_name=record.employee_name,
            employee_code=record.employee_code,
        )

    def get(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if record is None:
            raise NotFoundError("Attendance record not found")
        return record

    def today(self, employee_id: str, *, today: Optional[date] = None) -> Optional[AttendanceRecord]:
        """Get today's attendance record for an employee"""
        return self._attendance.get_for_employee_and_date(employee_id, today or self._clock().date())

    def history(self, employee_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.get_recent_for_employee(employee_id, limit)

    def weekly_stats(self, employee_id: str, *, today: Optional[date] = None) -> HoursSummary:
        today = today or self._clock().date()
        records = self._attendance.list_between(
            employee_id,
            start=today - timedelta(days=DEFAULT_STATS_DAYS - 1),
            end=today,
        )
        return recent_days(records, today=today)

    def summary(self, employee_id: str, *, start: date, end: date) -> HoursSummary:
        if end < start:
            raise ValidationError("End date cannot be before start date")
        return summarize(self._attendance.list_between(employee_id, start=start, end=end), start=start, end=end)
