from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence, Union

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import parse_clock_time
from ..core.enums import RequestStatus
from ..core.exceptions import AlreadyPunchedOut, AuthorizationError, NotFoundError, ValidationError
from ..employees.service import EmployeeService
from ..workflow.effects import ApprovalEffect
from ..workflow.engine import RequestWorkflow
from ..workflow.model import RequestDraft
from .model import AttendanceEditPayload, AttendanceEditRequest
from .repository import AttendanceEditRepository

logger = logging.getLogger(__name__)


def parse_requested_punch_out(value: Union[str, datetime], work_date: date) -> datetime:
    """Accept a datetime, an ISO timestamp or a wall-clock "HH:MM" on the record's date."""
    if isinstance(value, datetime):
        return value
    v = (value or "").strip()
    if not v:
        raise ValidationError("Requested punch-out is required")
    if "T" in v or " " in v:
        try:
            return datetime.fromisoformat(v)
        except ValueError:
            raise ValidationError(f"Invalid punch-out time: {value!r}")
    return datetime.combine(work_date, parse_clock_time(v))


class AttendanceEditEffect(ApprovalEffect[AttendanceEditPayload]):
    """One open edit per record; approval writes the requested punch-out."""

    def __init__(self, attendance: AttendanceRepository, edits: AttendanceEditRepository):
        self._attendance = attendance
        self._edits = edits

    def before_submit(self, draft: RequestDraft[AttendanceEditPayload]) -> None:
        if self._edits.has_pending_for_attendance(draft.payload.attendance_id):
            raise ValidationError("An edit request for this attendance record is already pending")

    def on_approved(self, request: AttendanceEditRequest) -> None:
        p = request.payload
        record = self._attendance.get_by_id(p.attendance_id, for_update=True)
        if record is None:
            raise NotFoundError("Attendance record not found")
        # The employee may have punched out while the edit was pending.
        if record.punch_out is not None:
            raise AlreadyPunchedOut("This attendance record already has a punch-out")
        if not self._attendance.update_punch_out(attendance_id=p.attendance_id, punch_out=p.requested_punch_out):
            raise AlreadyPunchedOut("This attendance record already has a punch-out")
        logger.info("attendance %s punch-out set to %s by edit %s", p.attendance_id, p.requested_punch_out, request.request_id)


class AttendanceEditService:
    def __init__(
        self,
        workflow: RequestWorkflow[AttendanceEditPayload],
        employees: EmployeeService,
        attendance: AttendanceRepository,
    ):
        self._workflow = workflow
        self._employees = employees
        self._attendance = attendance

    def _editable_record(self, *, employee_id: str, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if record is None:
            raise NotFoundError("Attendance record not found")
        if record.employee_id != str(employee_id):
            raise AuthorizationError("You can only edit your own attendance")
        if record.punch_out is not None:
            raise ValidationError("This attendance record already has a punch-out")
        return record

    def submit(
        self,
        *,
        employee_id: str,
        attendance_id: int,
        requested_punch_out: Union[str, datetime],
        reason: str,
    ) -> AttendanceEditRequest:
        employee = self._employees.get_active(employee_id)
        record = self._editable_record(employee_id=employee.employee_id, attendance_id=attendance_id)

        punch_out = parse_requested_punch_out(requested_punch_out, record.work_date)
        if punch_out <= record.punch_in:
            raise ValidationError("Requested punch-out must be after punch-in")

        payload = AttendanceEditPayload(
            attendance_id=record.attendance_id,
            work_date=record.work_date,
            current_punch_in=record.punch_in,
            current_punch_out=record.punch_out,
            requested_punch_out=punch_out,
        )
        return self._workflow.submit(employee=employee, payload=payload, reason=reason)

    def approve(self, *, request_id: int, approver_id: str, note: str = "") -> AttendanceEditRequest:
        return self._workflow.approve(request_id=request_id, approver_id=approver_id, note=note)

    def reject(self, *, request_id: int, approver_id: str, note: str = "") -> AttendanceEditRequest:
        return self._workflow.reject(request_id=request_id, approver_id=approver_id, note=note)

    def cancel(self, *, request_id: int, employee_id: str) -> AttendanceEditRequest:
        return self._workflow.cancel(request_id=request_id, employee_id=employee_id)

    def get(self, request_id: int) -> AttendanceEditRequest:
        return self._workflow.get(request_id)

    def list_mine(self, *, employee_id: str, status: Optional[RequestStatus] = None) -> Sequence[AttendanceEditRequest]:
        return self._workflow.list_for_employee(employee_id, status=status)

    def list_pending_for(self, *, approver_id: str) -> Sequence[AttendanceEditRequest]:
        return self._workflow.list_pending_for_approver(approver_id)
