from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..common.validators import require_days
from ..core.enums import GENDER_RESTRICTED_LEAVE_TYPES, LeaveType, LedgerDirection, RequestStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..employees.service import EmployeeService
from ..holidays.calendar_rules import WorkingDays, is_excluded
from ..holidays.service import HolidayCalendar
from ..workflow.effects import ApprovalEffect
from ..workflow.engine import RequestWorkflow
from ..workflow.model import RequestDraft
from .ledger import LeaveLedger
from .model import LeaveBalance, LeavePayload, LeaveRequest

logger = logging.getLogger(__name__)


def parse_leave_type(value) -> LeaveType:
    try:
        return LeaveType(str(value).strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown leave type: {value!r}")


class LeaveBalanceEffect(ApprovalEffect[LeavePayload]):
    """Balance rules attached to the leave workflow.

    Submission is refused when the balance (minus pending holds) does not cover
    the duration; approval debits the ledger.
    """

    def __init__(self, ledger: LeaveLedger):
        self._ledger = ledger

    def before_submit(self, draft: RequestDraft[LeavePayload]) -> None:
        p = draft.payload
        self._ledger.require_sufficient(draft.employee_id, p.leave_type, p.duration)

    def on_approved(self, request: LeaveRequest) -> None:
        p = request.payload
        self._ledger.apply(request.employee_id, p.leave_type, p.duration, LedgerDirection.DEBIT)


class LeaveService:
    def __init__(
        self,
        workflow: RequestWorkflow[LeavePayload],
        employees: EmployeeService,
        calendar: HolidayCalendar,
        ledger: LeaveLedger,
    ):
        self._workflow = workflow
        self._employees = employees
        self._calendar = calendar
        self._ledger = ledger

    def preview(self, *, start_date: date, end_date: date) -> WorkingDays:
        """Working-day breakdown for a range, as the submit form shows it."""
        return self._calendar.working_days(start_date, end_date)

    def compute_duration(self, *, start_date: date, end_date: date, half_day: bool = False) -> Decimal:
        if half_day:
            if start_date != end_date:
                raise ValidationError("A half-day leave must start and end on the same date")
            holidays = self._calendar.snapshot(start_date, end_date)
            if is_excluded(start_date, weekly_off=self._calendar.weekly_off, holidays=holidays):
                raise ValidationError("A half-day leave must fall on a working day")
            return Decimal("0.5")
        return Decimal(self._calendar.count_working_days(start_date, end_date))

    def submit(
        self,
        *,
        employee_id: str,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        half_day: bool = False,
    ) -> LeaveRequest:
        employee = self._employees.get_active(employee_id)

        leave_type = parse_leave_type(leave_type)

        genders = GENDER_RESTRICTED_LEAVE_TYPES.get(leave_type)
        if genders is not None and employee.gender not in genders:
            raise ValidationError(f"{leave_type.label} is not available for this employee")

        duration = self.compute_duration(start_date=start_date, end_date=end_date, half_day=half_day)

        payload = LeavePayload(
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            duration=duration,
            is_paid=leave_type != LeaveType.LWP,
            half_day=bool(half_day),
            employee_name=employee.name,
            employee_code=employee.employee_code,
        )
        return self._workflow.submit(employee=employee, payload=payload, reason=reason)

    def approve(self, *, request_id: int, approver_id: str, note: str = "") -> LeaveRequest:
        return self._workflow.approve(request_id=request_id, approver_id=approver_id, note=note)

    def reject(self, *, request_id: int, approver_id: str, note: str = "") -> LeaveRequest:
        return self._workflow.reject(request_id=request_id, approver_id=approver_id, note=note)

    def cancel(self, *, request_id: int, employee_id: str) -> LeaveRequest:
        return self._workflow.cancel(request_id=request_id, employee_id=employee_id)

    def get(self, request_id: int) -> LeaveRequest:
        return self._workflow.get(request_id)

    def list_mine(self, *, employee_id: str, status: Optional[RequestStatus] = None) -> Sequence[LeaveRequest]:
        return self._workflow.list_for_employee(employee_id, status=status)

    def list_pending_for(self, *, approver_id: str) -> Sequence[LeaveRequest]:
        return self._workflow.list_pending_for_approver(approver_id)

    def balance(self, *, employee_id: str) -> LeaveBalance:
        return self._ledger.balance(employee_id)

    def available(self, *, employee_id: str, leave_type: str) -> Decimal:
        return self._ledger.available(employee_id, parse_leave_type(leave_type))

    def grant(self, *, current_role: Role, employee_id: str, leave_type: str, days) -> LeaveBalance:
        """HR allocation: add days to a paid balance."""
        if current_role != Role.HR:
            raise AuthorizationError("Only HR can allocate leave")
        self._employees.get(employee_id)
        days = require_days(days, "Days")
        self._ledger.apply(employee_id, parse_leave_type(leave_type), days, LedgerDirection.CREDIT)
        return self._ledger.balance(employee_id)

    def set_balance(self, *, current_role: Role, employee_id: str, leave_type: str, days) -> LeaveBalance:
        if current_role != Role.HR:
            raise AuthorizationError("Only HR can set leave balances")
        self._employees.get(employee_id)
        days = require_days(days, "Days", allow_zero=True)
        self._ledger.set_balance(employee_id, parse_leave_type(leave_type), days)
        return self._ledger.balance(employee_id)

    def replay_duration(self, *, request_id: int) -> Decimal:
        """Recompute a stored duration from the holiday list as it was at creation."""
        req = self._workflow.get(request_id)
        p = req.payload
        if p.half_day:
            return Decimal("0.5")
        result = self._calendar.working_days(p.start_date, p.end_date, as_of=req.created_at)
        return Decimal(result.count)
