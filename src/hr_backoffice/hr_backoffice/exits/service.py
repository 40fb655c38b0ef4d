from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_amount
from ..core.constants import DEFAULT_CLEARANCE_DEPARTMENTS, DEFAULT_LIST_LIMIT
from ..core.enums import (
    ClearanceItemStatus,
    ClearanceStatus,
    LeaveType,
    NoticePeriod,
    RequestStatus,
    ResignationStatus,
    ResignationType,
    Role,
    SettlementStatus,
)
from ..core.exceptions import (
    ActiveResignationExists,
    AuthorizationError,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)
from ..database.connection import TransactionManager
from ..database.mysql_base import retry_on_conflict
from ..employees.service import EmployeeService
from ..leaves.ledger import LeaveLedger
from ..notifications.notifier import LoggingNotifier, Notifier, fan_out
from ..workflow.effects import ApprovalEffect
from ..workflow.engine import RequestWorkflow
from ..workflow.model import RequestDraft
from .calculator.base import SettlementCalculator
from .calculator.standard_calculator import StandardSettlementCalculator
from .model import (
    AMOUNT_FIELDS,
    Clearance,
    Resignation,
    ResignationPayload,
    Settlement,
    SettlementAmounts,
    exit_status_of,
)
from .repository import ClearanceRepository, ResignationRepository, SettlementRepository

logger = logging.getLogger(__name__)


def _parse_enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value!r}")


def _require_hr(current_role: Role) -> None:
    if current_role != Role.HR:
        raise AuthorizationError("Only HR can manage employee exits")


class ResignationEffect(ApprovalEffect[ResignationPayload]):
    """At most one resignation per employee in pending / approved / in-clearance."""

    def __init__(self, resignations: ResignationRepository):
        self._resignations = resignations

    def before_submit(self, draft: RequestDraft[ResignationPayload]) -> None:
        if self._resignations.has_active(draft.employee_id):
            raise ActiveResignationExists("You already have an active resignation")


class ExitPipeline:
    """Resignation -> clearance -> settlement.

    Each stage is unlocked by the previous one: a clearance needs an approved
    resignation, a settlement needs a completed clearance.
    """

    def __init__(
        self,
        workflow: RequestWorkflow[ResignationPayload],
        employees: EmployeeService,
        resignations: ResignationRepository,
        clearances: ClearanceRepository,
        settlements: SettlementRepository,
        transactions: TransactionManager,
        *,
        ledger: Optional[LeaveLedger] = None,
        departments: Sequence[str] = DEFAULT_CLEARANCE_DEPARTMENTS,
        calculator: Optional[SettlementCalculator] = None,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        if not departments:
            raise ValueError("At least one clearance department is required")
        self._workflow = workflow
        self._employees = employees
        self._resignations = resignations
        self._clearances = clearances
        self._settlements = settlements
        self._tx = transactions
        self._ledger = ledger
        self._departments = tuple(departments)
        self._calculator = calculator or StandardSettlementCalculator()
        self._notifier = notifier or LoggingNotifier()
        self._clock = clock

    # -------- Stage 1: resignation --------
    def submit_resignation(
        self,
        *,
        employee_id: str,
        resignation_type: str,
        last_working_date: date,
        notice_period: str,
        reason: str,
        remarks: str = "",
    ) -> Resignation:
        employee = self._employees.get_active(employee_id)
        today = self._clock().date()
        if last_working_date < today:
            raise ValidationError("Last working date cannot be in the past")

        payload = ResignationPayload(
            resignation_type=_parse_enum(ResignationType, resignation_type, "resignation type"),
            submission_date=today,
            last_working_date=last_working_date,
            notice_period=_parse_enum(NoticePeriod, notice_period, "notice period"),
            remarks=optional_text(remarks),
            department=employee.department,
            designation=employee.designation,
            employee_name=employee.name,
            employee_code=employee.employee_code,
        )
        return self._workflow.submit(employee=employee, payload=payload, reason=reason)

    def approve_resignation(self, *, request_id: int, approver_id: str, note: str = "") -> Resignation:
        return self._workflow.approve(request_id=request_id, approver_id=approver_id, note=note)

    def reject_resignation(self, *, request_id: int, approver_id: str, note: str = "") -> Resignation:
        return self._workflow.reject(request_id=request_id, approver_id=approver_id, note=note)

    def cancel_resignation(self, *, request_id: int, employee_id: str) -> Resignation:
        return self._workflow.cancel(request_id=request_id, employee_id=employee_id)

    def get_resignation(self, request_id: int) -> Resignation:
        return self._workflow.get(request_id)

    def my_resignations(self, *, employee_id: str) -> Sequence[Resignation]:
        return self._workflow.list_for_employee(employee_id)

    def pending_resignations_for(self, *, approver_id: str) -> Sequence[Resignation]:
        return self._workflow.list_pending_for_approver(approver_id)

    def status_of(self, request_id: int) -> ResignationStatus:
        return exit_status_of(self._workflow.get(request_id))

    # -------- Stage 2: clearance --------
    @retry_on_conflict
    def initiate_clearance(self, *, current_role: Role, resignation_id: int) -> Clearance:
        _require_hr(current_role)

        with self._tx.atomic():
            resignation = self._resignations.get(int(resignation_id), for_update=True)
            if not resignation:
                raise NotFoundError("Resignation not found")
            if exit_status_of(resignation) != ResignationStatus.APPROVED:
                raise InvalidTransition("Clearance can only start for an approved resignation")

            clearance_id = self._clearances.create(
                resignation_id=resignation.request_id,
                employee_id=resignation.employee_id,
                departments=self._departments,
                created_at=self._clock(),
            )
            if not self._resignations.set_exit_status(
                resignation.request_id,
                expected=ResignationStatus.APPROVED,
                status=ResignationStatus.IN_CLEARANCE,
            ):
                raise InvalidTransition("Resignation changed concurrently")
            clearance = self._clearances.get(clearance_id)

        logger.info("clearance %s started for resignation %s", clearance_id, resignation_id)
        fan_out(
            self._notifier,
            [resignation.employee_id],
            title="Exit clearance started",
            message=f"{len(self._departments)} departments will clear your exit",
        )
        return clearance

    @retry_on_conflict
    def decide_clearance_item(
        self,
        *,
        current_role: Role,
        clearance_id: int,
        item_id: int,
        approved: bool,
        cleared_by: str,
        remarks: str = "",
    ) -> Clearance:
        _require_hr(current_role)
        status = ClearanceItemStatus.APPROVED if approved else ClearanceItemStatus.REJECTED

        with self._tx.atomic():
            clearance = self._clearances.get(int(clearance_id), for_update=True)
            if not clearance:
                raise NotFoundError("Clearance not found")
            item = clearance.item(item_id)
            if not item:
                raise NotFoundError("Clearance item not found")
            if item.status != ClearanceItemStatus.PENDING:
                raise InvalidTransition(f"{item.department} clearance is already {item.status.value}")

            now = self._clock()
            if not self._clearances.set_item_status(
                item.item_id,
                status=status,
                cleared_by=str(cleared_by),
                cleared_date=now.date(),
                remarks=optional_text(remarks),
            ):
                raise InvalidTransition(f"{item.department} clearance was decided concurrently")

            clearance = self._clearances.get(clearance.clearance_id)
            if clearance.overall_status == ClearanceStatus.COMPLETED:
                self._clearances.mark_completed(clearance.clearance_id, completed_at=now)
                self._resignations.set_exit_status(
                    clearance.resignation_id,
                    expected=ResignationStatus.IN_CLEARANCE,
                    status=ResignationStatus.COMPLETED,
                )
                clearance = self._clearances.get(clearance.clearance_id)

        logger.info(
            "clearance %s item %s (%s) %s by %s, overall=%s",
            clearance_id,
            item_id,
            item.department,
            status.value,
            cleared_by,
            clearance.overall_status.value,
        )
        if clearance.overall_status != ClearanceStatus.IN_PROGRESS:
            fan_out(
                self._notifier,
                [clearance.employee_id],
                title=f"Exit clearance {clearance.overall_status.value}",
                message=f"{clearance.approved_count}/{len(clearance.items)} departments cleared",
            )
        return clearance

    def get_clearance(self, clearance_id: int) -> Clearance:
        clearance = self._clearances.get(int(clearance_id))
        if not clearance:
            raise NotFoundError("Clearance not found")
        return clearance

    def clearance_for(self, *, employee_id: str) -> Optional[Clearance]:
        return self._clearances.get_latest_for_employee(str(employee_id))

    def open_clearances(self) -> Sequence[Clearance]:
        return self._clearances.list_open(limit=DEFAULT_LIST_LIMIT)

    # -------- Stage 3: settlement --------
    def quote_settlement(self, *, current_role: Role, employee_id: str, monthly_salary) -> SettlementAmounts:
        """Suggested encashment and notice recovery for the latest resignation.

        Encashment prices the remaining PL balance at the daily rate; notice
        recovery prices the days the notice period was cut short.
        """
        _require_hr(current_role)
        salary = require_amount(monthly_salary, "Monthly salary")
        rate = self._calculator.daily_rate(salary)

        pl_days = Decimal("0")
        if self._ledger is not None:
            pl_days = self._ledger.balance(str(employee_id)).remaining(LeaveType.PL)

        shortfall = 0
        resignations = [r for r in self._workflow.list_for_employee(employee_id) if r.status == RequestStatus.APPROVED]
        if resignations:
            p = resignations[0].payload
            served = (p.last_working_date - p.submission_date).days
            shortfall = max(p.notice_period.days - served, 0)

        return SettlementAmounts(
            basic_salary=Decimal("0.00"),
            leave_encashment=self._calculator.leave_encashment(pl_days, rate),
            notice_recovery=self._calculator.notice_recovery(shortfall, rate),
        )

    @retry_on_conflict
    def create_settlement(
        self,
        *,
        current_role: Role,
        employee_id: str,
        amounts: Mapping[str, object],
        remarks: str = "",
    ) -> Settlement:
        _require_hr(current_role)
        validated = SettlementAmounts(
            **{name: require_amount(amounts.get(name), name.replace("_", " ").capitalize()) for name in AMOUNT_FIELDS}
        )

        with self._tx.atomic():
            clearance = self._clearances.get_latest_for_employee(str(employee_id))
            if not clearance or clearance.overall_status != ClearanceStatus.COMPLETED:
                raise InvalidTransition("Settlement requires a completed clearance")
            if self._settlements.get_for_employee(str(employee_id)):
                raise InvalidTransition("A settlement already exists for this employee")

            now = self._clock()
            settlement_id = self._settlements.create(
                employee_id=str(employee_id),
                resignation_id=clearance.resignation_id,
                amounts=validated,
                remarks=optional_text(remarks),
                created_at=now,
            )

        logger.info("settlement %s created for %s (net=%s)", settlement_id, employee_id, validated.net)
        return Settlement(
            settlement_id=settlement_id,
            employee_id=str(employee_id),
            resignation_id=clearance.resignation_id,
            amounts=validated,
            status=SettlementStatus.PENDING,
            created_at=now,
            remarks=optional_text(remarks),
        )

    @retry_on_conflict
    def advance_settlement(self, *, current_role: Role, settlement_id: int, status: str) -> Settlement:
        _require_hr(current_role)
        target = _parse_enum(SettlementStatus, status, "settlement status")

        with self._tx.atomic():
            settlement = self._settlements.get(int(settlement_id), for_update=True)
            if not settlement:
                raise NotFoundError("Settlement not found")
            if not settlement.can_move_to(target):
                raise InvalidTransition(f"Settlement cannot move from {settlement.status.value} to {target.value}")
            if not self._settlements.set_status(
                settlement.settlement_id,
                expected=settlement.status,
                status=target,
                updated_at=self._clock(),
            ):
                raise InvalidTransition("Settlement changed concurrently")
            settlement = self._settlements.get(settlement.settlement_id)

        logger.info("settlement %s -> %s", settlement_id, target.value)
        fan_out(
            self._notifier,
            [settlement.employee_id],
            title="Settlement update",
            message=f"Your settlement is {target.value}",
        )
        return settlement

    def settlement_for(self, *, employee_id: str) -> Optional[Settlement]:
        return self._settlements.get_for_employee(str(employee_id))

    def settlements(self, *, current_role: Role, status: Optional[str] = None) -> Sequence[Settlement]:
        _require_hr(current_role)
        parsed = _parse_enum(SettlementStatus, status, "settlement status") if status else None
        return self._settlements.list_by_status(status=parsed, limit=DEFAULT_LIST_LIMIT)

