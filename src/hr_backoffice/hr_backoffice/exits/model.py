from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import (
    ClearanceItemStatus,
    ClearanceStatus,
    NoticePeriod,
    RequestStatus,
    ResignationStatus,
    ResignationType,
    SettlementStatus,
)
from ..workflow.model import Request


@dataclass(frozen=True)
class ResignationPayload:
    resignation_type: ResignationType
    submission_date: date
    last_working_date: date
    notice_period: NoticePeriod
    remarks: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    employee_name: str = ""
    employee_code: str = ""
    # Stage reached after approval; the review status lives on the request.
    exit_status: ResignationStatus = ResignationStatus.PENDING


Resignation = Request[ResignationPayload]

_POST_APPROVAL = frozenset({ResignationStatus.APPROVED, ResignationStatus.IN_CLEARANCE, ResignationStatus.COMPLETED})


def exit_status_of(resignation: Resignation) -> ResignationStatus:
    """Full pipeline status: the review outcome, refined by the exit stage once approved."""
    if resignation.status != RequestStatus.APPROVED:
        return ResignationStatus.from_review(resignation.status)
    stage = resignation.payload.exit_status
    return stage if stage in _POST_APPROVAL else ResignationStatus.APPROVED


@dataclass(frozen=True)
class ClearanceItem:
    item_id: int
    department: str
    status: ClearanceItemStatus = ClearanceItemStatus.PENDING
    cleared_by: Optional[str] = None
    cleared_date: Optional[date] = None
    remarks: Optional[str] = None


def derive_clearance_status(items) -> ClearanceStatus:
    """completed iff every item is approved; blocked if any is rejected."""
    items = list(items)
    if any(i.status == ClearanceItemStatus.REJECTED for i in items):
        return ClearanceStatus.BLOCKED
    if items and all(i.status == ClearanceItemStatus.APPROVED for i in items):
        return ClearanceStatus.COMPLETED
    return ClearanceStatus.IN_PROGRESS


@dataclass(frozen=True)
class Clearance:
    clearance_id: int
    resignation_id: int
    employee_id: str
    items: tuple[ClearanceItem, ...]
    created_at: datetime
    completed_at: Optional[datetime] = None

    @property
    def overall_status(self) -> ClearanceStatus:
        return derive_clearance_status(self.items)

    @property
    def approved_count(self) -> int:
        return sum(1 for i in self.items if i.status == ClearanceItemStatus.APPROVED)

    @property
    def progress(self) -> float:
        """Share of approved items, 0.0 .. 1.0."""
        if not self.items:
            return 0.0
        return self.approved_count / len(self.items)

    def item(self, item_id: int) -> Optional[ClearanceItem]:
        for i in self.items:
            if i.item_id == int(item_id):
                return i
        return None


@dataclass(frozen=True)
class SettlementAmounts:
    """Payables and deductions of a full-and-final settlement."""

    basic_salary: Decimal = Decimal("0.00")
    leave_encashment: Decimal = Decimal("0.00")
    bonus: Decimal = Decimal("0.00")
    other_payable: Decimal = Decimal("0.00")
    notice_recovery: Decimal = Decimal("0.00")
    advance_recovery: Decimal = Decimal("0.00")
    other_deductions: Decimal = Decimal("0.00")

    @property
    def total_payable(self) -> Decimal:
        return self.basic_salary + self.leave_encashment + self.bonus + self.other_payable

    @property
    def total_deductions(self) -> Decimal:
        return self.notice_recovery + self.advance_recovery + self.other_deductions

    @property
    def net(self) -> Decimal:
        return self.total_payable - self.total_deductions


AMOUNT_FIELDS = tuple(f.name for f in fields(SettlementAmounts))


SETTLEMENT_FLOW = (SettlementStatus.PENDING, SettlementStatus.PROCESSING, SettlementStatus.COMPLETED)


@dataclass(frozen=True)
class Settlement:
    settlement_id: int
    employee_id: str
    resignation_id: int
    amounts: SettlementAmounts
    status: SettlementStatus
    created_at: datetime
    remarks: Optional[str] = None
    updated_at: Optional[datetime] = None

    def can_move_to(self, status: SettlementStatus) -> bool:
        return SETTLEMENT_FLOW.index(status) > SETTLEMENT_FLOW.index(self.status)
