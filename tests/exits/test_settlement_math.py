from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from src.hr_backoffice.hr_backoffice.core.enums import ClearanceItemStatus, ClearanceStatus, SettlementStatus
from src.hr_backoffice.hr_backoffice.exits.calculator.standard_calculator import StandardSettlementCalculator
from src.hr_backoffice.hr_backoffice.exits.model import (
    ClearanceItem,
    Settlement,
    SettlementAmounts,
    derive_clearance_status,
)


def test_standard_calculator_rounds_half_up_to_cents():
    calc = StandardSettlementCalculator()

    rate = calc.daily_rate(Decimal("25000"))

    assert rate == Decimal("833.33")
    assert calc.leave_encashment(Decimal("2.5"), rate) == Decimal("2083.33")
    assert calc.leave_encashment(Decimal("0.5"), Decimal("0.05")) == Decimal("0.03")
    assert calc.notice_recovery(3, rate) == Decimal("2499.99")


def test_standard_calculator_never_goes_below_zero():
    calc = StandardSettlementCalculator()
    assert calc.leave_encashment(Decimal("-4"), Decimal("100")) == Decimal("0.00")
    assert calc.notice_recovery(-3, Decimal("100")) == Decimal("0.00")


def test_settlement_totals():
    amounts = SettlementAmounts(
        basic_salary=Decimal("40000.00"),
        leave_encashment=Decimal("5000.00"),
        bonus=Decimal("2500.00"),
        other_payable=Decimal("500.00"),
        notice_recovery=Decimal("3000.00"),
        advance_recovery=Decimal("1000.00"),
        other_deductions=Decimal("250.00"),
    )
    assert amounts.total_payable == Decimal("48000.00")
    assert amounts.total_deductions == Decimal("4250.00")
    assert amounts.net == Decimal("43750.00")


def test_clearance_status_rules():
    pending = ClearanceItem(item_id=1, department="IT")
    approved = ClearanceItem(item_id=2, department="HR", status=ClearanceItemStatus.APPROVED)
    rejected = ClearanceItem(item_id=3, department="Finance", status=ClearanceItemStatus.REJECTED)

    assert derive_clearance_status([]) == ClearanceStatus.IN_PROGRESS
    assert derive_clearance_status([pending, approved]) == ClearanceStatus.IN_PROGRESS
    assert derive_clearance_status([approved]) == ClearanceStatus.COMPLETED
    assert derive_clearance_status([approved, rejected, pending]) == ClearanceStatus.BLOCKED


def test_settlement_moves_forward_only():
    s = Settlement(
        settlement_id=1,
        employee_id="emp-1",
        resignation_id=1,
        amounts=SettlementAmounts(),
        status=SettlementStatus.PROCESSING,
        created_at=datetime(2024, 3, 1),
    )
    assert s.can_move_to(SettlementStatus.COMPLETED)
    assert not s.can_move_to(SettlementStatus.PROCESSING)
    assert not s.can_move_to(SettlementStatus.PENDING)
