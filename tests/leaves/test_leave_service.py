from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.hr_backoffice.hr_backoffice.core.enums import LeaveType, RequestStatus, Role
from src.hr_backoffice.hr_backoffice.core.exceptions import (
    AuthorizationError,
    InsufficientBalance,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)
from src.hr_backoffice.hr_backoffice.employees.model import Employee

MON, FRI = date(2024, 3, 4), date(2024, 3, 8)


def _grant(world, days, leave_type=LeaveType.PL):
    world.balances.set("emp-1", leave_type, Decimal(days))


def _submit(world, *, start=MON, end=FRI, leave_type="PL", half_day=False):
    return world.leave_service.submit(
        employee_id="emp-1",
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        reason="Family trip",
        half_day=half_day,
    )


def test_submit_counts_working_days_and_snapshots_approvers(world):
    _grant(world, 10)

    req = _submit(world, start=MON, end=date(2024, 3, 11))

    assert req.status == RequestStatus.PENDING
    # Sunday the 10th is skipped.
    assert req.payload.duration == Decimal("6")
    assert req.approver_ids == ("hod-1", "hr-1")
    assert req.payload.employee_code == "E001"
    assert sorted(world.notifier.recipients()) == ["hod-1", "hr-1"]


def test_insufficient_balance_creates_nothing(world):
    _grant(world, 2)

    with pytest.raises(InsufficientBalance) as exc:
        _submit(world)

    assert exc.value.requested == Decimal("5")
    assert exc.value.available == Decimal("2")
    assert world.leaves.rows == {}
    assert world.notifier.sent == []


def test_pending_requests_hold_balance(world):
    _grant(world, 5)
    _submit(world, start=MON, end=date(2024, 3, 6))

    assert world.leave_service.available(employee_id="emp-1", leave_type="PL") == Decimal("2")
    with pytest.raises(InsufficientBalance):
        _submit(world, start=date(2024, 3, 11), end=date(2024, 3, 13))


def test_cancel_releases_the_hold(world):
    _grant(world, 5)
    req = _submit(world)

    cancelled = world.leave_service.cancel(request_id=req.request_id, employee_id="emp-1")

    assert cancelled.status == RequestStatus.CANCELLED
    assert world.leave_service.get(req.request_id).status == RequestStatus.CANCELLED
    assert world.leave_service.available(employee_id="emp-1", leave_type="PL") == Decimal("5")
    with pytest.raises(InvalidTransition):
        world.leave_service.cancel(request_id=req.request_id, employee_id="emp-1")


def test_approve_debits_once(world):
    _grant(world, 5)
    req = _submit(world)

    approved = world.leave_service.approve(request_id=req.request_id, approver_id="hr-1", note="Enjoy")

    assert approved.status == RequestStatus.APPROVED
    assert approved.decided_by == "hr-1"
    assert world.leave_service.balance(employee_id="emp-1").remaining(LeaveType.PL) == Decimal("0")

    with pytest.raises(InvalidTransition):
        world.leave_service.approve(request_id=req.request_id, approver_id="hod-1")
    with pytest.raises(InvalidTransition):
        world.leave_service.reject(request_id=req.request_id, approver_id="hod-1")
    assert world.leave_service.balance(employee_id="emp-1").remaining(LeaveType.PL) == Decimal("0")


def test_reject_leaves_balance_untouched(world):
    _grant(world, 5)
    req = _submit(world)

    rejected = world.leave_service.reject(request_id=req.request_id, approver_id="hod-1", note="Release week")

    assert rejected.status == RequestStatus.REJECTED
    assert rejected.decision_note == "Release week"
    assert world.leave_service.balance(employee_id="emp-1").remaining(LeaveType.PL) == Decimal("5")


def test_failed_debit_keeps_request_pending(world):
    _grant(world, 5)
    req = _submit(world)
    # Balance lowered behind the ledger's back.
    _grant(world, 1)

    with pytest.raises(InsufficientBalance):
        world.leave_service.approve(request_id=req.request_id, approver_id="hr-1")

    assert world.leave_service.get(req.request_id).status == RequestStatus.PENDING
    assert world.leave_service.balance(employee_id="emp-1").remaining(LeaveType.PL) == Decimal("1")
    assert world.tx.rollbacks == 1


def test_only_the_submitter_can_cancel(world):
    _grant(world, 5)
    req = _submit(world)

    with pytest.raises(AuthorizationError):
        world.leave_service.cancel(request_id=req.request_id, employee_id="hr-1")


def test_unaccounted_leave_needs_no_balance(world):
    req = _submit(world, leave_type="lwp")
    assert req.payload.is_paid is False

    world.leave_service.approve(request_id=req.request_id, approver_id="hr-1")

    assert world.balances.rows == {}


def test_gender_restricted_leave_type(world):
    with pytest.raises(ValidationError):
        _submit(world, leave_type="PATERNITY")


def test_unknown_leave_type(world):
    with pytest.raises(ValidationError):
        _submit(world, leave_type="NAP")


def test_half_day(world):
    _grant(world, 1)

    req = _submit(world, start=MON, end=MON, half_day=True)

    assert req.payload.duration == Decimal("0.5")
    assert req.payload.half_day is True
    assert world.leave_service.available(employee_id="emp-1", leave_type="PL") == Decimal("0.5")


def test_half_day_must_be_a_single_working_day(world):
    _grant(world, 5)
    with pytest.raises(ValidationError):
        _submit(world, start=MON, end=date(2024, 3, 5), half_day=True)
    with pytest.raises(ValidationError):
        _submit(world, start=date(2024, 3, 10), end=date(2024, 3, 10), half_day=True)


def test_range_without_working_days_is_rejected(world):
    _grant(world, 5)
    with pytest.raises(ValidationError):
        _submit(world, start=date(2024, 3, 10), end=date(2024, 3, 10))


def test_stored_duration_ignores_later_holidays(world):
    _grant(world, 5)
    req = _submit(world)

    world.clock.advance(days=1)
    world.calendar.add_holiday(current_role=Role.HR, holiday_date=date(2024, 3, 6), name="Founders Day")

    assert world.leave_service.get(req.request_id).payload.duration == Decimal("5")
    assert world.leave_service.replay_duration(request_id=req.request_id) == Decimal("5")
    assert world.leave_service.preview(start_date=MON, end_date=FRI).count == 4


def test_blocked_employee_cannot_submit(world):
    world.employees.add(Employee(employee_id="emp-9", organization_id="org-1", role=Role.STAFF, name="X", is_blocked=True))
    with pytest.raises(AuthorizationError):
        world.leave_service.submit(
            employee_id="emp-9", leave_type="LWP", start_date=MON, end_date=MON, reason="r"
        )


def test_unknown_employee(world):
    with pytest.raises(NotFoundError):
        world.leave_service.submit(employee_id="ghost", leave_type="LWP", start_date=MON, end_date=MON, reason="r")


def test_grant_and_set_balance_are_hr_only(world):
    with pytest.raises(AuthorizationError):
        world.leave_service.grant(current_role=Role.HOD, employee_id="emp-1", leave_type="PL", days="2")

    balance = world.leave_service.grant(current_role=Role.HR, employee_id="emp-1", leave_type="PL", days="2.5")
    assert balance.remaining(LeaveType.PL) == Decimal("2.5")

    balance = world.leave_service.set_balance(current_role=Role.HR, employee_id="emp-1", leave_type="CL", days="0")
    assert balance.remaining(LeaveType.CL) == Decimal("0")

    with pytest.raises(ValidationError):
        world.leave_service.grant(current_role=Role.HR, employee_id="emp-1", leave_type="PL", days="0.3")
    with pytest.raises(ValidationError):
        world.leave_service.set_balance(current_role=Role.HR, employee_id="emp-1", leave_type="LWP", days="3")


def test_lists(world):
    _grant(world, 10)
    first = _submit(world, start=MON, end=MON)
    second = _submit(world, start=FRI, end=FRI)
    world.leave_service.approve(request_id=first.request_id, approver_id="hr-1")

    mine = world.leave_service.list_mine(employee_id="emp-1")
    assert {r.request_id for r in mine} == {first.request_id, second.request_id}
    pending = world.leave_service.list_mine(employee_id="emp-1", status=RequestStatus.PENDING)
    assert [r.request_id for r in pending] == [second.request_id]
    assert [r.request_id for r in world.leave_service.list_pending_for(approver_id="hod-1")] == [second.request_id]
    assert world.leave_service.list_pending_for(approver_id="emp-1") == []


def test_balance_stays_non_negative_across_a_mixed_sequence(world):
    _grant(world, 5)
    svc = world.leave_service

    def check(expected_remaining, expected_available):
        remaining = svc.balance(employee_id="emp-1").remaining(LeaveType.PL)
        held = sum(
            (r.payload.duration for r in world.leaves.rows.values() if r.is_pending and r.payload.leave_type == LeaveType.PL),
            Decimal("0"),
        )
        available = svc.available(employee_id="emp-1", leave_type="PL")
        assert remaining >= 0
        assert available == remaining - held
        assert (remaining, available) == (Decimal(expected_remaining), Decimal(expected_available))

    a = _submit(world, start=MON, end=date(2024, 3, 5))
    check("5", "3")
    b = _submit(world, start=date(2024, 3, 6), end=FRI)
    check("5", "0")
    with pytest.raises(InsufficientBalance):
        _submit(world, start=date(2024, 3, 11), end=date(2024, 3, 11))
    check("5", "0")

    svc.reject(request_id=a.request_id, approver_id="hr-1")
    check("5", "2")
    svc.approve(request_id=b.request_id, approver_id="hod-1")
    check("2", "2")

    c = _submit(world, start=date(2024, 3, 11), end=date(2024, 3, 12))
    check("2", "0")
    svc.cancel(request_id=c.request_id, employee_id="emp-1")
    check("2", "2")

    d = _submit(world, start=date(2024, 3, 13), end=date(2024, 3, 14))
    svc.approve(request_id=d.request_id, approver_id="hr-1")
    check("0", "0")
    with pytest.raises(InsufficientBalance):
        _submit(world, start=date(2024, 3, 15), end=date(2024, 3, 15), half_day=True)
    with pytest.raises(InvalidTransition):
        svc.approve(request_id=b.request_id, approver_id="hr-1")
    check("0", "0")
