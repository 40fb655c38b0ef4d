from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.hr_backoffice.hr_backoffice.core.enums import LeaveType, RequestStatus, Role
from src.hr_backoffice.hr_backoffice.core.exceptions import (
    AuthorizationError,
    NoApproversAvailable,
    NotFoundError,
    ValidationError,
)
from src.hr_backoffice.hr_backoffice.employees.model import Employee

MON = date(2024, 3, 4)


def _submit_lwp(world, employee_id="emp-1", reason="Personal work"):
    return world.leave_service.submit(
        employee_id=employee_id, leave_type="LWP", start_date=MON, end_date=MON, reason=reason
    )


def test_approvers_are_fixed_at_submission(world):
    req = _submit_lwp(world)
    world.employees.add(Employee(employee_id="hr-2", organization_id="org-1", role=Role.HR, name="New HR"))

    assert world.leave_service.list_pending_for(approver_id="hr-2") == []
    with pytest.raises(AuthorizationError):
        world.leave_service.approve(request_id=req.request_id, approver_id="hr-2")

    # A later request picks up the new HR.
    later = _submit_lwp(world)
    assert "hr-2" in later.approver_ids


def test_approver_demoted_after_submission_can_still_decide(world):
    req = _submit_lwp(world)
    world.employees.add(Employee(employee_id="hod-1", organization_id="org-1", role=Role.STAFF, name="Ravi Kumar"))

    approved = world.leave_service.approve(request_id=req.request_id, approver_id="hod-1")
    assert approved.status == RequestStatus.APPROVED


def test_non_approver_cannot_decide(world):
    req = _submit_lwp(world)
    with pytest.raises(AuthorizationError):
        world.leave_service.reject(request_id=req.request_id, approver_id="emp-1")
    assert world.leave_service.get(req.request_id).status == RequestStatus.PENDING


def test_no_approvers_blocks_submission(world):
    world.employees.add(Employee(employee_id="emp-2", organization_id="org-2", role=Role.STAFF, name="Lone"))

    with pytest.raises(NoApproversAvailable):
        _submit_lwp(world, employee_id="emp-2")
    assert world.leaves.rows == {}


def test_approver_roles_only(world):
    world.employees.add(Employee(employee_id="int-1", organization_id="org-1", role=Role.INTERN, name="Intern"))
    req = _submit_lwp(world)
    assert req.approver_ids == ("hod-1", "hr-1")


def test_reason_is_required(world):
    with pytest.raises(ValidationError):
        _submit_lwp(world, reason="   ")


def test_unknown_request(world):
    with pytest.raises(NotFoundError):
        world.leave_service.approve(request_id=404, approver_id="hr-1")
    with pytest.raises(NotFoundError):
        world.leave_service.get(404)


def test_failed_notification_does_not_undo_submission(make_world):
    world = make_world(failing_recipients={"hod-1"})

    req = _submit_lwp(world)

    assert world.leave_service.get(req.request_id).status == RequestStatus.PENDING
    assert world.notifier.recipients() == ["hr-1"]


def test_decision_notifies_the_employee(world):
    world.balances.set("emp-1", LeaveType.PL, Decimal("1"))
    req = world.leave_service.submit(employee_id="emp-1", leave_type="PL", start_date=MON, end_date=MON, reason="r")
    world.notifier.sent.clear()

    world.leave_service.approve(request_id=req.request_id, approver_id="hr-1")

    assert world.notifier.sent == [("emp-1", "Leave request approved", "Your leave request was approved")]


def test_submission_locks_the_employee(world):
    _submit_lwp(world)
    assert world.employees.locked == ["emp-1"]
