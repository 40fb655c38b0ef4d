from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

import pytest

from src.hr_backoffice.hr_backoffice.approvals.resolver import ApproverResolver
from src.hr_backoffice.hr_backoffice.attendance.model import AttendanceRecord
from src.hr_backoffice.hr_backoffice.attendance.service import AttendanceService
from src.hr_backoffice.hr_backoffice.core.enums import (
    ClearanceItemStatus,
    Gender,
    RequestKind,
    ResignationStatus,
    Role,
    SettlementStatus,
)
from src.hr_backoffice.hr_backoffice.core.exceptions import DuplicatePunchIn, InvalidTransition, ValidationError
from src.hr_backoffice.hr_backoffice.employees.model import Employee
from src.hr_backoffice.hr_backoffice.employees.service import EmployeeService
from src.hr_backoffice.hr_backoffice.exits.model import Clearance, ClearanceItem, Settlement, exit_status_of
from src.hr_backoffice.hr_backoffice.exits.service import ExitPipeline, ResignationEffect
from src.hr_backoffice.hr_backoffice.holidays.model import Holiday
from src.hr_backoffice.hr_backoffice.holidays.service import HolidayCalendar
from src.hr_backoffice.hr_backoffice.leaves.ledger import LeaveLedger
from src.hr_backoffice.hr_backoffice.leaves.model import LeaveBalance
from src.hr_backoffice.hr_backoffice.leaves.service import LeaveBalanceEffect, LeaveService
from src.hr_backoffice.hr_backoffice.requests.service import AttendanceEditEffect, AttendanceEditService
from src.hr_backoffice.hr_backoffice.workflow.engine import RequestWorkflow
from src.hr_backoffice.hr_backoffice.workflow.model import Request


# -------- clock --------
class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


# -------- transactions --------
class FakeTransactions:
    """atomic() for in-memory fakes: state is restored when the block raises."""

    def __init__(self, *stores):
        self._stores = list(stores)
        self._lock = threading.RLock()
        self._depth = 0
        self.commits = 0
        self.rollbacks = 0

    def track(self, *stores) -> None:
        self._stores.extend(stores)

    @contextmanager
    def atomic(self):
        with self._lock:
            outermost = self._depth == 0
            snapshot = [copy.deepcopy(s.__dict__) for s in self._stores] if outermost else None
            self._depth += 1
            try:
                yield
            except BaseException:
                if outermost:
                    for store, state in zip(self._stores, snapshot):
                        store.__dict__.clear()
                        store.__dict__.update(state)
                    self.rollbacks += 1
                raise
            finally:
                self._depth -= 1
            if outermost:
                self.commits += 1


# -------- employees / roles --------
class InMemoryEmployees:
    def __init__(self, *employees: Employee):
        self.by_id = {e.employee_id: e for e in employees}
        self.locked: list[str] = []

    def add(self, employee: Employee) -> None:
        self.by_id[employee.employee_id] = employee

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        return self.by_id.get(str(employee_id))

    def lock(self, employee_id: str) -> None:
        self.locked.append(str(employee_id))


class InMemoryRoles:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees

    def list_user_ids_with_roles(self, *, organization_id: str, roles):
        wanted = {Role(r) for r in roles}
        return [
            e.employee_id
            for e in self._employees.by_id.values()
            if e.organization_id == organization_id and e.role in wanted
        ]


# -------- holidays --------
class InMemoryHolidays:
    def __init__(self):
        self.items: list[Holiday] = []

    def add(self, *, holiday_date, name, description, created_at) -> int:
        if any(h.holiday_date == holiday_date for h in self.items):
            raise ValidationError(f"A holiday is already listed on {holiday_date.isoformat()}")
        hid = len(self.items) + 1
        self.items.append(
            Holiday(holiday_id=hid, holiday_date=holiday_date, name=name, description=description, created_at=created_at)
        )
        return hid

    def list_between(self, *, start, end, as_of=None):
        out = [
            h
            for h in self.items
            if start <= h.holiday_date <= end and (as_of is None or h.created_at <= as_of)
        ]
        return sorted(out, key=lambda h: h.holiday_date)


# -------- requests --------
class InMemoryRequestStore:
    def __init__(self, kind: RequestKind):
        self.kind = kind
        self.rows: dict[int, Request] = {}
        self._next_id = 1

    def insert(self, draft) -> int:
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = draft.stored_as(rid)
        return rid

    def get(self, request_id: int, *, for_update: bool = False):
        return self.rows.get(int(request_id))

    def set_status(self, request_id, *, expected, status, decided_by, decided_at, note=None) -> bool:
        req = self.rows.get(int(request_id))
        if not req or req.status != expected:
            return False
        self.rows[int(request_id)] = req.with_decision(
            status=status, decided_by=decided_by, decided_at=decided_at, note=note
        )
        return True

    def list_for_employee(self, employee_id, *, status=None, limit=200):
        out = [r for r in self.rows.values() if r.employee_id == employee_id and (status is None or r.status == status)]
        return sorted(out, key=lambda r: (r.created_at, r.request_id), reverse=True)[:limit]

    def list_pending_for_approver(self, approver_id, *, limit=200):
        out = [r for r in self.rows.values() if r.is_pending and r.is_approver(approver_id)]
        return sorted(out, key=lambda r: (r.created_at, r.request_id))[:limit]


class InMemoryLeaves(InMemoryRequestStore):
    def __init__(self):
        super().__init__(RequestKind.LEAVE)

    def pending_days(self, employee_id, leave_type) -> Decimal:
        return sum(
            (
                r.payload.duration
                for r in self.rows.values()
                if r.employee_id == employee_id and r.payload.leave_type == leave_type and r.is_pending
            ),
            Decimal("0"),
        )


class InMemoryAttendanceEdits(InMemoryRequestStore):
    def __init__(self):
        super().__init__(RequestKind.ATTENDANCE_EDIT)

    def has_pending_for_attendance(self, attendance_id) -> bool:
        return any(r.is_pending and r.payload.attendance_id == int(attendance_id) for r in self.rows.values())


class InMemoryResignations(InMemoryRequestStore):
    def __init__(self):
        super().__init__(RequestKind.RESIGNATION)

    def set_status(self, request_id, *, expected, status, decided_by, decided_at, note=None) -> bool:
        ok = super().set_status(
            request_id, expected=expected, status=status, decided_by=decided_by, decided_at=decided_at, note=note
        )
        if ok:
            req = self.rows[int(request_id)]
            self.rows[int(request_id)] = replace(
                req, payload=replace(req.payload, exit_status=ResignationStatus.from_review(status))
            )
        return ok

    def has_active(self, employee_id) -> bool:
        return any(r.employee_id == employee_id and exit_status_of(r).is_active for r in self.rows.values())

    def set_exit_status(self, request_id, *, expected, status) -> bool:
        req = self.rows.get(int(request_id))
        if not req or exit_status_of(req) != expected:
            return False
        self.rows[int(request_id)] = replace(req, payload=replace(req.payload, exit_status=status))
        return True


# -------- balances --------
class InMemoryBalances:
    def __init__(self):
        self.rows: dict[tuple[str, str], Decimal] = {}

    def get(self, employee_id):
        found = {lt: v for (eid, lt), v in self.rows.items() if eid == employee_id}
        if not found:
            return None
        return LeaveBalance(employee_id=employee_id, balances=found)

    def debit(self, employee_id, leave_type, days) -> bool:
        key = (employee_id, leave_type)
        if self.rows.get(key, Decimal("0")) < days:
            return False
        self.rows[key] = self.rows[key] - days
        return True

    def credit(self, employee_id, leave_type, days) -> None:
        key = (employee_id, leave_type)
        self.rows[key] = self.rows.get(key, Decimal("0")) + days

    def set(self, employee_id, leave_type, days) -> None:
        self.rows[(employee_id, leave_type)] = days


# -------- attendance --------
class InMemoryAttendance:
    def __init__(self):
        self.rows: dict[int, AttendanceRecord] = {}
        self._next_id = 1

    def get_by_id(self, attendance_id, *, for_update=False):
        return self.rows.get(int(attendance_id))

    def get_for_employee_and_date(self, employee_id, work_date, *, for_update=False):
        for r in self.rows.values():
            if r.employee_id == employee_id and r.work_date == work_date:
                return r
        return None

    def get_recent_for_employee(self, employee_id, limit):
        out = [r for r in self.rows.values() if r.employee_id == employee_id]
        return sorted(out, key=lambda r: r.work_date, reverse=True)[:limit]

    def list_between(self, employee_id, *, start, end):
        out = [r for r in self.rows.values() if r.employee_id == employee_id and start <= r.work_date <= end]
        return sorted(out, key=lambda r: r.work_date)

    def create_punch_in(self, *, employee_id, work_date, punch_in, location, employee_name="", employee_code=""):
        if self.get_for_employee_and_date(employee_id, work_date):
            raise DuplicatePunchIn("You have already punched in today")
        aid = self._next_id
        self._next_id += 1
        self.rows[aid] = AttendanceRecord(
            attendance_id=aid,
            employee_id=employee_id,
            work_date=work_date,
            punch_in=punch_in,
            punch_in_location=location,
            employee_name=employee_name,
            employee_code=employee_code,
        )
        return aid

    def set_punch_out(self, *, attendance_id, punch_out, location) -> bool:
        rec = self.rows.get(int(attendance_id))
        if not rec or rec.punch_out is not None:
            return False
        self.rows[int(attendance_id)] = replace(rec, punch_out=punch_out, punch_out_location=location)
        return True

    def update_punch_out(self, *, attendance_id, punch_out) -> bool:
        rec = self.rows.get(int(attendance_id))
        if not rec or rec.punch_out is not None:
            return False
        self.rows[int(attendance_id)] = replace(rec, punch_out=punch_out)
        return True


# -------- exits --------
class InMemoryClearances:
    def __init__(self):
        self.rows: dict[int, Clearance] = {}
        self._next_id = 1
        self._next_item = 1

    def create(self, *, resignation_id, employee_id, departments, created_at) -> int:
        if any(c.resignation_id == resignation_id for c in self.rows.values()):
            raise InvalidTransition("Clearance already exists for this resignation")
        cid = self._next_id
        self._next_id += 1
        items = []
        for dept in departments:
            items.append(ClearanceItem(item_id=self._next_item, department=dept))
            self._next_item += 1
        self.rows[cid] = Clearance(
            clearance_id=cid,
            resignation_id=resignation_id,
            employee_id=employee_id,
            items=tuple(items),
            created_at=created_at,
        )
        return cid

    def get(self, clearance_id, *, for_update=False):
        return self.rows.get(int(clearance_id))

    def get_latest_for_employee(self, employee_id):
        found = [c for c in self.rows.values() if c.employee_id == employee_id]
        return max(found, key=lambda c: c.clearance_id) if found else None

    def list_open(self, *, limit=200):
        return [c for c in self.rows.values() if c.completed_at is None][:limit]

    def set_item_status(self, item_id, *, status, cleared_by, cleared_date, remarks) -> bool:
        for cid, c in self.rows.items():
            for idx, item in enumerate(c.items):
                if item.item_id == int(item_id):
                    if item.status != ClearanceItemStatus.PENDING:
                        return False
                    items = list(c.items)
                    items[idx] = replace(
                        item, status=status, cleared_by=cleared_by, cleared_date=cleared_date, remarks=remarks
                    )
                    self.rows[cid] = replace(c, items=tuple(items))
                    return True
        return False

    def mark_completed(self, clearance_id, *, completed_at) -> None:
        c = self.rows[int(clearance_id)]
        if c.completed_at is None:
            self.rows[int(clearance_id)] = replace(c, completed_at=completed_at)


class InMemorySettlements:
    def __init__(self):
        self.rows: dict[int, Settlement] = {}
        self._next_id = 1

    def create(self, *, employee_id, resignation_id, amounts, remarks, created_at) -> int:
        if self.get_for_employee(employee_id):
            raise InvalidTransition("A settlement already exists for this employee")
        sid = self._next_id
        self._next_id += 1
        self.rows[sid] = Settlement(
            settlement_id=sid,
            employee_id=employee_id,
            resignation_id=resignation_id,
            amounts=amounts,
            status=SettlementStatus.PENDING,
            created_at=created_at,
            remarks=remarks,
        )
        return sid

    def get(self, settlement_id, *, for_update=False):
        return self.rows.get(int(settlement_id))

    def get_for_employee(self, employee_id):
        for s in self.rows.values():
            if s.employee_id == employee_id:
                return s
        return None

    def list_by_status(self, *, status=None, limit=200):
        return [s for s in self.rows.values() if status is None or s.status == status][:limit]

    def set_status(self, settlement_id, *, expected, status, updated_at) -> bool:
        s = self.rows.get(int(settlement_id))
        if not s or s.status != expected:
            return False
        self.rows[int(settlement_id)] = replace(s, status=status, updated_at=updated_at)
        return True


# -------- notifications --------
class RecordingNotifier:
    def __init__(self, failing: frozenset = frozenset()):
        self.sent: list[tuple[str, str, str]] = []
        self._failing = failing

    def notify(self, recipient_id, *, title, message) -> None:
        if recipient_id in self._failing:
            raise RuntimeError(f"push channel down for {recipient_id}")
        self.sent.append((recipient_id, title, message))

    def recipients(self) -> list[str]:
        return [r for r, _, _ in self.sent]


# -------- wiring --------
ORG = "org-1"

STAFF = Employee(
    employee_id="emp-1",
    organization_id=ORG,
    role=Role.STAFF,
    name="Asha Rao",
    employee_code="E001",
    gender=Gender.FEMALE,
    department="Engineering",
    designation="Developer",
)
HR = Employee(employee_id="hr-1", organization_id=ORG, role=Role.HR, name="Meera Iyer", employee_code="H001")
HOD = Employee(employee_id="hod-1", organization_id=ORG, role=Role.HOD, name="Ravi Kumar", employee_code="D001")


@dataclass
class World:
    clock: FixedClock
    tx: FakeTransactions
    notifier: RecordingNotifier
    employees: InMemoryEmployees
    holidays: InMemoryHolidays
    leaves: InMemoryLeaves
    balances: InMemoryBalances
    attendance: InMemoryAttendance
    edits: InMemoryAttendanceEdits
    resignations: InMemoryResignations
    clearances: InMemoryClearances
    settlements: InMemorySettlements
    approvers: ApproverResolver
    calendar: HolidayCalendar
    ledger: LeaveLedger
    leave_service: LeaveService
    attendance_service: AttendanceService
    edit_service: AttendanceEditService
    exits: ExitPipeline


def build_world(now: datetime, *, failing_recipients=()) -> World:
    clock = FixedClock(now)
    notifier = RecordingNotifier(failing=frozenset(failing_recipients))
    employees = InMemoryEmployees(STAFF, HR, HOD)
    holidays = InMemoryHolidays()
    leaves = InMemoryLeaves()
    balances = InMemoryBalances()
    attendance = InMemoryAttendance()
    edits = InMemoryAttendanceEdits()
    resignations = InMemoryResignations()
    clearances = InMemoryClearances()
    settlements = InMemorySettlements()
    tx = FakeTransactions(leaves, balances, attendance, edits, resignations, clearances, settlements)

    employee_service = EmployeeService(employees)
    approvers = ApproverResolver(InMemoryRoles(employees))
    calendar = HolidayCalendar(holidays, clock=clock)
    ledger = LeaveLedger(balances, leaves)

    def workflow(kind, store, effect):
        return RequestWorkflow(
            kind=kind,
            store=store,
            transactions=tx,
            employees=employees,
            approvers=approvers,
            effect=effect,
            notifier=notifier,
            clock=clock,
        )

    leave_service = LeaveService(
        workflow(RequestKind.LEAVE, leaves, LeaveBalanceEffect(ledger)), employee_service, calendar, ledger
    )
    attendance_service = AttendanceService(attendance, employee_service, tx, clock=clock)
    edit_service = AttendanceEditService(
        workflow(RequestKind.ATTENDANCE_EDIT, edits, AttendanceEditEffect(attendance, edits)),
        employee_service,
        attendance,
    )
    exits = ExitPipeline(
        workflow(RequestKind.RESIGNATION, resignations, ResignationEffect(resignations)),
        employee_service,
        resignations,
        clearances,
        settlements,
        tx,
        ledger=ledger,
        notifier=notifier,
        clock=clock,
    )

    return World(
        clock=clock,
        tx=tx,
        notifier=notifier,
        employees=employees,
        holidays=holidays,
        leaves=leaves,
        balances=balances,
        attendance=attendance,
        edits=edits,
        resignations=resignations,
        clearances=clearances,
        settlements=settlements,
        approvers=approvers,
        calendar=calendar,
        ledger=ledger,
        leave_service=leave_service,
        attendance_service=attendance_service,
        edit_service=edit_service,
        exits=exits,
    )


@pytest.fixture
def fixed_now() -> datetime:
    # A Friday.
    return datetime(2024, 3, 1, 9, 0, 0)


@pytest.fixture
def world(fixed_now) -> World:
    return build_world(fixed_now)


@pytest.fixture
def staff() -> Employee:
    return STAFF


@pytest.fixture
def today(fixed_now) -> date:
    return fixed_now.date()


@pytest.fixture
def make_world(fixed_now):
    def _make(**kwargs) -> World:
        return build_world(fixed_now, **kwargs)

    return _make
