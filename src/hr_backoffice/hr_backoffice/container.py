from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .approvals.resolver import ApproverResolver
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_APPROVER_ROLES,
    DEFAULT_CLEARANCE_DEPARTMENTS,
    DEFAULT_UNACCOUNTED_LEAVE_TYPES,
    DEFAULT_WEEKLY_OFF_DAY,
)
from .core.enums import RequestKind
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository, MySQLRoleRepository
from .employees.service import EmployeeService
from .exits.mysql_clearance_repository import MySQLClearanceRepository
from .exits.mysql_resignation_repository import MySQLResignationRepository
from .exits.mysql_settlement_repository import MySQLSettlementRepository
from .exits.service import ExitPipeline, ResignationEffect
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.service import HolidayCalendar
from .leaves.ledger import LeaveLedger
from .leaves.mysql_leave_repository import MySQLLeaveBalanceRepository, MySQLLeaveRepository
from .leaves.service import LeaveBalanceEffect, LeaveService
from .notifications.notifier import LoggingNotifier, Notifier
from .requests.mysql_attendance_edit_repository import MySQLAttendanceEditRepository
from .requests.service import AttendanceEditEffect, AttendanceEditService
from .workflow.engine import RequestWorkflow


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    roles_repo: MySQLRoleRepository
    holidays_repo: MySQLHolidayRepository
    leaves_repo: MySQLLeaveRepository
    balances_repo: MySQLLeaveBalanceRepository
    attendance_repo: MySQLAttendanceRepository
    edits_repo: MySQLAttendanceEditRepository
    resignations_repo: MySQLResignationRepository
    clearances_repo: MySQLClearanceRepository
    settlements_repo: MySQLSettlementRepository

    employee_service: EmployeeService
    holiday_calendar: HolidayCalendar
    leave_ledger: LeaveLedger
    leave_service: LeaveService
    attendance_service: AttendanceService
    attendance_edit_service: AttendanceEditService
    exit_pipeline: ExitPipeline


def build_container(
    *,
    db_config: dict,
    weekly_off: int = DEFAULT_WEEKLY_OFF_DAY,
    approver_roles: Sequence[str] = DEFAULT_APPROVER_ROLES,
    unaccounted_leave_types: Sequence[str] = DEFAULT_UNACCOUNTED_LEAVE_TYPES,
    clearance_departments: Sequence[str] = DEFAULT_CLEARANCE_DEPARTMENTS,
    notifier: Optional[Notifier] = None,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)
    notifier = notifier or LoggingNotifier()

    employees_repo = MySQLEmployeeRepository(conn)
    roles_repo = MySQLRoleRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    balances_repo = MySQLLeaveBalanceRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    edits_repo = MySQLAttendanceEditRepository(conn)
    resignations_repo = MySQLResignationRepository(conn)
    clearances_repo = MySQLClearanceRepository(conn)
    settlements_repo = MySQLSettlementRepository(conn)

    employee_service = EmployeeService(employees_repo)
    approvers = ApproverResolver(roles_repo, approver_roles=approver_roles)
    holiday_calendar = HolidayCalendar(holidays_repo, weekly_off=weekly_off)
    leave_ledger = LeaveLedger(balances_repo, leaves_repo, unaccounted_types=unaccounted_leave_types)

    def workflow(kind: RequestKind, store, effect) -> RequestWorkflow:
        return RequestWorkflow(
            kind=kind,
            store=store,
            transactions=conn,
            employees=employees_repo,
            approvers=approvers,
            effect=effect,
            notifier=notifier,
        )

    leave_service = LeaveService(
        workflow(RequestKind.LEAVE, leaves_repo, LeaveBalanceEffect(leave_ledger)),
        employee_service,
        holiday_calendar,
        leave_ledger,
    )
    attendance_service = AttendanceService(attendance_repo, employee_service, conn)
    attendance_edit_service = AttendanceEditService(
        workflow(RequestKind.ATTENDANCE_EDIT, edits_repo, AttendanceEditEffect(attendance_repo, edits_repo)),
        employee_service,
        attendance_repo,
    )
    exit_pipeline = ExitPipeline(
        workflow(RequestKind.RESIGNATION, resignations_repo, ResignationEffect(resignations_repo)),
        employee_service,
        resignations_repo,
        clearances_repo,
        settlements_repo,
        conn,
        ledger=leave_ledger,
        departments=clearance_departments,
        notifier=notifier,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        roles_repo=roles_repo,
        holidays_repo=holidays_repo,
        leaves_repo=leaves_repo,
        balances_repo=balances_repo,
        attendance_repo=attendance_repo,
        edits_repo=edits_repo,
        resignations_repo=resignations_repo,
        clearances_repo=clearances_repo,
        settlements_repo=settlements_repo,
        employee_service=employee_service,
        holiday_calendar=holiday_calendar,
        leave_ledger=leave_ledger,
        leave_service=leave_service,
        attendance_service=attendance_service,
        attendance_edit_service=attendance_edit_service,
        exit_pipeline=exit_pipeline,
    )
