from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from ..core.enums import LeaveType, RequestKind, RequestStatus
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from ..workflow.mysql_store import MySQLRequestStore
from .model import LeaveBalance, LeavePayload
from .repository import LeaveBalanceRepository, LeaveRepository


class MySQLLeaveRepository(MySQLRequestStore[LeavePayload], LeaveRepository):
    TABLE = "leaves"
    KIND = RequestKind.LEAVE
    PAYLOAD_COLUMNS = (
        "leave_type",
        "start_date",
        "end_date",
        "duration",
        "is_paid",
        "half_day",
        "employee_name",
        "employee_code",
    )

    def payload_to_row(self, payload: LeavePayload) -> Dict[str, Any]:
        return {
            "leave_type": payload.leave_type.value,
            "start_date": payload.start_date,
            "end_date": payload.end_date,
            "duration": payload.duration,
            "is_paid": int(payload.is_paid),
            "half_day": int(payload.half_day),
            "employee_name": payload.employee_name,
            "employee_code": payload.employee_code,
        }

    def row_to_payload(self, row: Dict[str, Any]) -> LeavePayload:
        return LeavePayload(
            leave_type=LeaveType(row["leave_type"]),
            start_date=row["start_date"],
            end_date=row["end_date"],
            duration=to_decimal(row["duration"]),
            is_paid=bool(row.get("is_paid", True)),
            half_day=bool(row.get("half_day", False)),
            employee_name=row.get("employee_name") or "",
            employee_code=row.get("employee_code") or "",
        )

    def pending_days(self, employee_id: str, leave_type: LeaveType) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COALESCE(SUM(duration), 0) AS held
                FROM leaves
                WHERE employee_id=%s AND leave_type=%s AND status=%s
                """,
                (employee_id, LeaveType(leave_type).value, RequestStatus.PENDING.value),
            )
            row = fetchone(cur)
            return to_decimal(row["held"] if row else 0)


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    def __init__(self, conn_factory):
        self._conn_factory = conn_factory

    def get(self, employee_id: str) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT leave_type, remaining FROM leave_balances WHERE employee_id=%s",
                (employee_id,),
            )
            rows = fetchall(cur)
            if not rows:
                return None
            balances = {}
            for r in rows:
                try:
                    balances[LeaveType(r["leave_type"])] = to_decimal(r["remaining"])
                except ValueError:
                    # Codes no longer offered stay in the table but are not exposed.
                    continue
            return LeaveBalance(employee_id=employee_id, balances=balances)

    def debit(self, employee_id: str, leave_type: LeaveType, days: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_balances
                SET remaining = remaining - %s, updated_at = NOW()
                WHERE employee_id=%s AND leave_type=%s AND remaining >= %s
                """,
                (days, employee_id, LeaveType(leave_type).value, days),
            )
            return cur.rowcount == 1

    def credit(self, employee_id: str, leave_type: LeaveType, days: Decimal) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_balances(employee_id, leave_type, remaining, updated_at)
                VALUES(%s,%s,%s,NOW())
                ON DUPLICATE KEY UPDATE remaining = remaining + VALUES(remaining), updated_at = NOW()
                """,
                (employee_id, LeaveType(leave_type).value, days),
            )

    def set(self, employee_id: str, leave_type: LeaveType, days: Decimal) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_balances(employee_id, leave_type, remaining, updated_at)
                VALUES(%s,%s,%s,NOW())
                ON DUPLICATE KEY UPDATE remaining = VALUES(remaining), updated_at = NOW()
                """,
                (employee_id, LeaveType(leave_type).value, days),
            )
