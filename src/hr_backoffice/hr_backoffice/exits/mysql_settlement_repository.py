from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import SettlementStatus
from ..core.exceptions import InvalidTransition
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, to_decimal
from .model import AMOUNT_FIELDS, Settlement, SettlementAmounts
from .repository import SettlementRepository

_COLUMNS = ", ".join(
    ["settlement_id", "employee_id", "resignation_id"]
    + list(AMOUNT_FIELDS)
    + ["status", "remarks", "created_at", "updated_at"]
)


def _to_settlement(r: dict) -> Settlement:
    return Settlement(
        settlement_id=int(r["settlement_id"]),
        employee_id=str(r["employee_id"]),
        resignation_id=int(r["resignation_id"]),
        amounts=SettlementAmounts(**{c: to_decimal(r[c]) for c in AMOUNT_FIELDS}),
        status=SettlementStatus(r["status"]),
        created_at=r["created_at"],
        remarks=r.get("remarks"),
        updated_at=r.get("updated_at"),
    )


class MySQLSettlementRepository(SettlementRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: str,
        resignation_id: int,
        amounts: SettlementAmounts,
        remarks: Optional[str],
        created_at: datetime,
    ) -> int:
        # Totals and net are stored for reporting; the amounts stay the source of truth.
        columns = ["employee_id", "resignation_id"] + list(AMOUNT_FIELDS) + [
            "total_payable",
            "total_deductions",
            "net_settlement",
            "status",
            "remarks",
            "created_at",
        ]
        params = (
            [employee_id, int(resignation_id)]
            + [getattr(amounts, c) for c in AMOUNT_FIELDS]
            + [
                amounts.total_payable,
                amounts.total_deductions,
                amounts.net,
                SettlementStatus.PENDING.value,
                remarks,
                created_at,
            ]
        )
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO settlements({', '.join(columns)}) VALUES({', '.join(['%s'] * len(columns))})",
                    tuple(params),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise InvalidTransition("A settlement already exists for this employee")
            raise

    def get(self, settlement_id: int, *, for_update: bool = False) -> Optional[Settlement]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM settlements WHERE settlement_id=%s{lock}", (int(settlement_id),))
            r = fetchone(cur)
            return _to_settlement(r) if r else None

    def get_for_employee(self, employee_id: str) -> Optional[Settlement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM settlements WHERE employee_id=%s", (employee_id,))
            r = fetchone(cur)
            return _to_settlement(r) if r else None

    def list_by_status(self, *, status: Optional[SettlementStatus] = None, limit: int = 200) -> Sequence[Settlement]:
        where = ""
        params: list[object] = []
        if status is not None:
            where = "WHERE status=%s"
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM settlements {where} ORDER BY created_at DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_to_settlement(r) for r in fetchall(cur)]

    def set_status(
        self,
        settlement_id: int,
        *,
        expected: SettlementStatus,
        status: SettlementStatus,
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE settlements SET status=%s, updated_at=%s WHERE settlement_id=%s AND status=%s",
                (status.value, updated_at, int(settlement_id), expected.value),
            )
            return cur.rowcount == 1
