from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

import mysql.connector

from ..core.enums import ClearanceItemStatus
from ..core.exceptions import InvalidTransition
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Clearance, ClearanceItem
from .repository import ClearanceRepository


def _to_item(r: dict) -> ClearanceItem:
    return ClearanceItem(
        item_id=int(r["item_id"]),
        department=r["department"],
        status=ClearanceItemStatus(r["status"]),
        cleared_by=r.get("cleared_by"),
        cleared_date=r.get("cleared_date"),
        remarks=r.get("remarks"),
    )


class MySQLClearanceRepository(ClearanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, resignation_id: int, employee_id: str, departments: Sequence[str], created_at: datetime) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO clearances(resignation_id, employee_id, created_at) VALUES(%s,%s,%s)",
                    (int(resignation_id), employee_id, created_at),
                )
                clearance_id = int(cur.lastrowid)
                cur.executemany(
                    """
                    INSERT INTO clearance_items(clearance_id, position, department, status)
                    VALUES(%s,%s,%s,%s)
                    """,
                    [
                        (clearance_id, pos, dept, ClearanceItemStatus.PENDING.value)
                        for pos, dept in enumerate(departments)
                    ],
                )
                return clearance_id
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise InvalidTransition("Clearance already exists for this resignation")
            raise

    def _load(self, cur, headers: List[dict]) -> List[Clearance]:
        if not headers:
            return []
        ids = [int(h["clearance_id"]) for h in headers]
        cur.execute(
            f"""
            SELECT item_id, clearance_id, department, status, cleared_by, cleared_date, remarks
            FROM clearance_items
            WHERE clearance_id IN ({", ".join(["%s"] * len(ids))})
            ORDER BY clearance_id, position
            """,
            tuple(ids),
        )
        items: Dict[int, List[ClearanceItem]] = {i: [] for i in ids}
        for r in fetchall(cur):
            items[int(r["clearance_id"])].append(_to_item(r))

        return [
            Clearance(
                clearance_id=int(h["clearance_id"]),
                resignation_id=int(h["resignation_id"]),
                employee_id=str(h["employee_id"]),
                items=tuple(items[int(h["clearance_id"])]),
                created_at=h["created_at"],
                completed_at=h.get("completed_at"),
            )
            for h in headers
        ]

    def get(self, clearance_id: int, *, for_update: bool = False) -> Optional[Clearance]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT clearance_id, resignation_id, employee_id, created_at, completed_at
                FROM clearances
                WHERE clearance_id=%s{lock}
                """,
                (int(clearance_id),),
            )
            h = fetchone(cur)
            found = self._load(cur, [h] if h else [])
            return found[0] if found else None

    def get_latest_for_employee(self, employee_id: str) -> Optional[Clearance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT clearance_id, resignation_id, employee_id, created_at, completed_at
                FROM clearances
                WHERE employee_id=%s
                ORDER BY created_at DESC, clearance_id DESC
                LIMIT 1
                """,
                (employee_id,),
            )
            h = fetchone(cur)
            found = self._load(cur, [h] if h else [])
            return found[0] if found else None

    def list_open(self, *, limit: int = 200) -> Sequence[Clearance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT clearance_id, resignation_id, employee_id, created_at, completed_at
                FROM clearances
                WHERE completed_at IS NULL
                ORDER BY created_at
                LIMIT %s
                """,
                (int(limit),),
            )
            return self._load(cur, fetchall(cur))

    def set_item_status(
        self,
        item_id: int,
        *,
        status: ClearanceItemStatus,
        cleared_by: str,
        cleared_date: date,
        remarks: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE clearance_items
                SET status=%s, cleared_by=%s, cleared_date=%s, remarks=%s
                WHERE item_id=%s AND status=%s
                """,
                (status.value, cleared_by, cleared_date, remarks, int(item_id), ClearanceItemStatus.PENDING.value),
            )
            return cur.rowcount == 1

    def mark_completed(self, clearance_id: int, *, completed_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE clearances SET completed_at=%s WHERE clearance_id=%s AND completed_at IS NULL",
                (completed_at, int(clearance_id)),
            )
