from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, is_duplicate_key
from .model import Holiday
from .repository import HolidayRepository


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, *, holiday_date: date, name: str, description: Optional[str], created_at: datetime) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO holidays(holiday_date, name, description, created_at)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (holiday_date, name, description, created_at),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ValidationError(f"A holiday already exists on {holiday_date.isoformat()}")
            raise

    def list_between(self, *, start: date, end: date, as_of: Optional[datetime] = None) -> Sequence[Holiday]:
        clauses = ["holiday_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if as_of is not None:
            clauses.append("created_at <= %s")
            params.append(as_of)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT holiday_id, holiday_date, name, description, created_at
                FROM holidays
                WHERE {" AND ".join(clauses)}
                ORDER BY holiday_date
                """,
                tuple(params),
            )
            return [
                Holiday(
                    holiday_id=int(r["holiday_id"]),
                    holiday_date=r["holiday_date"],
                    name=r["name"],
                    description=r.get("description"),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
