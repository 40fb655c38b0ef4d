from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import DuplicatePunchIn
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_json, is_duplicate_key, to_json
from .model import AttendanceRecord, GeoPoint
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, punch_in, punch_in_location,
    punch_out, punch_out_location, employee_name, employee_code
"""


def _to_point(value) -> Optional[GeoPoint]:
    data = from_json(value)
    if not data:
        return None
    return GeoPoint(lat=float(data["lat"]), lng=float(data["lng"]))


def _from_point(point: Optional[GeoPoint]) -> Optional[str]:
    return to_json(point.as_dict()) if point else None


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=str(r["employee_id"]),
        work_date=r["work_date"],
        punch_in=r["punch_in"],
        punch_in_location=_to_point(r.get("punch_in_location")),
        punch_out=r.get("punch_out"),
        punch_out_location=_to_point(r.get("punch_out_location")),
        employee_name=r.get("employee_name") or "",
        employee_code=r.get("employee_code") or "",
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int, *, for_update: bool = False) -> Optional[AttendanceRecord]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE attendance_id=%s{lock}", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(
        self,
        employee_id: str,
        work_date: date,
        *,
        for_update: bool = False,
    ) -> Optional[AttendanceRecord]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE employee_id=%s AND work_date=%s{lock}",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_employee(self, employee_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE employee_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (employee_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_between(self, employee_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date
                """,
                (employee_id, start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_punch_in(
        self,
        *,
        employee_id: str,
        work_date: date,
        punch_in: datetime,
        location: Optional[GeoPoint],
        employee_name: str = "",
        employee_code: str = "",
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # uq_attendance_employee_date makes the duplicate check and the insert one step.
                cur.execute(
                    """
                    INSERT INTO attendance(employee_id, work_date, punch_in, punch_in_location, employee_name, employee_code)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (employee_id, work_date, punch_in, _from_point(location), employee_name, employee_code),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicatePunchIn("You have already punched in today")
            raise

    def set_punch_out(self, *, attendance_id: int, punch_out: datetime, location: Optional[GeoPoint]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET punch_out=%s, punch_out_location=%s
                WHERE attendance_id=%s AND punch_out IS NULL
                """,
                (punch_out, _from_point(location), int(attendance_id)),
            )
            return cur.rowcount == 1

    def update_punch_out(self, *, attendance_id: int, punch_out: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance SET punch_out=%s WHERE attendance_id=%s AND punch_out IS NULL",
                (punch_out, int(attendance_id)),
            )
            return cur.rowcount == 1
