from __future__ import annotations

from typing import Any, Dict

from ..core.enums import RequestKind, RequestStatus
from ..database.mysql_base import db_cursor, fetchone
from ..workflow.mysql_store import MySQLRequestStore
from .model import AttendanceEditPayload
from .repository import AttendanceEditRepository


class MySQLAttendanceEditRepository(MySQLRequestStore[AttendanceEditPayload], AttendanceEditRepository):
    TABLE = "attendance_edit_requests"
    KIND = RequestKind.ATTENDANCE_EDIT
    PAYLOAD_COLUMNS = (
        "attendance_id",
        "work_date",
        "current_punch_in",
        "current_punch_out",
        "requested_punch_out",
    )

    # Stored lowercase, as the edit-request screens read it.
    def encode_status(self, status: RequestStatus) -> str:
        return status.value.lower()

    def payload_to_row(self, payload: AttendanceEditPayload) -> Dict[str, Any]:
        return {
            "attendance_id": int(payload.attendance_id),
            "work_date": payload.work_date,
            "current_punch_in": payload.current_punch_in,
            "current_punch_out": payload.current_punch_out,
            "requested_punch_out": payload.requested_punch_out,
        }

    def row_to_payload(self, row: Dict[str, Any]) -> AttendanceEditPayload:
        return AttendanceEditPayload(
            attendance_id=int(row["attendance_id"]),
            work_date=row["work_date"],
            current_punch_in=row["current_punch_in"],
            current_punch_out=row.get("current_punch_out"),
            requested_punch_out=row["requested_punch_out"],
        )

    def has_pending_for_attendance(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM attendance_edit_requests WHERE attendance_id=%s AND status=%s LIMIT 1",
                (int(attendance_id), self.encode_status(RequestStatus.PENDING)),
            )
            return fetchone(cur) is not None
