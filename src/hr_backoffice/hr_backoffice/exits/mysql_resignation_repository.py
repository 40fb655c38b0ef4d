from __future__ import annotations

from typing import Any, Dict

from ..core.enums import (
    ACTIVE_RESIGNATION_STATUSES,
    NoticePeriod,
    RequestKind,
    RequestStatus,
    ResignationStatus,
    ResignationType,
)
from ..database.mysql_base import db_cursor, fetchone
from ..workflow.mysql_store import MySQLRequestStore
from .model import ResignationPayload
from .repository import ResignationRepository


class MySQLResignationRepository(MySQLRequestStore[ResignationPayload], ResignationRepository):
    """``resignations.status`` holds the exit pipeline status, not the review status."""

    TABLE = "resignations"
    KIND = RequestKind.RESIGNATION
    PAYLOAD_COLUMNS = (
        "resignation_type",
        "submission_date",
        "last_working_date",
        "notice_period",
        "remarks",
        "department",
        "designation",
        "employee_name",
        "employee_code",
    )

    def encode_status(self, status: RequestStatus) -> str:
        return ResignationStatus.from_review(status).value

    def decode_status(self, value: str) -> RequestStatus:
        return ResignationStatus(value).review_status

    def payload_to_row(self, payload: ResignationPayload) -> Dict[str, Any]:
        return {
            "resignation_type": payload.resignation_type.value,
            "submission_date": payload.submission_date,
            "last_working_date": payload.last_working_date,
            "notice_period": payload.notice_period.value,
            "remarks": payload.remarks,
            "department": payload.department,
            "designation": payload.designation,
            "employee_name": payload.employee_name,
            "employee_code": payload.employee_code,
        }

    def row_to_payload(self, row: Dict[str, Any]) -> ResignationPayload:
        return ResignationPayload(
            resignation_type=ResignationType(row["resignation_type"]),
            submission_date=row["submission_date"],
            last_working_date=row["last_working_date"],
            notice_period=NoticePeriod(row["notice_period"]),
            remarks=row.get("remarks"),
            department=row.get("department"),
            designation=row.get("designation"),
            employee_name=row.get("employee_name") or "",
            employee_code=row.get("employee_code") or "",
            exit_status=ResignationStatus(row["status"]),
        )

    def has_active(self, employee_id: str) -> bool:
        statuses = sorted(s.value for s in ACTIVE_RESIGNATION_STATUSES)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT 1 AS found
                FROM resignations
                WHERE employee_id=%s AND status IN ({", ".join(["%s"] * len(statuses))})
                LIMIT 1
                """,
                tuple([employee_id] + statuses),
            )
            return fetchone(cur) is not None

    def set_exit_status(self, request_id: int, *, expected: ResignationStatus, status: ResignationStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE resignations SET status=%s WHERE request_id=%s AND status=%s",
                (status.value, int(request_id), expected.value),
            )
            return cur.rowcount == 1
