from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Generic, Optional, Sequence, Tuple, TypeVar

from ..core.enums import RequestKind, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_json, to_json
from .model import Request, RequestDraft

P = TypeVar("P")


class MySQLRequestStore(Generic[P]):
    """Shared SQL for request tables.

    Every request table has ``request_id, employee_id, reason, status,
    approver_ids (JSON), created_at, decided_by, decided_at, decision_note`` plus
    the kind-specific ``PAYLOAD_COLUMNS``.
    """

    TABLE: str = ""
    KIND: RequestKind
    PAYLOAD_COLUMNS: Tuple[str, ...] = ()

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- kind-specific mapping --------
    def payload_to_row(self, payload: P) -> Dict[str, Any]:
        raise NotImplementedError

    def row_to_payload(self, row: Dict[str, Any]) -> P:
        raise NotImplementedError

    def encode_status(self, status: RequestStatus) -> str:
        return status.value

    def decode_status(self, value: str) -> RequestStatus:
        return RequestStatus(str(value).upper())

    # -------- shared --------
    def _columns(self) -> str:
        base = [
            "request_id",
            "employee_id",
            "reason",
            "status",
            "approver_ids",
            "created_at",
            "decided_by",
            "decided_at",
            "decision_note",
        ]
        return ", ".join(base + list(self.PAYLOAD_COLUMNS))

    def _to_request(self, row: Dict[str, Any]) -> Request[P]:
        return Request(
            request_id=int(row["request_id"]),
            kind=self.KIND,
            employee_id=str(row["employee_id"]),
            payload=self.row_to_payload(row),
            reason=row["reason"],
            status=self.decode_status(row["status"]),
            approver_ids=tuple(from_json(row.get("approver_ids"), default=[])),
            created_at=row["created_at"],
            decided_by=row.get("decided_by"),
            decided_at=row.get("decided_at"),
            decision_note=row.get("decision_note"),
        )

    def insert(self, draft: RequestDraft[P]) -> int:
        values = self.payload_to_row(draft.payload)
        columns = ["employee_id", "reason", "status", "approver_ids", "created_at"] + list(values)
        params = [
            draft.employee_id,
            draft.reason,
            self.encode_status(RequestStatus.PENDING),
            to_json(list(draft.approver_ids)),
            draft.created_at,
        ] + list(values.values())

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO {self.TABLE}({', '.join(columns)}) VALUES({', '.join(['%s'] * len(columns))})",
                tuple(params),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[Request[P]]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {self._columns()} FROM {self.TABLE} WHERE request_id=%s{lock}",
                (int(request_id),),
            )
            row = fetchone(cur)
            return self._to_request(row) if row else None

    def set_status(
        self,
        request_id: int,
        *,
        expected: RequestStatus,
        status: RequestStatus,
        decided_by: str,
        decided_at: datetime,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE {self.TABLE}
                SET status=%s, decided_by=%s, decided_at=%s, decision_note=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    self.encode_status(status),
                    decided_by,
                    decided_at,
                    note,
                    int(request_id),
                    self.encode_status(expected),
                ),
            )
            return cur.rowcount == 1

    def list_for_employee(
        self,
        employee_id: str,
        *,
        status: Optional[RequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[Request[P]]:
        clauses = ["employee_id=%s"]
        params: list[object] = [employee_id]
        if status is not None:
            clauses.append("status=%s")
            params.append(self.encode_status(status))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {self._columns()}
                FROM {self.TABLE}
                WHERE {" AND ".join(clauses)}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [self._to_request(r) for r in fetchall(cur)]

    def list_pending_for_approver(self, approver_id: str, *, limit: int = 200) -> Sequence[Request[P]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {self._columns()}
                FROM {self.TABLE}
                WHERE status=%s AND JSON_CONTAINS(approver_ids, JSON_QUOTE(%s))
                ORDER BY created_at
                LIMIT %s
                """,
                (self.encode_status(RequestStatus.PENDING), str(approver_id), int(limit)),
            )
            return [self._to_request(r) for r in fetchall(cur)]
