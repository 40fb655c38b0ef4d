from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence, TypeVar

from ..core.enums import RequestStatus
from .model import Request, RequestDraft

P = TypeVar("P")


class RequestStore(Protocol[P]):
    """Persistence for one request kind.

    ``insert`` writes the request together with its approver snapshot in one
    statement; ``set_status`` only succeeds when the stored status still equals
    ``expected``.
    """

    def insert(self, draft: RequestDraft[P]) -> int:
        raise NotImplementedError

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[Request[P]]:
        raise NotImplementedError

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
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: str,
        *,
        status: Optional[RequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[Request[P]]:
        raise NotImplementedError

    def list_pending_for_approver(self, approver_id: str, *, limit: int = 200) -> Sequence[Request[P]]:
        raise NotImplementedError
