from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Generic, Optional, TypeVar

from ..core.enums import RequestKind, RequestStatus

P = TypeVar("P")


@dataclass(frozen=True)
class RequestDraft(Generic[P]):
    """A request that passed validation but is not stored yet."""

    kind: RequestKind
    employee_id: str
    payload: P
    reason: str
    approver_ids: tuple[str, ...]
    created_at: datetime

    def stored_as(self, request_id: int) -> "Request[P]":
        return Request(
            request_id=int(request_id),
            kind=self.kind,
            employee_id=self.employee_id,
            payload=self.payload,
            reason=self.reason,
            status=RequestStatus.PENDING,
            approver_ids=self.approver_ids,
            created_at=self.created_at,
        )


@dataclass(frozen=True)
class Request(Generic[P]):
    """A reviewed request of any kind; ``payload`` holds the kind-specific fields."""

    request_id: int
    kind: RequestKind
    employee_id: str
    payload: P
    reason: str
    status: RequestStatus
    approver_ids: tuple[str, ...]
    created_at: datetime
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    decision_note: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def is_approver(self, user_id: str) -> bool:
        return str(user_id) in self.approver_ids

    def with_decision(
        self,
        *,
        status: RequestStatus,
        decided_by: str,
        decided_at: datetime,
        note: Optional[str] = None,
    ) -> "Request[P]":
        return replace(self, status=status, decided_by=decided_by, decided_at=decided_at, decision_note=note)
