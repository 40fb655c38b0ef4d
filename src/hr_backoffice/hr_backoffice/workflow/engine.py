from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Generic, Optional, Sequence, TypeVar

from ..approvals.resolver import ApproverResolver
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import RequestKind, RequestStatus
from ..core.exceptions import AuthorizationError, InvalidTransition, NotFoundError
from ..database.connection import TransactionManager
from ..database.mysql_base import retry_on_conflict
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..notifications.notifier import LoggingNotifier, Notifier, fan_out
from .effects import ApprovalEffect, NoEffect
from .model import Request, RequestDraft
from .repository import RequestStore

logger = logging.getLogger(__name__)

P = TypeVar("P")


class RequestWorkflow(Generic[P]):
    """Submit / approve / reject / cancel for one request kind.

    PENDING -> APPROVED | REJECTED by a member of the approver snapshot,
    PENDING -> CANCELLED by the submitting employee. Anything else raises
    InvalidTransition and changes nothing.
    """

    def __init__(
        self,
        *,
        kind: RequestKind,
        store: RequestStore[P],
        transactions: TransactionManager,
        employees: EmployeeRepository,
        approvers: ApproverResolver,
        effect: Optional[ApprovalEffect[P]] = None,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._kind = kind
        self._store = store
        self._tx = transactions
        self._employees = employees
        self._approvers = approvers
        self._effect = effect or NoEffect()
        self._notifier = notifier or LoggingNotifier()
        self._clock = clock

    @property
    def kind(self) -> RequestKind:
        return self._kind

    def _label(self) -> str:
        return self._kind.value.replace("_", " ")

    @retry_on_conflict
    def submit(self, *, employee: Employee, payload: P, reason: str) -> Request[P]:
        reason = require_non_empty(reason, "Reason")
        approver_ids = self._approvers.require(employee.organization_id)

        draft = RequestDraft(
            kind=self._kind,
            employee_id=employee.employee_id,
            payload=payload,
            reason=reason,
            approver_ids=approver_ids,
            created_at=self._clock(),
        )

        with self._tx.atomic():
            # Serializes submissions of the same employee so the guard sees a stable state.
            self._employees.lock(employee.employee_id)
            self._effect.before_submit(draft)
            request_id = self._store.insert(draft)

        request = draft.stored_as(request_id)
        logger.info("%s request %s submitted by %s (approvers=%d)", self._kind.value, request_id, employee.employee_id, len(approver_ids))
        fan_out(
            self._notifier,
            approver_ids,
            title=f"New {self._label()} request",
            message=f"{employee.name} submitted a {self._label()} request",
        )
        return request

    def approve(self, *, request_id: int, approver_id: str, note: str = "") -> Request[P]:
        return self._decide(request_id=request_id, actor_id=approver_id, status=RequestStatus.APPROVED, note=note)

    def reject(self, *, request_id: int, approver_id: str, note: str = "") -> Request[P]:
        return self._decide(request_id=request_id, actor_id=approver_id, status=RequestStatus.REJECTED, note=note)

    @retry_on_conflict
    def cancel(self, *, request_id: int, employee_id: str) -> Request[P]:
        with self._tx.atomic():
            req = self._load_for_update(request_id)
            if req.employee_id != str(employee_id):
                raise AuthorizationError("Only the submitting employee can cancel this request")
            if not req.is_pending:
                raise InvalidTransition(f"Request is already {req.status.value}")

            cancelled = req.with_decision(
                status=RequestStatus.CANCELLED,
                decided_by=str(employee_id),
                decided_at=self._clock(),
            )
            self._effect.on_cancelled(cancelled)
            self._write_status(cancelled)

        logger.info("%s request %s cancelled by %s", self._kind.value, request_id, employee_id)
        return cancelled

    @retry_on_conflict
    def _decide(self, *, request_id: int, actor_id: str, status: RequestStatus, note: str) -> Request[P]:
        with self._tx.atomic():
            req = self._load_for_update(request_id)
            if not req.is_approver(actor_id):
                raise AuthorizationError("You are not an approver of this request")
            if not req.is_pending:
                raise InvalidTransition(f"Request is already {req.status.value}")

            decided = req.with_decision(
                status=status,
                decided_by=str(actor_id),
                decided_at=self._clock(),
                note=optional_text(note),
            )
            if status == RequestStatus.APPROVED:
                self._effect.on_approved(decided)
            else:
                self._effect.on_rejected(decided)
            self._write_status(decided)

        logger.info("%s request %s %s by %s", self._kind.value, request_id, status.value.lower(), actor_id)
        fan_out(
            self._notifier,
            [decided.employee_id],
            title=f"{self._label().capitalize()} request {status.value.lower()}",
            message=decided.decision_note or f"Your {self._label()} request was {status.value.lower()}",
        )
        return decided

    def _load_for_update(self, request_id: int) -> Request[P]:
        req = self._store.get(int(request_id), for_update=True)
        if not req:
            raise NotFoundError("Request not found")
        return req

    def _write_status(self, req: Request[P]) -> None:
        ok = self._store.set_status(
            req.request_id,
            expected=RequestStatus.PENDING,
            status=req.status,
            decided_by=req.decided_by or "",
            decided_at=req.decided_at or self._clock(),
            note=req.decision_note,
        )
        if not ok:
            raise InvalidTransition("Request was decided concurrently")

    def get(self, request_id: int) -> Request[P]:
        req = self._store.get(int(request_id))
        if not req:
            raise NotFoundError("Request not found")
        return req

    def list_for_employee(self, employee_id: str, *, status: Optional[RequestStatus] = None) -> Sequence[Request[P]]:
        return self._store.list_for_employee(str(employee_id), status=status, limit=DEFAULT_LIST_LIMIT)

    def list_pending_for_approver(self, approver_id: str) -> Sequence[Request[P]]:
        return self._store.list_pending_for_approver(str(approver_id), limit=DEFAULT_LIST_LIMIT)
