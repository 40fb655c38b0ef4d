from __future__ import annotations

from typing import Generic, TypeVar

from .model import Request, RequestDraft

P = TypeVar("P")


class ApprovalEffect(Generic[P]):
    """Kind-specific hooks run inside the workflow's transaction.

    ``before_submit`` guards creation (raise to refuse); ``on_approved`` applies
    the side effect of an approval. A hook that raises rolls the whole
    transition back, so the request keeps its previous status.
    """

    def before_submit(self, draft: RequestDraft[P]) -> None:
        return None

    def on_approved(self, request: Request[P]) -> None:
        return None

    def on_rejected(self, request: Request[P]) -> None:
        return None

    def on_cancelled(self, request: Request[P]) -> None:
        return None


class NoEffect(ApprovalEffect):
    """Workflow without side effects."""
