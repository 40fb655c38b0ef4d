from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ClearanceItemStatus, ResignationStatus, SettlementStatus
from ..workflow.repository import RequestStore
from .model import Clearance, ResignationPayload, Settlement, SettlementAmounts


class ResignationRepository(RequestStore[ResignationPayload], Protocol):
    def has_active(self, employee_id: str) -> bool:
        """True if the employee has a resignation in pending / approved / in-clearance."""

        raise NotImplementedError

    def set_exit_status(self, request_id: int, *, expected: ResignationStatus, status: ResignationStatus) -> bool:
        raise NotImplementedError


class ClearanceRepository(Protocol):
    def create(self, *, resignation_id: int, employee_id: str, departments: Sequence[str], created_at: datetime) -> int:
        """One clearance per resignation, items in department order."""

        raise NotImplementedError

    def get(self, clearance_id: int, *, for_update: bool = False) -> Optional[Clearance]:
        raise NotImplementedError

    def get_latest_for_employee(self, employee_id: str) -> Optional[Clearance]:
        raise NotImplementedError

    def list_open(self, *, limit: int = 200) -> Sequence[Clearance]:
        raise NotImplementedError

    def set_item_status(
        self,
        item_id: int,
        *,
        status: ClearanceItemStatus,
        cleared_by: str,
        cleared_date: date,
        remarks: Optional[str],
    ) -> bool:
        """Decide a still-pending item; False if it was already decided."""

        raise NotImplementedError

    def mark_completed(self, clearance_id: int, *, completed_at: datetime) -> None:
        raise NotImplementedError


class SettlementRepository(Protocol):
    def create(
        self,
        *,
        employee_id: str,
        resignation_id: int,
        amounts: SettlementAmounts,
        remarks: Optional[str],
        created_at: datetime,
    ) -> int:
        """Raises InvalidTransition when the employee already has a settlement."""

        raise NotImplementedError

    def get(self, settlement_id: int, *, for_update: bool = False) -> Optional[Settlement]:
        raise NotImplementedError

    def get_for_employee(self, employee_id: str) -> Optional[Settlement]:
        raise NotImplementedError

    def list_by_status(self, *, status: Optional[SettlementStatus] = None, limit: int = 200) -> Sequence[Settlement]:
        raise NotImplementedError

    def set_status(
        self,
        settlement_id: int,
        *,
        expected: SettlementStatus,
        status: SettlementStatus,
        updated_at: datetime,
    ) -> bool:
        raise NotImplementedError
