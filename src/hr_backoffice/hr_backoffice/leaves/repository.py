from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from ..core.enums import LeaveType
from ..workflow.repository import RequestStore
from .model import LeaveBalance, LeavePayload


class LeaveRepository(RequestStore[LeavePayload], Protocol):
    def pending_days(self, employee_id: str, leave_type: LeaveType) -> Decimal:
        """Sum of durations of the employee's PENDING requests of this type."""

        raise NotImplementedError


class LeaveBalanceRepository(Protocol):
    def get(self, employee_id: str) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def debit(self, employee_id: str, leave_type: LeaveType, days: Decimal) -> bool:
        """Subtract ``days`` only if the remaining balance covers it; False otherwise."""

        raise NotImplementedError

    def credit(self, employee_id: str, leave_type: LeaveType, days: Decimal) -> None:
        raise NotImplementedError

    def set(self, employee_id: str, leave_type: LeaveType, days: Decimal) -> None:
        raise NotImplementedError
