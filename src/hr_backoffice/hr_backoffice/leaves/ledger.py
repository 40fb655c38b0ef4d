from __future__ import annotations

import logging
from decimal import Decimal
from typing import Collection

from ..core.constants import DEFAULT_UNACCOUNTED_LEAVE_TYPES
from ..core.enums import LeaveType, LedgerDirection
from ..core.exceptions import InsufficientBalance, ValidationError
from .model import LeaveBalance
from .repository import LeaveBalanceRepository, LeaveRepository

logger = logging.getLogger(__name__)


class LeaveLedger:
    """Per-employee, per-leave-type balances.

    Unpaid/unaccounted types are never tracked. A paid balance is only moved by
    ``apply``; a debit that would go below zero is refused.
    """

    def __init__(
        self,
        balances: LeaveBalanceRepository,
        leaves: LeaveRepository,
        *,
        unaccounted_types: Collection[LeaveType] = DEFAULT_UNACCOUNTED_LEAVE_TYPES,
    ):
        self._balances = balances
        self._leaves = leaves
        self._unaccounted = frozenset(LeaveType(t) for t in unaccounted_types)

    def is_accounted(self, leave_type: LeaveType) -> bool:
        return LeaveType(leave_type) not in self._unaccounted

    def balance(self, employee_id: str) -> LeaveBalance:
        # No document means zero for every paid type.
        return self._balances.get(str(employee_id)) or LeaveBalance(employee_id=str(employee_id))

    def available(self, employee_id: str, leave_type: LeaveType) -> Decimal:
        """Stored balance minus days held by the employee's pending requests."""
        stored = self.balance(employee_id).remaining(leave_type)
        held = self._leaves.pending_days(str(employee_id), LeaveType(leave_type))
        return stored - held

    def check_sufficient(self, employee_id: str, leave_type: LeaveType, requested_days: Decimal) -> bool:
        if not self.is_accounted(leave_type):
            return True
        return Decimal(requested_days) <= self.available(employee_id, leave_type)

    def require_sufficient(self, employee_id: str, leave_type: LeaveType, requested_days: Decimal) -> None:
        if not self.check_sufficient(employee_id, leave_type, requested_days):
            raise InsufficientBalance(
                LeaveType(leave_type).value,
                requested=Decimal(requested_days),
                available=max(self.available(employee_id, leave_type), Decimal("0")),
            )

    def apply(self, employee_id: str, leave_type: LeaveType, days: Decimal, direction: LedgerDirection) -> None:
        leave_type = LeaveType(leave_type)
        days = Decimal(days)
        if days < 0:
            raise ValidationError("Days must not be negative")
        if not self.is_accounted(leave_type) or days == 0:
            return

        if direction == LedgerDirection.DEBIT:
            if not self._balances.debit(str(employee_id), leave_type, days):
                raise InsufficientBalance(
                    leave_type.value,
                    requested=days,
                    available=self.balance(employee_id).remaining(leave_type),
                )
        else:
            self._balances.credit(str(employee_id), leave_type, days)

        logger.info("leave ledger %s %s %s for %s", direction.value, days, leave_type.value, employee_id)

    def set_balance(self, employee_id: str, leave_type: LeaveType, days: Decimal) -> None:
        leave_type = LeaveType(leave_type)
        if not self.is_accounted(leave_type):
            raise ValidationError(f"{leave_type.value} is not tracked in the ledger")
        if Decimal(days) < 0:
            raise ValidationError("Balance must not be negative")
        self._balances.set(str(employee_id), leave_type, Decimal(days))
