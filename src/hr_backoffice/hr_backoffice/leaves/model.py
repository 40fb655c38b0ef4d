from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict

from ..core.enums import LeaveType
from ..workflow.model import Request


@dataclass(frozen=True)
class LeavePayload:
    """Leave-specific fields; ``duration`` is fixed when the request is created."""

    leave_type: LeaveType
    start_date: date
    end_date: date
    duration: Decimal
    is_paid: bool = True
    half_day: bool = False
    employee_name: str = ""
    employee_code: str = ""


LeaveRequest = Request[LeavePayload]


@dataclass(frozen=True)
class LeaveBalance:
    employee_id: str
    balances: Dict[LeaveType, Decimal] = field(default_factory=dict)

    def remaining(self, leave_type: LeaveType) -> Decimal:
        return self.balances.get(LeaveType(leave_type), Decimal("0"))

    def as_dict(self) -> dict:
        return {t.value: float(self.remaining(t)) for t in LeaveType}
