from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal


class SettlementCalculator(ABC):
    """Calculator interface (Strategy Pattern for exit settlements)."""

    @abstractmethod
    def daily_rate(self, monthly_salary: Decimal) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def leave_encashment(self, remaining_days: Decimal, daily_rate: Decimal) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def notice_recovery(self, shortfall_days: int, daily_rate: Decimal) -> Decimal:
        raise NotImplementedError
