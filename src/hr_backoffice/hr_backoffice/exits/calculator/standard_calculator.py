from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from .base import SettlementCalculator

_CENT = Decimal("0.01")


class StandardSettlementCalculator(SettlementCalculator):
    """Standard rule: 30-day month, amounts rounded half-up to the cent, never below 0."""

    DAYS_PER_MONTH = 30

    def daily_rate(self, monthly_salary: Decimal) -> Decimal:
        return (Decimal(monthly_salary) / self.DAYS_PER_MONTH).quantize(_CENT, rounding=ROUND_HALF_UP)

    def leave_encashment(self, remaining_days: Decimal, daily_rate: Decimal) -> Decimal:
        days = max(Decimal(remaining_days), Decimal("0"))
        return (days * Decimal(daily_rate)).quantize(_CENT, rounding=ROUND_HALF_UP)

    def notice_recovery(self, shortfall_days: int, daily_rate: Decimal) -> Decimal:
        days = max(int(shortfall_days), 0)
        return (days * Decimal(daily_rate)).quantize(_CENT, rounding=ROUND_HALF_UP)
