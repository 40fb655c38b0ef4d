from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def require_amount(value, field_name: str) -> Decimal:
    """Non-negative money amount with at most two decimals."""
    if value is None or value == "":
        return Decimal("0.00")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field_name} is not a valid amount")
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field_name} must be a non-negative amount")
    if amount != amount.quantize(Decimal("0.01")):
        raise ValidationError(f"{field_name} has more than two decimals")
    return amount.quantize(Decimal("0.01"))


def require_days(value, field_name: str, *, allow_zero: bool = False) -> Decimal:
    """Positive day count in half-day steps."""
    try:
        days = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field_name} is not a valid number of days")
    if not days.is_finite() or days < 0 or (days == 0 and not allow_zero) or (days * 2) != (days * 2).to_integral_value():
        raise ValidationError(f"{field_name} must be a positive multiple of 0.5")
    return days


def require_coordinate(value, field_name: str, *, limit: float) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a number")
    if not -limit <= v <= limit:
        raise ValidationError(f"{field_name} out of range")
    return v


def require_id(value, field_name: str) -> int:
    """Positive integer id from a JSON body or query string."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a positive integer")
    try:
        v = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a positive integer")
    if v <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")
    return v


_TRUE = frozenset({"true", "1", "yes"})
_FALSE = frozenset({"false", "0", "no"})


def require_bool(value, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower() if value is not None else ""
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValidationError(f"{field_name} must be true or false")
