from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    holiday_date: date
    name: str
    created_at: datetime
    description: Optional[str] = None
