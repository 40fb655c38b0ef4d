from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..workflow.model import Request


@dataclass(frozen=True)
class AttendanceEditPayload:
    """Requested punch-out for a record left without one."""

    attendance_id: int
    work_date: date
    current_punch_in: datetime
    requested_punch_out: datetime
    current_punch_out: Optional[datetime] = None


AttendanceEditRequest = Request[AttendanceEditPayload]
