from __future__ import annotations

from typing import Protocol

from ..workflow.repository import RequestStore
from .model import AttendanceEditPayload


class AttendanceEditRepository(RequestStore[AttendanceEditPayload], Protocol):
    def has_pending_for_attendance(self, attendance_id: int) -> bool:
        raise NotImplementedError
