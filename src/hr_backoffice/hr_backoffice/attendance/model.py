from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import hours_between
from ..core.enums import DayStatus


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    def as_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance day of an employee."""

    attendance_id: int
    employee_id: str
    work_date: date
    punch_in: datetime
    punch_in_location: Optional[GeoPoint] = None
    punch_out: Optional[datetime] = None
    punch_out_location: Optional[GeoPoint] = None
    employee_name: str = ""
    employee_code: str = ""

    @property
    def hours_worked(self) -> Optional[float]:
        if self.punch_out is None:
            return None
        return hours_between(self.punch_in, self.punch_out)

    @property
    def status(self) -> DayStatus:
        return DayStatus.PRESENT if self.punch_out is not None else DayStatus.INCOMPLETE


@dataclass(frozen=True)
class DailyHours:
    day: date
    hours: float
    status: DayStatus


@dataclass(frozen=True)
class HoursSummary:
    """Read-model for dashboards: per-day hours plus totals over the window."""

    days: tuple[DailyHours, ...]
    total_hours: float
    days_worked: int

    @property
    def average_hours(self) -> float:
        return round(self.total_hours / self.days_worked, 1) if self.days_worked else 0.0

    @property
    def hours(self) -> list[float]:
        return [d.hours for d in self.days]
