from __future__ import annotations

from typing import Optional

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_coordinate
from ..common.web import body, current_user_id, login_required, ok
from ..container import Container
from ..core.exceptions import ValidationError
from .model import AttendanceRecord, GeoPoint, HoursSummary


def _location(data: dict) -> Optional[GeoPoint]:
    """Geolocation is supplied by the client; both or neither coordinate."""
    loc = data.get("location") or {}
    if not isinstance(loc, dict):
        raise ValidationError("Location must be an object with lat and lng")
    if loc.get("lat") is None and loc.get("lng") is None:
        return None
    return GeoPoint(
        lat=require_coordinate(loc.get("lat"), "Latitude", limit=90),
        lng=require_coordinate(loc.get("lng"), "Longitude", limit=180),
    )


def _record_view(r: AttendanceRecord) -> dict:
    return {
        "attendance_id": r.attendance_id,
        "employee_id": r.employee_id,
        "date": r.work_date.isoformat(),
        "punch_in": r.punch_in.strftime("%H:%M:%S"),
        "punch_out": r.punch_out.strftime("%H:%M:%S") if r.punch_out else None,
        "punch_in_location": r.punch_in_location.as_dict() if r.punch_in_location else None,
        "punch_out_location": r.punch_out_location.as_dict() if r.punch_out_location else None,
        "hours_worked": round(r.hours_worked, 2) if r.hours_worked is not None else None,
        "status": r.status.value,
    }


def _summary_view(s: HoursSummary) -> dict:
    return {
        "days": [{"date": d.day.isoformat(), "hours": d.hours, "status": d.status.value} for d in s.days],
        "total_hours": s.total_hours,
        "days_worked": s.days_worked,
        "average_hours": s.average_hours,
    }


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service

    @app.route("/api/attendance/punch-in", methods=["POST"], endpoint="punch_in")
    @login_required
    def punch_in():
        rec = attendance.punch_in(current_user_id(), location=_location(body()))
        return ok(_record_view(rec), 201)

    @app.route("/api/attendance/punch-out", methods=["POST"], endpoint="punch_out")
    @login_required
    def punch_out():
        rec = attendance.punch_out(current_user_id(), location=_location(body()))
        return ok(_record_view(rec))

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today():
        rec = attendance.today(current_user_id())
        return ok(_record_view(rec) if rec else None)

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        limit = request.args.get("limit", 30, type=int)
        return ok([_record_view(r) for r in attendance.history(current_user_id(), limit=limit)])

    @app.route("/api/attendance/stats/weekly", methods=["GET"], endpoint="attendance_weekly")
    @login_required
    def attendance_weekly():
        return ok(_summary_view(attendance.weekly_stats(current_user_id())))

    @app.route("/api/attendance/stats/summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def attendance_summary():
        start = parse_iso_date(request.args.get("start", ""))
        end = parse_iso_date(request.args.get("end", ""))
        return ok(_summary_view(attendance.summary(current_user_id(), start=start, end=end)))
