from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import body, current_role, date_field, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    calendar = container.holiday_calendar

    @app.route("/api/holidays", methods=["GET"], endpoint="holidays_list")
    @login_required
    def holidays_list():
        return ok(calendar.list_year(request.args.get("year", type=int)))

    @app.route("/api/holidays/upcoming", methods=["GET"], endpoint="holidays_upcoming")
    @login_required
    def holidays_upcoming():
        return ok(calendar.upcoming(limit=request.args.get("limit", 10, type=int)))

    @app.route("/api/holidays", methods=["POST"], endpoint="holidays_add")
    @login_required
    def holidays_add():
        data = body()
        holiday = calendar.add_holiday(
            current_role=current_role(),
            holiday_date=date_field(data, "date"),
            name=data.get("name", ""),
            description=data.get("description", ""),
        )
        return ok(holiday, 201)

    @app.route("/api/holidays/working-days", methods=["GET"], endpoint="holidays_working_days")
    @login_required
    def holidays_working_days():
        start = parse_iso_date(request.args.get("start", ""))
        end = parse_iso_date(request.args.get("end", ""))
        result = calendar.working_days(start, end)
        return ok(
            {
                "start": start,
                "end": end,
                "total_days": result.total_days,
                "excluded_days": result.excluded_days,
                "count": result.count,
                "excluded_dates": result.excluded_dates,
            }
        )
