from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import body, current_role, current_user_id, date_field, login_required, ok
from ..container import Container
from ..core.enums import RequestStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError


def _status_arg():
    value = request.args.get("status")
    if not value:
        return None
    try:
        return RequestStatus(value.upper())
    except ValueError:
        raise ValidationError(f"Unknown status: {value!r}")


def register(app: Flask, container: Container) -> None:
    leaves = container.leave_service

    @app.route("/api/leaves/types", methods=["GET"], endpoint="leave_types")
    @login_required
    def leave_types():
        employee = container.employee_service.get(current_user_id())
        allowed = container.employee_service.allowed_leave_types(employee)
        return ok([{"code": t.value, "name": t.label} for t in allowed])

    @app.route("/api/leaves/preview", methods=["GET"], endpoint="leave_preview")
    @login_required
    def leave_preview():
        result = leaves.preview(
            start_date=parse_iso_date(request.args.get("start", "")),
            end_date=parse_iso_date(request.args.get("end", "")),
        )
        return ok({"count": result.count, "excluded_dates": result.excluded_dates, "total_days": result.total_days})

    @app.route("/api/leaves", methods=["POST"], endpoint="leave_submit")
    @login_required
    def leave_submit():
        data = body()
        req = leaves.submit(
            employee_id=current_user_id(),
            leave_type=data.get("leave_type", ""),
            start_date=date_field(data, "start_date"),
            end_date=date_field(data, "end_date"),
            reason=data.get("reason", ""),
            half_day=bool(data.get("half_day", False)),
        )
        return ok(req, 201)

    @app.route("/api/leaves/mine", methods=["GET"], endpoint="leave_mine")
    @login_required
    def leave_mine():
        return ok(leaves.list_mine(employee_id=current_user_id(), status=_status_arg()))

    @app.route("/api/leaves/pending", methods=["GET"], endpoint="leave_pending")
    @login_required
    def leave_pending():
        return ok(leaves.list_pending_for(approver_id=current_user_id()))

    @app.route("/api/leaves/<int:request_id>", methods=["GET"], endpoint="leave_get")
    @login_required
    def leave_get(request_id: int):
        return ok(leaves.get(request_id))

    @app.route("/api/leaves/<int:request_id>/approve", methods=["POST"], endpoint="leave_approve")
    @login_required
    def leave_approve(request_id: int):
        return ok(leaves.approve(request_id=request_id, approver_id=current_user_id(), note=body().get("note", "")))

    @app.route("/api/leaves/<int:request_id>/reject", methods=["POST"], endpoint="leave_reject")
    @login_required
    def leave_reject(request_id: int):
        return ok(leaves.reject(request_id=request_id, approver_id=current_user_id(), note=body().get("note", "")))

    @app.route("/api/leaves/<int:request_id>/cancel", methods=["POST"], endpoint="leave_cancel")
    @login_required
    def leave_cancel(request_id: int):
        return ok(leaves.cancel(request_id=request_id, employee_id=current_user_id()))

    @app.route("/api/leaves/balance", methods=["GET"], endpoint="leave_balance")
    @login_required
    def leave_balance():
        employee_id = request.args.get("employee_id") or current_user_id()
        if employee_id != current_user_id() and current_role() != Role.HR:
            raise AuthorizationError("Only HR can view other balances")
        return ok(leaves.balance(employee_id=employee_id).as_dict())

    @app.route("/api/leaves/balance/grant", methods=["POST"], endpoint="leave_grant")
    @login_required
    def leave_grant():
        data = body()
        balance = leaves.grant(
            current_role=current_role(),
            employee_id=str(data.get("employee_id", "")),
            leave_type=data.get("leave_type", ""),
            days=data.get("days"),
        )
        return ok(balance.as_dict())

    @app.route("/api/leaves/balance", methods=["PUT"], endpoint="leave_set_balance")
    @login_required
    def leave_set_balance():
        data = body()
        balance = leaves.set_balance(
            current_role=current_role(),
            employee_id=str(data.get("employee_id", "")),
            leave_type=data.get("leave_type", ""),
            days=data.get("days"),
        )
        return ok(balance.as_dict())
