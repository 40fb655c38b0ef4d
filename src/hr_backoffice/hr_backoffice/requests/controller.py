from __future__ import annotations

from flask import Flask

from ..common.validators import require_id
from ..common.web import body, current_user_id, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    edits = container.attendance_edit_service

    @app.route("/api/attendance-edits", methods=["POST"], endpoint="attendance_edit_submit")
    @login_required
    def attendance_edit_submit():
        data = body()
        req = edits.submit(
            employee_id=current_user_id(),
            attendance_id=require_id(data.get("attendance_id"), "Attendance id"),
            requested_punch_out=data.get("requested_punch_out", ""),
            reason=data.get("reason", ""),
        )
        return ok(req, 201)

    @app.route("/api/attendance-edits/mine", methods=["GET"], endpoint="attendance_edit_mine")
    @login_required
    def attendance_edit_mine():
        return ok(edits.list_mine(employee_id=current_user_id()))

    @app.route("/api/attendance-edits/pending", methods=["GET"], endpoint="attendance_edit_pending")
    @login_required
    def attendance_edit_pending():
        return ok(edits.list_pending_for(approver_id=current_user_id()))

    @app.route("/api/attendance-edits/<int:request_id>/approve", methods=["POST"], endpoint="attendance_edit_approve")
    @login_required
    def attendance_edit_approve(request_id: int):
        return ok(edits.approve(request_id=request_id, approver_id=current_user_id(), note=body().get("note", "")))

    @app.route("/api/attendance-edits/<int:request_id>/reject", methods=["POST"], endpoint="attendance_edit_reject")
    @login_required
    def attendance_edit_reject(request_id: int):
        return ok(edits.reject(request_id=request_id, approver_id=current_user_id(), note=body().get("note", "")))

    @app.route("/api/attendance-edits/<int:request_id>/cancel", methods=["POST"], endpoint="attendance_edit_cancel")
    @login_required
    def attendance_edit_cancel(request_id: int):
        return ok(edits.cancel(request_id=request_id, employee_id=current_user_id()))
