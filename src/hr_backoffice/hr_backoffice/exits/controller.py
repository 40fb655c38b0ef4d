from __future__ import annotations

from flask import Flask, request

from ..common.validators import require_bool, require_id
from ..common.web import body, current_role, current_user_id, date_field, login_required, ok
from ..container import Container
from .model import Clearance, Resignation, Settlement, exit_status_of


def _resignation_view(r: Resignation) -> dict:
    p = r.payload
    return {
        "request_id": r.request_id,
        "employee_id": r.employee_id,
        "employee_name": p.employee_name,
        "resignation_type": p.resignation_type,
        "submission_date": p.submission_date,
        "last_working_date": p.last_working_date,
        "notice_period": p.notice_period,
        "reason": r.reason,
        "remarks": p.remarks,
        "department": p.department,
        "designation": p.designation,
        "status": exit_status_of(r),
        "decided_by": r.decided_by,
        "decision_note": r.decision_note,
    }


def _clearance_view(c: Clearance) -> dict:
    return {
        "clearance_id": c.clearance_id,
        "resignation_id": c.resignation_id,
        "employee_id": c.employee_id,
        "overall_status": c.overall_status,
        "progress": round(c.progress * 100),
        "items": c.items,
        "completed_at": c.completed_at,
    }


def _settlement_view(s: Settlement) -> dict:
    a = s.amounts
    return {
        "settlement_id": s.settlement_id,
        "employee_id": s.employee_id,
        "amounts": a,
        "total_payable": a.total_payable,
        "total_deductions": a.total_deductions,
        "net_settlement": a.net,
        "status": s.status,
        "remarks": s.remarks,
    }


def register(app: Flask, container: Container) -> None:
    exits = container.exit_pipeline

    # -------- resignations --------
    @app.route("/api/exits/resignations", methods=["POST"], endpoint="resignation_submit")
    @login_required
    def resignation_submit():
        data = body()
        r = exits.submit_resignation(
            employee_id=current_user_id(),
            resignation_type=data.get("resignation_type", ""),
            last_working_date=date_field(data, "last_working_date"),
            notice_period=data.get("notice_period", ""),
            reason=data.get("reason", ""),
            remarks=data.get("remarks", ""),
        )
        return ok(_resignation_view(r), 201)

    @app.route("/api/exits/resignations/mine", methods=["GET"], endpoint="resignation_mine")
    @login_required
    def resignation_mine():
        return ok([_resignation_view(r) for r in exits.my_resignations(employee_id=current_user_id())])

    @app.route("/api/exits/resignations/pending", methods=["GET"], endpoint="resignation_pending")
    @login_required
    def resignation_pending():
        return ok([_resignation_view(r) for r in exits.pending_resignations_for(approver_id=current_user_id())])

    @app.route("/api/exits/resignations/<int:request_id>/approve", methods=["POST"], endpoint="resignation_approve")
    @login_required
    def resignation_approve(request_id: int):
        r = exits.approve_resignation(request_id=request_id, approver_id=current_user_id(), note=body().get("note", ""))
        return ok(_resignation_view(r))

    @app.route("/api/exits/resignations/<int:request_id>/reject", methods=["POST"], endpoint="resignation_reject")
    @login_required
    def resignation_reject(request_id: int):
        r = exits.reject_resignation(request_id=request_id, approver_id=current_user_id(), note=body().get("note", ""))
        return ok(_resignation_view(r))

    @app.route("/api/exits/resignations/<int:request_id>/cancel", methods=["POST"], endpoint="resignation_cancel")
    @login_required
    def resignation_cancel(request_id: int):
        return ok(_resignation_view(exits.cancel_resignation(request_id=request_id, employee_id=current_user_id())))

    # -------- clearance --------
    @app.route("/api/exits/clearances", methods=["POST"], endpoint="clearance_start")
    @login_required
    def clearance_start():
        c = exits.initiate_clearance(
            current_role=current_role(),
            resignation_id=require_id(body().get("resignation_id"), "Resignation id"),
        )
        return ok(_clearance_view(c), 201)

    @app.route("/api/exits/clearances/open", methods=["GET"], endpoint="clearance_open")
    @login_required
    def clearance_open():
        return ok([_clearance_view(c) for c in exits.open_clearances()])

    @app.route("/api/exits/clearances/mine", methods=["GET"], endpoint="clearance_mine")
    @login_required
    def clearance_mine():
        c = exits.clearance_for(employee_id=current_user_id())
        return ok(_clearance_view(c) if c else None)

    @app.route("/api/exits/clearances/<int:clearance_id>", methods=["GET"], endpoint="clearance_get")
    @login_required
    def clearance_get(clearance_id: int):
        return ok(_clearance_view(exits.get_clearance(clearance_id)))

    @app.route(
        "/api/exits/clearances/<int:clearance_id>/items/<int:item_id>",
        methods=["POST"],
        endpoint="clearance_item_decide",
    )
    @login_required
    def clearance_item_decide(clearance_id: int, item_id: int):
        data = body()
        c = exits.decide_clearance_item(
            current_role=current_role(),
            clearance_id=clearance_id,
            item_id=item_id,
            approved=require_bool(data.get("approved"), "Approved"),
            cleared_by=current_user_id(),
            remarks=data.get("remarks", ""),
        )
        return ok(_clearance_view(c))

    # -------- settlement --------
    @app.route("/api/exits/settlements/quote", methods=["GET"], endpoint="settlement_quote")
    @login_required
    def settlement_quote():
        amounts = exits.quote_settlement(
            current_role=current_role(),
            employee_id=request.args.get("employee_id", ""),
            monthly_salary=request.args.get("monthly_salary", "0"),
        )
        return ok(amounts)

    @app.route("/api/exits/settlements", methods=["POST"], endpoint="settlement_create")
    @login_required
    def settlement_create():
        data = body()
        s = exits.create_settlement(
            current_role=current_role(),
            employee_id=str(data.get("employee_id", "")),
            amounts=data.get("amounts") or {},
            remarks=data.get("remarks", ""),
        )
        return ok(_settlement_view(s), 201)

    @app.route("/api/exits/settlements", methods=["GET"], endpoint="settlement_list")
    @login_required
    def settlement_list():
        return ok([_settlement_view(s) for s in exits.settlements(current_role=current_role(), status=request.args.get("status"))])

    @app.route("/api/exits/settlements/mine", methods=["GET"], endpoint="settlement_mine")
    @login_required
    def settlement_mine():
        s = exits.settlement_for(employee_id=current_user_id())
        return ok(_settlement_view(s) if s else None)

    @app.route("/api/exits/settlements/<int:settlement_id>/status", methods=["POST"], endpoint="settlement_advance")
    @login_required
    def settlement_advance(settlement_id: int):
        s = exits.advance_settlement(
            current_role=current_role(),
            settlement_id=settlement_id,
            status=body().get("status", ""),
        )
        return ok(_settlement_view(s))
