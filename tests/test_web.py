from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest
from flask import Flask

from src.hr_backoffice.hr_backoffice.common.web import (
    login_required,
    ok,
    register_error_handlers,
    status_for,
    to_jsonable,
)
from src.hr_backoffice.hr_backoffice.core.enums import LeaveType, RequestStatus
from src.hr_backoffice.hr_backoffice.core.exceptions import (
    ActiveResignationExists,
    AuthorizationError,
    DomainError,
    DuplicatePunchIn,
    InsufficientBalance,
    InvalidRange,
    InvalidTransition,
    NotFoundError,
    StoreConflict,
    ValidationError,
)
from src.hr_backoffice.hr_backoffice.leaves.model import LeaveBalance


@pytest.mark.parametrize(
    "error, status",
    [
        (ValidationError("bad"), 400),
        (InvalidRange("reversed"), 400),
        (AuthorizationError("no"), 403),
        (NotFoundError("gone"), 404),
        (InsufficientBalance("PL", 3, 1), 409),
        (DuplicatePunchIn("again"), 409),
        (ActiveResignationExists("again"), 409),
        (InvalidTransition("late"), 409),
        (DomainError("other"), 400),
    ],
)
def test_status_for(error, status):
    assert status_for(error) == status


def test_to_jsonable():
    balance = LeaveBalance(employee_id="emp-1", balances={LeaveType.PL: Decimal("4.5")})

    assert to_jsonable(balance) == {"employee_id": "emp-1", "balances": {"PL": "4.5"}}
    assert to_jsonable(
        {"when": datetime(2024, 3, 1, 9, 30), "day": date(2024, 3, 1), "status": RequestStatus.PENDING, "ids": ("a",)}
    ) == {"when": "2024-03-01T09:30:00", "day": "2024-03-01", "status": "PENDING", "ids": ["a"]}


@pytest.fixture
def client():
    app = Flask(__name__)
    app.config.update(TESTING=True, SECRET_KEY="test")
    register_error_handlers(app)

    @app.route("/boom/<kind>")
    def boom(kind):
        if kind == "balance":
            raise InsufficientBalance("PL", 5, 2)
        if kind == "conflict":
            raise StoreConflict("deadlock")
        raise NotFoundError("Leave request not found")

    @app.route("/private")
    @login_required
    def private():
        return ok({"amount": Decimal("1.50")})

    return app.test_client()


def test_domain_errors_become_json(client):
    resp = client.get("/boom/balance")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "insufficient_balance"
    assert "Requested: 5" in resp.get_json()["message"]

    resp = client.get("/boom/missing")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "not_found", "message": "Leave request not found"}


def test_store_conflict_is_retryable(client):
    resp = client.get("/boom/conflict")
    assert resp.status_code == 503
    assert resp.get_json()["error"] == "store_conflict"


def test_login_required(client):
    assert client.get("/private").status_code == 401

    with client.session_transaction() as sess:
        sess["user_id"] = "emp-1"
        sess["role"] = "staff"

    resp = client.get("/private")
    assert resp.status_code == 200
    assert resp.get_json() == {"amount": "1.50"}
