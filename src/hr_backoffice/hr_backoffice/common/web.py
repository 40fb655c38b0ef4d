from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    ActiveResignationExists,
    AlreadyPunchedOut,
    AuthorizationError,
    DomainError,
    DuplicatePunchIn,
    InsufficientBalance,
    InvalidTransition,
    NoApproversAvailable,
    NoPunchInFound,
    NotFoundError,
    StoreConflict,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

# Most specific class first.
ERROR_STATUS = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InsufficientBalance, 409),
    (DuplicatePunchIn, 409),
    (NoPunchInFound, 409),
    (AlreadyPunchedOut, 409),
    (NoApproversAvailable, 409),
    (ActiveResignationExists, 409),
    (InvalidTransition, 409),
)


def status_for(error: DomainError) -> int:
    for cls, status in ERROR_STATUS:
        if isinstance(error, cls):
            return status
    return 400


def to_jsonable(value: Any) -> Any:
    """Dataclasses, enums, decimals and dates to plain JSON values."""
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k.value if isinstance(k, Enum) else k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


def ok(payload: Any, status: int = 200):
    return jsonify(to_jsonable(payload)), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify({"error": e.code, "message": str(e)}), status_for(e)

    @app.errorhandler(StoreConflict)
    def handle_store_conflict(e: StoreConflict):
        logger.warning("store conflict after retries: %s", e)
        return jsonify({"error": "store_conflict", "message": "Please retry"}), 503

    @app.errorhandler(500)
    def handle_internal_error(e):
        # Flask has already logged the original exception.
        return jsonify({"error": "internal_error", "message": "Unexpected server error"}), 500


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "unauthenticated", "message": "Please log in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> str:
    return str(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role", ""))
    except ValueError:
        raise AuthorizationError("Unknown role")


def body() -> dict:
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def date_field(data: dict, name: str) -> date:
    return parse_iso_date(str(data.get(name) or ""))
