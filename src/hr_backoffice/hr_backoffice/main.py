from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.web import register_error_handlers
from .container import build_container
from .database.bootstrap import apply_schema, list_tables
from .database.mysql_base import configure_retries
from .attendance.controller import register as register_attendance
from .exits.controller import register as register_exits
from .holidays.controller import register as register_holidays
from .leaves.controller import register as register_leaves
from .requests.controller import register as register_attendance_edits

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    configure_retries(int(getattr(settings, "STORE_RETRY_ATTEMPTS", 3)))

    container = build_container(
        db_config=db_config,
        weekly_off=int(getattr(settings, "WEEKLY_OFF_DAY", 6)),
        approver_roles=getattr(settings, "APPROVER_ROLES", ("hr", "hod")),
        unaccounted_leave_types=getattr(settings, "UNACCOUNTED_LEAVE_TYPES", ("LWP", "VACATION")),
        clearance_departments=getattr(settings, "CLEARANCE_DEPARTMENTS", ("Reporting Manager", "IT", "Finance", "Admin", "HR")),
    )

    register_error_handlers(app)
    register_holidays(app, container)
    register_leaves(app, container)
    register_attendance(app, container)
    register_attendance_edits(app, container)
    register_exits(app, container)

    return app
