"""Workforce Hub package.

This package is organized by feature modules (employees, attendance, leaves,
tasks, performance, dashboard) with a thin Flask controller layer over
service and repository layers. Every list page runs through ``datalist``.
"""
from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .database.connection import DBConfig
from .employees.controller import register as register_employees
from .leaves.controller import register as register_leaves
from .performance.controller import register as register_performance
from .tasks.controller import register as register_tasks

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parents[3]


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    logging.getLogger().setLevel(level)


def _bootstrap_database(settings, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=ROOT_DIR / "database" / "schema.sql")
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=ROOT_DIR / "database" / "seed.sql")
        ensure_demo_users(db_config)
        logger.info("Demo seed ready")


def _register_template_filters(app: Flask) -> None:
    @app.template_filter("label")
    def label(value):
        if value is None or value == "":
            return "-"
        return value.value if isinstance(value, Enum) else value

    @app.template_filter("hhmm")
    def hhmm(value):
        return value.strftime("%H:%M") if value else "-"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Pass ``container`` to run against prebuilt services (tests use in-memory
    repositories); otherwise MySQL repositories are wired from settings.
    """

    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates", static_folder="../../../static")

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("Starting with settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())
        _bootstrap_database(settings, db_config)
        container = build_container(
            db_config=db_config,
            work_start=getattr(settings, "WORK_START_TIME", "09:00"),
            work_end=getattr(settings, "WORK_END_TIME", "17:00"),
            grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", 15)),
            half_day_hours=float(getattr(settings, "HALF_DAY_HOURS", 4)),
        )
    else:
        logger.info("Starting with settings=%s and a provided container", settings_module)

    _register_template_filters(app)
    register_employees(app, container)
    register_dashboard(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_tasks(app, container)
    register_performance(app, container)

    return app
