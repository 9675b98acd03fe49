from __future__ import annotations

import importlib
from datetime import date
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .common.datetime_utils import month_options
from .common.logging_setup import configure_logging, get_logger
from .common.web import login_required, register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_INVOICE_DUE_DAYS
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_teacher, list_tables
from .invoicing.controller import register as register_invoicing
from .payments.controller import register as register_payments
from .profiles.controller import register as register_profiles
from .students.controller import register as register_students

_logger = get_logger(__name__)

_DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Passing ``container`` skips the store bootstrap entirely (tests wire
    in-memory repositories this way).
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        _logger.info(
            "starting",
            extra={
                "settings": settings_module,
                "db": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
            },
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=_DATABASE_DIR / "schema.sql")
            _logger.info("schema ready", extra={"tables": len(list_tables(db_config))})
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            # The seed rows reference the demo teacher, so the profile comes first.
            ensure_demo_teacher(db_config)
            apply_seed_sql(db_config, seed_path=_DATABASE_DIR / "seed.sql")
            _logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            invoice_due_days=int(getattr(settings, "INVOICE_DUE_DAYS", DEFAULT_INVOICE_DUE_DAYS)),
        )

    register_error_handlers(app)
    register_profiles(app, container)
    register_classes(app, container)
    register_students(app, container)
    register_attendance(app, container)
    register_invoicing(app, container)
    register_payments(app, container)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/api/months", methods=["GET"], endpoint="months")
    @login_required
    def months():
        return jsonify(month_options(date.today()))

    return app
