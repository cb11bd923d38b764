from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, request

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.responses import register_error_handlers, success
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .payroll.controller import register as register_payroll
from .payslip.controller import register as register_payslip

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Passing a prebuilt container skips database bootstrap and pool creation,
    which is how the tests run the HTTP layer over in-memory repositories.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["EXPOSE_ERROR_DETAIL"] = bool(getattr(settings, "EXPOSE_ERROR_DETAIL", False))

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            pool_size=int(getattr(settings, "DB_POOL_SIZE", 10)),
            pool_timeout=float(getattr(settings, "DB_POOL_TIMEOUT", 10)),
            company=getattr(settings, "PAYSLIP_COMPANY", None),
        )

    @app.before_request
    def log_request():
        logger.info("%s %s", request.method, request.path)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return success({"status": "ok"}, message="Service is running")

    register_error_handlers(app)
    register_attendance(app, container)
    register_payroll(app, container)
    register_payslip(app, container)

    return app
