from __future__ import annotations

import importlib
import logging
from types import ModuleType
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .config import get_settings_module
from .container import Container, build_container, build_memory_container
from .core.logging import configure_logging
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .offices.controller import register as register_offices
from .reports.controller import register as register_reports

logger = logging.getLogger(__name__)


def _build_default_container(settings: ModuleType) -> Container:
    backend = str(getattr(settings, "STORAGE_BACKEND", "mysql")).lower()
    if backend == "memory":
        return build_memory_container()

    db_config = getattr(settings, "DB_CONFIG")
    logger.info(
        "Database %s@%s:%s/%s",
        db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
    )
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config)
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config)
        logger.info("Demo offices ready")
    return build_container(db_config=db_config)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    for key in ("NOTES_MAX_LENGTH", "HISTORY_PAGE_SIZE", "REPORT_PAGE_SIZE"):
        if hasattr(settings, key):
            app.config[key] = int(getattr(settings, key))

    logger.info("Starting office-attendance with settings=%s", settings_module)
    container = container or _build_default_container(settings)

    register_offices(app, container)
    register_attendance(app, container)
    register_reports(app, container)

    return app
