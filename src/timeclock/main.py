from __future__ import annotations

import importlib
from typing import Optional

import structlog
from dotenv import load_dotenv
from flask import Flask

from .admin.controller import register as register_admin
from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers, register_health_check
from .common.logging import setup_logging
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .users.controller import register as register_users

logger = structlog.get_logger(__name__)


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    db_config = getattr(settings, "DB_CONFIG")

    if container is None:
        logger.info(
            "app_starting",
            settings=settings_module,
            db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        )
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config)
            logger.info("schema_ready", tables=len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            ensure_demo_users(db_config)
            logger.info("demo_seed_ready")

        container = build_container(
            db_config=db_config,
            history_limit=int(getattr(settings, "HISTORY_LIMIT", 30)),
        )

    app.extensions["timeclock"] = container

    register_error_handlers(app)
    register_health_check(app)
    register_users(app, container)
    register_attendance(app, container)
    register_admin(app, container)

    return app
