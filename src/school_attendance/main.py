from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .announcements.controller import register as register_announcements
from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers, register_session_refresh
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .reports.controller import register as register_reports
from .users.controller import register as register_users
from .users.seed import ensure_demo_users

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        container = build_container(settings)

        if container.conn is not None:
            db = container.conn.config
            logger.info("settings=%s db=%s@%s:%s/%s", settings_module, db.user, db.host, db.port, db.database)
            if getattr(settings, "AUTO_INIT_DB", False):
                apply_schema(container.conn)
                logger.info("Schema ready (tables=%s)", len(list_tables(container.conn)))

        if getattr(settings, "AUTO_SEED_DB", False):
            ensure_demo_users(container.user_service)

    app.extensions["school_attendance"] = container

    register_error_handlers(app)
    register_session_refresh(app, container.user_service)
    register_users(app, container)
    register_attendance(app, container)
    register_announcements(app, container)
    register_reports(app, container)

    return app
