from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_admin, list_tables
from .database.connection import DBConfig
from .roster.controller import register as register_roster
from .sessions.controller import register as register_sessions
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def load_settings(settings_module: Optional[str] = None) -> dict:
    module = importlib.import_module(settings_module or get_settings_module())
    return {name: getattr(module, name) for name in dir(module) if name.isupper()}


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    settings = load_settings(settings_module)

    logging.basicConfig(
        level=str(settings.get("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = Flask(__name__)
    app.secret_key = settings["SECRET_KEY"]
    app.config["DEBUG"] = bool(settings.get("DEBUG", False))
    app.config["TESTING"] = bool(settings.get("TESTING", False))
    app.config["SCHOOL_TIMEZONE"] = settings.get("SCHOOL_TIMEZONE", "UTC")
    app.permanent_session_lifetime = timedelta(days=int(settings.get("SESSION_LIFETIME_DAYS", 7)))

    if container is None:
        db_config = settings["DB_CONFIG"]
        logger.info("settings=%s db=%s", settings_module or get_settings_module(), DBConfig.from_mapping(db_config).describe())

        if settings.get("AUTO_INIT_DB"):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if settings.get("AUTO_SEED_DB"):
            ensure_admin(
                db_config,
                email=settings.get("SEED_ADMIN_EMAIL", "admin@example.com"),
                password=settings.get("SEED_ADMIN_PASSWORD", "admin123"),
            )
            logger.info("demo admin ready")

        container = build_container(db_config=db_config, settings=settings)

    app.extensions["ce_attendance"] = container

    register_users(app, container)
    register_sessions(app, container)
    register_attendance(app, container)
    register_roster(app, container)

    return app
