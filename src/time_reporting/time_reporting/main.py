from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .combined.controller import register as register_combined
from .common.http import unexpected_error_response
from .container import Container, build_container
from .core.constants import DEFAULT_ISOLATION_LEVEL, MAX_DOCUMENT_BYTES
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .time_logs.controller import register as register_time_logs

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    max_document_bytes = int(getattr(settings, "MAX_DOCUMENT_BYTES", MAX_DOCUMENT_BYTES))
    # Leave headroom for multipart framing; the service enforces the exact limit.
    app.config["MAX_CONTENT_LENGTH"] = max_document_bytes + 1024 * 1024

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            isolation_level=getattr(settings, "DB_ISOLATION_LEVEL", DEFAULT_ISOLATION_LEVEL),
            max_document_bytes=max_document_bytes,
        )

    app.extensions["time_reporting"] = container
    app.register_error_handler(Exception, unexpected_error_response)

    register_attendance(app, container)
    register_time_logs(app, container)
    register_combined(app, container)

    return app
