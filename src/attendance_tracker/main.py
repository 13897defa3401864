from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .common.http import error_response
from .config import get_settings_module
from .container import AppSettings, Container, build_container
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, list_tables
from .holidays.controller import register as register_holidays
from .sessions.controller import register as register_attendance

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Flask factory; pass a prebuilt ``container`` to skip MySQL wiring."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

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
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(db_config=db_config, settings=AppSettings.from_module(settings))

    app.register_error_handler(DomainError, error_response)

    register_attendance(app, container)
    register_holidays(app, container)

    return app
