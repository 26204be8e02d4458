from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from .attendance.auto_checkout import AutoCheckoutScheduler
from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .common.logging_config import configure_logging
from .config import get_settings_module
from .container import build_container
from .core.constants import AUTO_CHECKOUT_HOURS, AUTO_CHECKOUT_INTERVAL_SECONDS
from .database.bootstrap import apply_schema
from .leaves.controller import register as register_leaves
from .shifts.controller import register as register_shifts

logger = logging.getLogger(__name__)


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
    app.config["AUTO_CHECKOUT_HOURS"] = float(getattr(settings, "AUTO_CHECKOUT_HOURS", AUTO_CHECKOUT_HOURS))

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    container = build_container(db_config=db_config, settings=settings)

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        statements = apply_schema(container.conn)
        logger.info("Schema ready (%d statements applied)", statements)

    register_error_handlers(app)
    register_attendance(app, container)
    register_leaves(app, container)
    register_shifts(app, container)

    if bool(getattr(settings, "AUTO_CHECKOUT_ENABLED", False)) and not app.config["TESTING"]:
        scheduler = AutoCheckoutScheduler(
            container.auto_checkout,
            interval_seconds=getattr(settings, "AUTO_CHECKOUT_INTERVAL_SECONDS", AUTO_CHECKOUT_INTERVAL_SECONDS),
        )
        scheduler.start()
        app.extensions["auto_checkout_scheduler"] = scheduler

    return app
