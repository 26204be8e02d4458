from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from hr_attendance.common.logging_config import configure_logging
from hr_attendance.config import get_settings_module
from hr_attendance.database.bootstrap import apply_schema
from hr_attendance.database.connection import DBConfig, DatabaseConnection

logger = logging.getLogger("hr_attendance.scripts.init_db")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    config = DBConfig.from_dict(dict(settings.DB_CONFIG))
    count = apply_schema(DatabaseConnection.get_instance(config))
    logger.info(
        "OK: applied schema.sql -> %s@%s:%s/%s (%d statements)",
        config.user,
        config.host,
        config.port,
        config.database,
        count,
    )


if __name__ == "__main__":
    main()
