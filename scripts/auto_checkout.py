"""Run one auto-checkout sweep and exit.

For deployments that schedule the sweep with cron instead of the in-process
scheduler (set AUTO_CHECKOUT_ENABLED=0 for the web app in that case).
"""

from __future__ import annotations

import importlib
import logging
import sys

from dotenv import load_dotenv

from hr_attendance.common.logging_config import configure_logging
from hr_attendance.config import get_settings_module
from hr_attendance.container import build_container

logger = logging.getLogger("hr_attendance.scripts.auto_checkout")


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    report = container.auto_checkout()
    logger.info("Closed %d record(s), %d failed", len(report.checked_out), len(report.failed))
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
