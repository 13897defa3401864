"""Close sessions left open past the configured cutoff.

Meant to run from cron shortly after AUTO_CLOCK_OUT_TIME.
"""
from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from attendance_tracker.config import get_settings_module
from attendance_tracker.container import AppSettings, build_container

logger = logging.getLogger("auto_clock_out")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(levelname)s %(name)s: %(message)s")

    app_settings = AppSettings.from_module(settings)
    container = build_container(db_config=dict(settings.DB_CONFIG), settings=app_settings)
    closed = container.clock_service.auto_clock_out(cutoff=app_settings.auto_clock_out_time)
    logger.info("Auto clock-out closed %d session(s)", len(closed))


if __name__ == "__main__":
    main()
