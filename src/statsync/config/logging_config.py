"""Logging setup for the stats backend."""

import logging
import sys
from typing import Optional

from statsync.config.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Per-request loggers of the HTTP client stack
QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Send log records to stdout.

    The root handler and the `statsync` package logger both follow
    `log_level`; the HTTP client stack stays at WARNING so retries are
    only visible through our own debug records.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("statsync").setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
