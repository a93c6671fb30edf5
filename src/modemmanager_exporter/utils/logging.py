from __future__ import annotations

import logging
import os

import coloredlogs  # type: ignore[import]

LOG_LEVEL_ENV_VAR = "MM_EXPORTER_LOG_LEVEL"

# Scrapes run on HTTP worker threads and the D-Bus loop thread.
LOG_FORMAT = "%(asctime)s [%(threadName)s] %(name)s %(levelname)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Chatty at DEBUG; only their warnings are interesting here.
QUIET_LOGGERS = ("dbus_next", "asyncio")


def setup_logging(level: str | None = None) -> None:
    """Install coloured logging for the exporter.

    ``level`` wins over ``MM_EXPORTER_LOG_LEVEL``, which wins over ``INFO``.
    """
    resolved = (level or os.environ.get(LOG_LEVEL_ENV_VAR) or "INFO").upper()

    coloredlogs.install(level=resolved, fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
