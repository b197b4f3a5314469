"""
utils/logger.py
---------------
Centralized logging configuration.
All modules should use `get_logger(__name__)` to obtain a logger instance.

Timestamps are written in the reference timezone so that log lines and
invoice dates read on the same calendar.
"""

import logging
import sys
from datetime import datetime

from dateutil import tz

from config import LOG_LEVEL, REFERENCE_TIMEZONE

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S%z"
# Third-party loggers that log every request at INFO.
_QUIET_LOGGERS = ("httpx", "httpcore", "telegram.ext")
_configured = False


class ReferenceTimeFormatter(logging.Formatter):
    """Formats ``asctime`` in a fixed timezone instead of server-local time."""

    def __init__(self, fmt: str, datefmt: str, zone: str = REFERENCE_TIMEZONE):
        super().__init__(fmt, datefmt)
        self.zone = tz.gettz(zone) or tz.UTC

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=self.zone)
        return stamp.strftime(datefmt or self.datefmt or _DATE_FORMAT)


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Attach one stdout handler to the root logger. Later calls are no-ops."""
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ReferenceTimeFormatter(_LOG_FORMAT, _DATE_FORMAT))
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.addHandler(handler)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Named logger; configures logging on first use."""
    configure_logging()
    return logging.getLogger(name)
