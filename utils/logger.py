"""
utils/logger.py
---------------
Logging setup for the bot. Every module takes its logger from
`get_logger(__name__)`; the root logger is configured on first use.

Records go to stdout, and additionally to a size-rotated file when
LOG_FILE is set.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler

from config import LOG_BACKUP_COUNT, LOG_FILE, LOG_LEVEL, LOG_MAX_BYTES

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# httpx logs every request URL at INFO, and the rate API key is part of the URL
_QUIET_LOGGERS = ("httpx", "httpcore", "apscheduler")

_initialized = False


def _handlers() -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if LOG_FILE:
        handlers.append(RotatingFileHandler(
            LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
        ))
    return handlers


def _init_logging() -> None:
    global _initialized
    if _initialized:
        return
    formatter = logging.Formatter(_LOG_FORMAT, _DATE_FORMAT)
    root = logging.getLogger()
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    for handler in _handlers():
        handler.setFormatter(formatter)
        root.addHandler(handler)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """Named logger; configures the root logger the first time it is called."""
    _init_logging()
    return logging.getLogger(name)
