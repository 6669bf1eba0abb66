"""Logging setup for **SiteDiff**.

Every module logs through the ``SiteDiff`` logger::

    from site_diff.logger import logger
    logger.info("Crawl started")

The CLI calls :func:`init_logging` once per invocation with the level, file
and format given on the command line; each call replaces the handlers of the
previous one.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SiteDiff"

# rotation limits for --log-file
_MAX_LOG_BYTES: Final[int] = 2 * 1024 * 1024
_LOG_BACKUPS: Final[int] = 2


def _handlers(log_file: Union[str, Path, None]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(path, maxBytes=_MAX_LOG_BYTES, backupCount=_LOG_BACKUPS, encoding="utf-8")
        )
    return handlers


def init_logging(
    level: Union[int, str] = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Point the ``SiteDiff`` logger at stdout (and *log_file*) and return it."""
    lg = logging.getLogger(LOGGER_NAME)
    for old in list(lg.handlers):
        lg.removeHandler(old)
        old.close()

    formatter = logging.Formatter(log_format)
    for handler in _handlers(log_file):
        handler.setFormatter(formatter)
        lg.addHandler(handler)

    lg.setLevel(level)
    lg.propagate = False
    return lg


logger: logging.Logger = init_logging()

__all__ = ["logger", "init_logging", "LOGGER_NAME", "DEFAULT_FORMAT"]
