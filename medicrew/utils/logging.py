"""
Logging configuration for MediCrew.

The library (`medicrew.*`) and the HTTP layer (`api.*`) log under their
own module names; `setup_logging` attaches the same handlers to both
package loggers.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PACKAGE_LOGGERS = ("medicrew", "api")


def _build_handlers(level: int, log_file: Optional[str]) -> list[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging for the application.

    Calling it again replaces the handlers from the previous call.

    Args:
        level: Log level name. Defaults to LOG_LEVEL, then INFO.
        log_file: Optional file to write logs to. Defaults to LOG_FILE.

    Returns:
        The "medicrew" package logger
    """
    level_name = level or os.getenv("LOG_LEVEL", "INFO")
    level_num = getattr(logging, level_name.upper(), logging.INFO)
    log_file = log_file or os.getenv("LOG_FILE")

    handlers = _build_handlers(level_num, log_file)
    for name in PACKAGE_LOGGERS:
        package_logger = logging.getLogger(name)
        package_logger.setLevel(level_num)
        package_logger.handlers = list(handlers)

    return logging.getLogger(PACKAGE_LOGGERS[0])


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the medicrew namespace, e.g. get_logger("portal")."""
    if name:
        return logging.getLogger(f"medicrew.{name}")
    return logging.getLogger("medicrew")
