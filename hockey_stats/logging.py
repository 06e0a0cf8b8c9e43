"""Logging configuration using Loguru.

Console output is colourised for interactive backfills; the file sink writes
one JSON object per line so a finished run can be grepped by stage.
Library modules keep using ``logging.getLogger(__name__)``; the
``InterceptHandler`` installed here forwards those records into loguru.

Example:
    >>> from hockey_stats.logging import setup_logging, get_logger
    >>> setup_logging(level="DEBUG")
    >>> logger = get_logger(__name__)
    >>> logger.info("Processing season {}", "20232024")

Status Tags:
    >>> from hockey_stats.logging import SUCCESS, FAIL, WARN
    >>> logger.info(f"{SUCCESS} games: 1312 rows")
    >>> logger.warning(f"{WARN} teams: live fetch empty, using fallback")
    >>> logger.error(f"{FAIL} shot-events: PersistenceError")
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from loguru import logger

# ANSI colour tags, rendered by loguru's colorize=True console sink
SUCCESS = "\033[92m[SUCCESS]\033[0m"  # Green
FAIL = "\033[91m[FAIL]\033[0m"        # Red
WARN = "\033[93m[WARN]\033[0m"        # Yellow

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        frame, depth = sys._getframe(6), 6
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(
    level: str = "INFO",
    log_dir: str | Path | None = "logs",
    rotation: str = "1 day",
    retention: str = "30 days",
    serialize: bool = True,
) -> None:
    """Configure application logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Directory for rotating log files, or None for console only.
        rotation: When to rotate log files (e.g., "1 day", "100 MB").
        retention: How long to keep old log files.
        serialize: Whether to write JSON-formatted logs to file.
    """
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / "hockey_stats_{time:YYYY-MM-DD}.log",
            level=level,
            format=FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            serialize=serialize,
            enqueue=True,  # Thread-safe
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def get_logger(name: str) -> Any:
    """Get a loguru logger bound with the given name.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        Loguru logger bound with the given name.
    """
    return logger.bind(name=name)


def stage_tag(ok: bool, degraded: bool = False) -> str:
    """Pick the status tag for a finished stage.

    Args:
        ok: Whether the stage completed without raising.
        degraded: Whether it completed on fallback data or with item errors.

    Returns:
        One of SUCCESS, WARN or FAIL.
    """
    if not ok:
        return FAIL
    return WARN if degraded else SUCCESS


__all__ = [
    "FAIL",
    "SUCCESS",
    "WARN",
    "get_logger",
    "logger",
    "setup_logging",
    "stage_tag",
]
