"""Logging setup: a rotating file under the app dir plus optional console."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOGGER_NAME = "boosttimer"


def configure_logging(
    level: int | str = logging.INFO,
    log_dir: Path | None = None,
    *,
    console: bool = False,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Attach handlers to the ``boosttimer`` logger.

    Safe to call more than once: handlers are tagged by name and only
    added when missing.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    fmt = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    if log_dir is not None:
        file_handler_name = f"{LOGGER_NAME}:file"
        if not any(h.get_name() == file_handler_name for h in logger.handlers):
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=log_dir / f"{LOGGER_NAME}.log",
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(fmt)
            file_handler.set_name(file_handler_name)
            logger.addHandler(file_handler)

    console_handler_name = f"{LOGGER_NAME}:console"
    if console and not any(h.get_name() == console_handler_name for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(fmt)
        console_handler.set_name(console_handler_name)
        logger.addHandler(console_handler)

    for handler in logger.handlers:
        handler.setLevel(level)
    return logger
