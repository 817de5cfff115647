from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .profiles import _work_dir

LOGGER_NAME = "artifactsync"
LOG_FILE_NAME = "app.log"
LOG_MAX_BYTES = 2 * 1024 * 1024
LOG_BACKUPS = 3
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LOGGER: logging.Logger | None = None


def _handlers(log_path: Path) -> list[logging.Handler]:
    file_handler = RotatingFileHandler(
        log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    return [file_handler, logging.StreamHandler(sys.stdout)]


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return the ``artifactsync`` logger, writing to <work>/logs/app.log and stdout.

    The first call fixes the handlers; later calls return the same logger.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    base = Path(log_dir) if log_dir is not None else _work_dir() / "logs"
    base.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    for handler in _handlers(base / LOG_FILE_NAME):
        handler.setFormatter(fmt)
        logger.addHandler(handler)

    _LOGGER = logger
    return logger


def set_level(level: str) -> None:
    """Apply ``level`` (name such as DEBUG/INFO) to the application logger."""

    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    get_logger().setLevel(numeric)
