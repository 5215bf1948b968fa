"""Logging helpers for the docfill package."""

# Module responsibilities:
# - Centralize logging configuration with rotating file + stream handlers.
# - Configure the ``docfill`` namespace once; modules log via logging.getLogger(__name__).

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_DIR_ENV = "DOCFILL_LOG_DIR"
DEFAULT_LOG_BASE = Path.home() / "DocFill" / "logs"

_LOGGER: logging.Logger | None = None


def _resolve_log_dir(log_dir: Path | None = None) -> Path:
    if log_dir is not None:
        target = Path(log_dir)
    elif os.environ.get(LOG_DIR_ENV):
        target = Path(os.environ[LOG_DIR_ENV])
    else:
        target = DEFAULT_LOG_BASE
    target.mkdir(parents=True, exist_ok=True)
    return target


def get_logger(log_dir: Path | None = None, level: int | str = logging.INFO) -> logging.Logger:
    """Return the configured ``docfill`` logger writing to ``<log_dir>/docfill.log``.

    Creates the directory if needed. Handlers are attached only on the first call;
    later calls just adjust the level.
    """
    global _LOGGER
    if isinstance(level, str):
        level_value = getattr(logging, level.upper(), None)
        if not isinstance(level_value, int):
            raise ValueError(f"Unknown log level: {level}")
        level = level_value

    if _LOGGER is not None:
        _LOGGER.setLevel(level)
        return _LOGGER

    log_path = _resolve_log_dir(log_dir) / "docfill.log"

    logger = logging.getLogger("docfill")
    logger.setLevel(level)
    logger.propagate = False

    fmt = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(log_path, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(fmt)
    logger.addHandler(file_handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(fmt)
    logger.addHandler(console)

    _LOGGER = logger
    return logger
