from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys


LOGGER_NAME = "race"
LOG_FILE_NAME = "app.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
MAX_LOG_BYTES = 2 * 1024 * 1024
LOG_BACKUPS = 3

_LOGGER: logging.Logger | None = None


def _default_log_dir() -> Path:
    # persistence imports this module, so resolve the data root lazily
    from race_persist.utils.paths import resolve_paths

    return resolve_paths().logs_dir


def _detach_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def get_logger(log_dir: Path | None = None, *, level: int | None = None) -> logging.Logger:
    """Return the R.A.C.E application logger, configuring it on first use.

    The first call attaches a rotating ``app.log`` under ``log_dir`` (default
    ``<data root>/logs``) and a stdout handler; later calls reuse it and only
    apply ``level``. Raises ``OSError`` when the log directory cannot be created.
    """
    global _LOGGER
    if _LOGGER is None:
        base = Path(log_dir) if log_dir is not None else _default_log_dir()
        base.mkdir(parents=True, exist_ok=True)

        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(logging.INFO)
        logger.propagate = False
        _detach_handlers(logger)

        fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        file_handler = RotatingFileHandler(
            base / LOG_FILE_NAME, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
        )
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(fmt)
        logger.addHandler(console)
        _LOGGER = logger

    if level is not None:
        _LOGGER.setLevel(level)
    return _LOGGER


def reset_logger() -> None:
    """Close the handlers so the next get_logger() call reconfigures from scratch."""

    global _LOGGER
    _detach_handlers(logging.getLogger(LOGGER_NAME))
    _LOGGER = None
