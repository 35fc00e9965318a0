"""
RESPONSIBILITIES
- Provide a persistence-local logger helper reusing the core logging setup.
- Ensure the <data root>/logs directory exists before logger creation.
PROCESS OVERVIEW
1. Callers request get_logger(name, root).
2. The log directory is resolved from the application data root.
3. The core race logger is reused and a child logger is returned.
"""

from __future__ import annotations

import logging
from pathlib import Path

from race.core.logger import get_logger as core_get_logger

from .paths import resolve_paths


def get_logger(name: str, root: Path | None = None) -> logging.Logger:
    """Return a namespaced logger for persistence modules."""

    base_logger = core_get_logger(resolve_paths(root).logs_dir)
    return base_logger.getChild(name)
