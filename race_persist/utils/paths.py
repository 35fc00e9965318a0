"""
RESPONSIBILITIES
- Resolve the per-user application data root used for persistence.
- Derive the fixed locations of the record documents, uploads and logs inside it.
PROCESS OVERVIEW
1. resolve_base_dir() takes an explicit root, then $RACE_DATA_DIR, then a configured
   directory from settings, then the platform default.
2. resolve_paths() wraps the root in AppPaths; nothing is created on disk here.
3. AppPaths.record_path()/uploads_dir/logs_dir return the canonical locations.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_data_dir

from race_persist.schemas.records import RecordKind
from race_persist.stores.base_store import PathResolutionError

APP_NAME = "RACE"
DATA_DIR_ENV = "RACE_DATA_DIR"
UPLOADS_DIRNAME = "uploads"
LOGS_DIRNAME = "logs"


def resolve_base_dir(
    root: str | os.PathLike[str] | None = None,
    *,
    configured: str | os.PathLike[str] | None = None,
) -> Path:
    """Return the application data root without touching the filesystem.

    ``root`` (e.g. ``--data-dir``) wins over $RACE_DATA_DIR, which wins over
    ``configured`` (the settings file's ``data_dir``).
    """

    if root is not None:
        return Path(root).expanduser().resolve()
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser().resolve()
    if configured is not None:
        return Path(configured).expanduser().resolve()
    try:
        base = user_data_dir(APP_NAME, appauthor=False)
    except (OSError, KeyError, RuntimeError) as exc:
        raise PathResolutionError(f"Cannot determine application data directory: {exc}") from exc
    if not base:
        raise PathResolutionError("Cannot determine application data directory")
    return Path(base).expanduser().resolve()


@dataclass(frozen=True, slots=True)
class AppPaths:
    """Canonical locations under one application data root."""

    root: Path

    def record_path(self, kind: RecordKind | str) -> Path:
        return self.root / RecordKind.parse(kind).file_name

    @property
    def uploads_dir(self) -> Path:
        return self.root / UPLOADS_DIRNAME

    @property
    def logs_dir(self) -> Path:
        return self.root / LOGS_DIRNAME

    def upload_path(self, name: str) -> Path:
        return self.uploads_dir / name

    def as_query(self) -> dict[str, str]:
        """Return the record paths handed to data windows when they open."""

        return {
            "db_path": str(self.record_path(RecordKind.DATABASE)),
            "req_path": str(self.record_path(RecordKind.REQUIREMENTS)),
        }


def resolve_paths(
    root: str | os.PathLike[str] | None = None,
    *,
    configured: str | os.PathLike[str] | None = None,
) -> AppPaths:
    return AppPaths(resolve_base_dir(root, configured=configured))
