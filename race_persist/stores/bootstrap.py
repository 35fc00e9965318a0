"""
RESPONSIBILITIES
- Prepare the application data root on every launch.
- Seed database.json / requirements.json from the bundled defaults on first run.
PROCESS OVERVIEW
1. ensure_initialized() creates the root and uploads directories (recursive, idempotent).
2. Each record document missing from the root is copied from the first existing candidate
   (packaged location, development tree, configured seed_dirs).
3. When no candidate exists a literal "[]" placeholder is written and a warning is logged.
4. Copy/write failures are logged and reported; startup continues with an empty record set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Mapping

from race.config import Settings, seed_candidates
from race_persist.schemas.records import RecordKind
from race_persist.stores.base_store import FileSystem, LocalFileSystem, StoreInitializationError
from race_persist.utils.log import get_logger
from race_persist.utils.paths import AppPaths

EMPTY_RECORDS = "[]"

CandidateSource = Callable[[RecordKind], Iterable[Path]]


@dataclass(slots=True)
class BootstrapReport:
    """What a bootstrap pass did to the data root."""

    root: Path
    seeded: dict[str, Path] = field(default_factory=dict)
    placeholders: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.placeholders or self.errors)


def default_candidates(settings: Settings | None = None) -> CandidateSource:
    def _candidates(kind: RecordKind) -> list[Path]:
        return seed_candidates(kind.file_name, settings)

    return _candidates


def _as_source(candidates: CandidateSource | Mapping[RecordKind, Iterable[Path]] | None) -> CandidateSource:
    if candidates is None:
        return default_candidates()
    if callable(candidates):
        return candidates
    mapping = dict(candidates)
    return lambda kind: mapping.get(kind, ())


def ensure_initialized(
    paths: AppPaths,
    *,
    fs: FileSystem | None = None,
    candidates: CandidateSource | Mapping[RecordKind, Iterable[Path]] | None = None,
    logger: logging.Logger | None = None,
) -> BootstrapReport:
    """Make sure the data root, uploads directory and both record documents exist.

    Safe to call on every launch; existing record documents are never overwritten.
    """
    fs = fs or LocalFileSystem()
    source_for = _as_source(candidates)
    report = BootstrapReport(root=paths.root)

    try:
        fs.make_dirs(paths.root)
        fs.make_dirs(paths.uploads_dir)
        logger = logger or get_logger("bootstrap", paths.root)
    except OSError as exc:
        raise StoreInitializationError(f"Cannot create application data directory {paths.root}: {exc}") from exc

    for kind in RecordKind:
        dest = paths.record_path(kind)
        if fs.exists(dest):
            report.existing.append(kind.value)
            continue
        source = next((candidate for candidate in source_for(kind) if fs.is_file(candidate)), None)
        try:
            if source is not None:
                fs.copy_file(source, dest)
                report.seeded[kind.value] = source
                logger.info("%s copied -> %s", kind.file_name, dest)
            else:
                logger.warning("Missing %s in bundle. Creating empty file.", kind.file_name)
                fs.write_text(dest, EMPTY_RECORDS)
                report.placeholders.append(kind.value)
        except OSError as exc:
            logger.error("Error copying/creating %s: %s", kind.file_name, exc)
            report.errors.append(f"{kind.file_name}: {exc}")

    return report
