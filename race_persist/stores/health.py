"""
RESPONSIBILITIES
- Aggregate the health of the record and document stores under one data root.
PROCESS OVERVIEW
1. healthcheck() asks each store for its report.
2. Unexpected failures are captured as issues instead of propagating.
3. The merged PersistHealth is returned for the CLI to print.
"""

from __future__ import annotations

from race_persist.stores.base_store import FileSystem, PersistHealth
from race_persist.stores.document_store import DocumentStore
from race_persist.stores.record_store import RecordStore
from race_persist.utils.log import get_logger
from race_persist.utils.paths import AppPaths


def healthcheck(paths: AppPaths, *, fs: FileSystem | None = None) -> PersistHealth:
    """Return the combined diagnostic for the data root at ``paths``."""

    logger = get_logger("health", paths.root)
    stores = {
        "records": RecordStore(paths, fs=fs),
        "documents": DocumentStore(paths, fs=fs),
    }
    combined = PersistHealth(writable_paths={})
    for name, store in stores.items():
        try:
            combined = combined.merge(store.healthcheck())
        except Exception as exc:  # noqa: BLE001 - capture unexpected failures
            logger.error("Healthcheck failed for %s: %s", name, exc)
            combined = combined.merge(PersistHealth(writable_paths={}, issues=[f"{name}: {exc}"]))
    return combined
