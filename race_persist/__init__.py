"""
Persistence facade exposing the application data bootstrap and file-backed stores.
"""

from .schemas.records import DocumentEntry, RecordKind
from .stores.base_store import (
    FileSystem,
    InvalidRecordDocumentError,
    LocalFileSystem,
    PathResolutionError,
    PersistHealth,
    StoreError,
    StoreInitializationError,
    StoreValidationError,
    UnknownRecordKindError,
)
from .stores.bootstrap import BootstrapReport, default_candidates, ensure_initialized
from .stores.document_store import DocumentStore
from .stores.health import healthcheck
from .stores.record_store import RecordStore
from .utils.paths import AppPaths, resolve_base_dir, resolve_paths

__all__ = [
    "AppPaths",
    "BootstrapReport",
    "DocumentEntry",
    "DocumentStore",
    "FileSystem",
    "InvalidRecordDocumentError",
    "LocalFileSystem",
    "PathResolutionError",
    "PersistHealth",
    "RecordKind",
    "RecordStore",
    "StoreError",
    "StoreInitializationError",
    "StoreValidationError",
    "UnknownRecordKindError",
    "default_candidates",
    "ensure_initialized",
    "healthcheck",
    "resolve_base_dir",
    "resolve_paths",
]
