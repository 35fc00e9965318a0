"""
RESPONSIBILITIES
- Define shared exceptions and the health report for file-backed stores.
- Isolate every blocking filesystem call behind the FileSystem protocol so stores can be
  exercised against a fake backend.
- Provide the base class that concrete stores (documents, records) derive from.
PROCESS OVERVIEW
1. Stores receive resolved AppPaths plus an optional FileSystem (LocalFileSystem by default).
2. init_store() makes sure the backing directory or document exists.
3. Operations translate OSError into failure results at their own boundary.
4. healthcheck() reports writable paths and issues without raising.
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from race_persist.utils.paths import AppPaths


class StoreError(RuntimeError):
    """Base exception type for persistence-layer failures."""


class StoreInitializationError(StoreError):
    """Raised when the application data directories cannot be created."""


class StoreValidationError(StoreError):
    """Raised when input data fails validation rules."""


class InvalidRecordDocumentError(StoreValidationError):
    """Raised when an imported record document is not well-formed JSON."""


class UnknownRecordKindError(StoreValidationError):
    """Raised when a caller names a record document that does not exist."""


class PathResolutionError(StoreError):
    """Raised when the platform cannot supply an application data directory."""


@dataclass(slots=True)
class PersistHealth:
    """Structured report produced by health checks."""

    writable_paths: dict[str, bool]
    documents: dict[str, bool] = field(default_factory=dict)
    issues: list[str] = field(default_factory=list)

    def is_healthy(self) -> bool:
        """Return True when no issues are observed."""

        return not self.issues and all(self.writable_paths.values()) and all(self.documents.values())

    def merge(self, other: "PersistHealth") -> "PersistHealth":
        return PersistHealth(
            writable_paths={**self.writable_paths, **other.writable_paths},
            documents={**self.documents, **other.documents},
            issues=[*self.issues, *other.issues],
        )


class FileSystem(Protocol):
    """Blocking filesystem operations used by the stores."""

    def exists(self, path: Path) -> bool: ...

    def is_file(self, path: Path) -> bool: ...

    def make_dirs(self, path: Path) -> None: ...

    def list_files(self, path: Path) -> list[Path]: ...

    def modified_ms(self, path: Path) -> int: ...

    def read_text(self, path: Path) -> str: ...

    def write_text(self, path: Path, content: str) -> None: ...

    def copy_file(self, source: Path, dest: Path) -> None: ...

    def replace(self, source: Path, dest: Path) -> None: ...

    def remove(self, path: Path) -> None: ...

    def open_path(self, path: Path) -> None: ...


class LocalFileSystem:
    """FileSystem backed by the real disk."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_file(self, path: Path) -> bool:
        return path.is_file()

    def make_dirs(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def list_files(self, path: Path) -> list[Path]:
        return [child for child in path.iterdir() if child.is_file()]

    def modified_ms(self, path: Path) -> int:
        return path.stat().st_mtime_ns // 1_000_000

    def read_text(self, path: Path) -> str:
        # newline="" keeps the stored bytes intact, CRLF included.
        with path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()

    def write_text(self, path: Path, content: str) -> None:
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)

    def copy_file(self, source: Path, dest: Path) -> None:
        shutil.copyfile(source, dest)

    def replace(self, source: Path, dest: Path) -> None:
        os.replace(source, dest)

    def remove(self, path: Path) -> None:
        path.unlink()

    def open_path(self, path: Path) -> None:
        system = platform.system()
        if system == "Windows":
            os.startfile(str(path))  # type: ignore[attr-defined]
        elif system == "Darwin":
            subprocess.Popen(["open", str(path)])
        else:
            subprocess.Popen(["xdg-open", str(path)])


class BaseStore(ABC):
    """Abstract class shared by the stores living under the application data root."""

    def __init__(
        self,
        paths: "AppPaths",
        *,
        fs: FileSystem | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.paths = paths
        self.fs: FileSystem = fs or LocalFileSystem()
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def init_store(self) -> Path:
        """Ensure the backing location exists, returning its absolute path."""

    @abstractmethod
    def healthcheck(self) -> PersistHealth:
        """Run diagnostics for the store and return a structured report."""

    def _writable(self, directory: Path) -> bool:
        return self.fs.exists(directory) and os.access(directory, os.W_OK)
