"""
RESPONSIBILITIES
- Manage user documents copied into <data root>/uploads.
- Handle upload (copy-in), listing, rename, delete and opening with the host default handler.
PROCESS OVERVIEW
1. init_store() ensures the uploads directory exists.
2. upload() copies an externally chosen file in under its base name, overwriting a namesake.
3. list_documents() enumerates files with their modification time in epoch milliseconds.
4. rename()/delete() report success as a boolean; missing files are a failure, not an error.
5. open_externally() asks the platform to open the file and ignores unknown names.
"""

from __future__ import annotations

import logging
from pathlib import Path

from race_persist.schemas.records import DocumentEntry
from race_persist.stores.base_store import (
    BaseStore,
    FileSystem,
    PersistHealth,
    StoreInitializationError,
)
from race_persist.utils.log import get_logger
from race_persist.utils.paths import AppPaths


def _is_base_name(name: str) -> bool:
    return bool(name) and name not in {".", ".."} and Path(name).name == name and "\\" not in name


class DocumentStore(BaseStore):
    """File-backed store for uploaded documents."""

    def __init__(
        self,
        paths: AppPaths,
        *,
        fs: FileSystem | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(paths, fs=fs, logger=logger or get_logger("document_store", paths.root))
        self.directory = paths.uploads_dir

    # BaseStore API -----------------------------------------------------------------

    def init_store(self) -> Path:
        try:
            self.fs.make_dirs(self.directory)
        except OSError as exc:
            raise StoreInitializationError(str(exc)) from exc
        return self.directory

    def healthcheck(self) -> PersistHealth:
        issues: list[str] = []
        if not self.fs.exists(self.directory):
            issues.append(f"uploads directory {self.directory} is missing")
        return PersistHealth(
            writable_paths={str(self.directory): self._writable(self.directory)},
            issues=issues,
        )

    # Document operations -----------------------------------------------------------

    def _resolve(self, name: str) -> Path | None:
        if not _is_base_name(name):
            self.logger.warning("Rejected document name %r", name)
            return None
        return self.directory / name

    def _entry(self, path: Path) -> DocumentEntry:
        return DocumentEntry(name=path.name, modified_time=self.fs.modified_ms(path))

    def upload(self, source: str | Path | None) -> DocumentEntry | None:
        """Copy ``source`` into the uploads directory; ``None`` when nothing was chosen."""

        if not source:
            return None
        source_path = Path(source)
        dest = self.directory / source_path.name
        try:
            self.fs.make_dirs(self.directory)
            if self.fs.exists(dest):
                self.logger.warning("Overwriting existing document %s", dest.name)
            self.fs.copy_file(source_path, dest)
            entry = self._entry(dest)
        except OSError as exc:
            self.logger.error("Upload of %s failed: %s", source_path, exc)
            return None
        self.logger.info("Uploaded %s", entry.name)
        return entry

    def list_documents(self) -> list[DocumentEntry]:
        if not self.fs.exists(self.directory):
            return []
        entries: list[DocumentEntry] = []
        try:
            for path in self.fs.list_files(self.directory):
                entries.append(self._entry(path))
        except OSError as exc:
            self.logger.error("Listing %s failed: %s", self.directory, exc)
        return entries

    def rename(self, old_name: str, new_name: str) -> bool:
        old_path = self._resolve(old_name)
        new_path = self._resolve(new_name)
        if old_path is None or new_path is None or not self.fs.exists(old_path):
            return False
        try:
            self.fs.replace(old_path, new_path)
        except OSError as exc:
            self.logger.error("Rename %s -> %s failed: %s", old_name, new_name, exc)
            return False
        self.logger.info("Renamed %s -> %s", old_name, new_name)
        return True

    def delete(self, name: str) -> bool:
        path = self._resolve(name)
        if path is None or not self.fs.exists(path):
            return False
        try:
            self.fs.remove(path)
        except OSError as exc:
            self.logger.error("Delete of %s failed: %s", name, exc)
            return False
        self.logger.info("Deleted %s", name)
        return True

    def open_externally(self, name: str) -> None:
        path = self._resolve(name)
        if path is None or not self.fs.exists(path):
            return
        try:
            self.fs.open_path(path)
        except OSError as exc:
            self.logger.error("Cannot open %s: %s", name, exc)
