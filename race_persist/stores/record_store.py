"""
RESPONSIBILITIES
- Read and replace the two JSON record documents (database, requirements).
- Validate imports for JSON well-formedness before touching stored state.
- Export record text to a caller-chosen destination.
PROCESS OVERVIEW
1. read() returns the stored text, falling back to "[]" on any I/O failure.
2. replace() parses the chosen file first; only well-formed JSON is copied over the document.
3. export() writes the given text verbatim and reports whether anything was written.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from race_persist.schemas.records import RecordKind
from race_persist.stores.base_store import (
    BaseStore,
    FileSystem,
    InvalidRecordDocumentError,
    PersistHealth,
    StoreError,
)
from race_persist.stores.bootstrap import EMPTY_RECORDS, CandidateSource, ensure_initialized
from race_persist.utils.log import get_logger
from race_persist.utils.paths import AppPaths

INVALID_JSON_MESSAGE = "Invalid JSON structure in imported file."


def _reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not valid JSON")


def parse_record_text(text: str) -> object:
    """Parse ``text`` as strict JSON; NaN and Infinity are rejected."""

    return json.loads(text, parse_constant=_reject_constant)


class RecordStore(BaseStore):
    """File-backed store for the JSON record documents."""

    def __init__(
        self,
        paths: AppPaths,
        *,
        fs: FileSystem | None = None,
        candidates: CandidateSource | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(paths, fs=fs, logger=logger or get_logger("record_store", paths.root))
        self._candidates = candidates

    # BaseStore API -----------------------------------------------------------------

    def init_store(self) -> Path:
        ensure_initialized(self.paths, fs=self.fs, candidates=self._candidates, logger=self.logger)
        return self.paths.root

    def healthcheck(self) -> PersistHealth:
        documents: dict[str, bool] = {}
        issues: list[str] = []
        for kind in RecordKind:
            path = self.paths.record_path(kind)
            if not self.fs.exists(path):
                documents[kind.file_name] = False
                issues.append(f"{kind.file_name} is missing")
                continue
            try:
                parse_record_text(self.fs.read_text(path))
            except (OSError, UnicodeDecodeError) as exc:
                documents[kind.file_name] = False
                issues.append(f"{kind.file_name} is unreadable: {exc}")
            except ValueError as exc:
                documents[kind.file_name] = False
                issues.append(f"{kind.file_name} is not valid JSON: {exc}")
            else:
                documents[kind.file_name] = True
        return PersistHealth(
            writable_paths={str(self.paths.root): self._writable(self.paths.root)},
            documents=documents,
            issues=issues,
        )

    # Record operations -------------------------------------------------------------

    def read(self, kind: RecordKind | str) -> str:
        """Return the raw document text; "[]" when it cannot be read."""

        kind = RecordKind.parse(kind)
        try:
            return self.fs.read_text(self.paths.record_path(kind))
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.error("Error reading %s: %s", kind.file_name, exc)
            return EMPTY_RECORDS

    def replace(self, kind: RecordKind | str, source: str | Path | None) -> str | None:
        """Replace the stored document with ``source`` after validating it.

        Returns the imported text, or ``None`` when no source was chosen.

        Raises:
            InvalidRecordDocumentError: ``source`` is not UTF-8 encoded well-formed JSON.
                The stored document is left untouched.
            StoreError: ``source`` cannot be read or the copy fails.
        """
        kind = RecordKind.parse(kind)
        if not source:
            return None
        source_path = Path(source)
        try:
            content = self.fs.read_text(source_path)
        except UnicodeDecodeError as exc:
            self.logger.error("Import data is not UTF-8 text: %s", exc)
            raise InvalidRecordDocumentError(INVALID_JSON_MESSAGE) from exc
        except OSError as exc:
            raise StoreError(f"Cannot read {source_path}: {exc}") from exc

        try:
            parse_record_text(content)
        except ValueError as exc:
            self.logger.error("Import data is invalid JSON: %s", exc)
            raise InvalidRecordDocumentError(INVALID_JSON_MESSAGE) from exc

        dest = self.paths.record_path(kind)
        try:
            self.fs.copy_file(source_path, dest)
        except OSError as exc:
            raise StoreError(f"Cannot replace {kind.file_name}: {exc}") from exc
        self.logger.info("Imported %s from %s", kind.file_name, source_path)
        return content

    def export(self, kind: RecordKind | str, content: str, destination: str | Path | None) -> bool:
        """Write ``content`` to ``destination``; False when cancelled or the write fails."""

        kind = RecordKind.parse(kind)
        if not destination:
            return False
        dest = Path(destination)
        try:
            self.fs.write_text(dest, content)
        except OSError as exc:
            self.logger.error("Export of %s to %s failed: %s", kind.file_name, dest, exc)
            return False
        self.logger.info("Exported %s -> %s", kind.file_name, dest)
        return True

    @staticmethod
    def default_export_name(kind: RecordKind | str) -> str:
        return RecordKind.parse(kind).file_name
