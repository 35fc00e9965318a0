"""Named request routing between UI windows and the file-backed stores.

Windows never touch the data root directly: they call
``dispatcher.dispatch("list-files")`` and friends, and the dispatcher
resolves the target, asks the user for paths through a ``DialogProvider``
when the request needs one, and returns plain results (dicts, text, bools).
Only an invalid JSON import propagates as an exception.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Protocol, Sequence

from platformdirs import user_downloads_dir

from race.config import Settings
from race.core.errors import DispatchError, UnknownRequestError
from race.core.logger import get_logger
from race.core.session import AppSession, WindowRole
from race_persist.stores.document_store import DocumentStore
from race_persist.stores.record_store import RecordStore

FileTypes = Sequence[tuple[str, str]]


class DialogProvider(Protocol):
    """Native file dialogs; each returns ``None`` when the user cancels."""

    def ask_open_file(self, parent: Any, *, title: str, filetypes: FileTypes) -> Path | None: ...

    def ask_save_file(self, parent: Any, *, title: str, initial_path: Path) -> Path | None: ...


def _patterns(extensions: Sequence[str]) -> str:
    return " ".join(f"*.{ext.lstrip('.')}" for ext in extensions)


class RequestDispatcher:
    def __init__(
        self,
        documents: DocumentStore,
        records: RecordStore,
        dialogs: DialogProvider,
        *,
        session: AppSession | None = None,
        settings: Settings | None = None,
        downloads_dir: Path | None = None,
        logger=None,
    ) -> None:
        self.documents = documents
        self.records = records
        self.dialogs = dialogs
        self.session = session
        self.settings = settings or Settings()
        self.downloads_dir = downloads_dir
        self.logger = logger or get_logger()
        self._handlers: dict[str, Callable[..., Any]] = {
            "get-data": self.get_data,
            "upload-document": self.upload_document,
            "list-files": self.list_files,
            "rename-file": self.rename_file,
            "delete-file": self.delete_file,
            "open-file": self.open_file,
            "export-data": self.export_data,
            "import-data": self.import_data,
            "open-home-window": self.open_home_window,
            "open-admin-window": self.open_admin_window,
            "open-race-window": self.open_race_window,
            "close-window": self.close_window,
        }

    @property
    def requests(self) -> list[str]:
        return sorted(self._handlers)

    def dispatch(self, request: str, *args: Any) -> Any:
        handler = self._handlers.get(request)
        if handler is None:
            raise UnknownRequestError(f"No handler for request {request!r}")
        self.logger.debug("Dispatching %s", request)
        return handler(*args)

    # Data requests ---------------------------------------------------------------

    def get_data(self, kind: str) -> str:
        return self.records.read(kind)

    def upload_document(self) -> dict[str, object] | None:
        source = self.dialogs.ask_open_file(
            self._dialog_parent(),
            title="Upload document",
            filetypes=[("Documents", _patterns(self.settings.upload_extensions))],
        )
        entry = self.documents.upload(source)
        return entry.to_dict() if entry is not None else None

    def list_files(self) -> list[dict[str, object]]:
        return [entry.to_dict() for entry in self.documents.list_documents()]

    def rename_file(self, old_name: str, new_name: str) -> bool:
        return self.documents.rename(old_name, new_name)

    def delete_file(self, name: str) -> bool:
        return self.documents.delete(name)

    def open_file(self, name: str) -> None:
        self.documents.open_externally(name)

    def export_data(self, kind: str, content: str) -> bool:
        initial = self._downloads() / self.records.default_export_name(kind)
        destination = self.dialogs.ask_save_file(self._dialog_parent(), title="Export data", initial_path=initial)
        return self.records.export(kind, content, destination)

    def import_data(self, kind: str) -> str | None:
        source = self.dialogs.ask_open_file(
            self._dialog_parent(),
            title="Import data",
            filetypes=[("JSON", _patterns(self.settings.import_extensions))],
        )
        return self.records.replace(kind, source)

    # Window requests -------------------------------------------------------------

    def open_home_window(self) -> None:
        session = self._require_session()
        session.open(WindowRole.HOME)
        session.close(WindowRole.LOGIN)

    def open_admin_window(self) -> None:
        session = self._require_session()
        self.logger.info("Opening admin panel...")
        session.open(WindowRole.ADMIN)
        session.close(WindowRole.LOGIN)

    def open_race_window(self) -> None:
        session = self._require_session()
        session.open(WindowRole.RACE)
        session.focus(WindowRole.HOME)

    def close_window(self, role: str) -> None:
        self._require_session().close(role)

    # Helpers ---------------------------------------------------------------------

    def _require_session(self) -> AppSession:
        if self.session is None:
            raise DispatchError("Window requests need an application session")
        return self.session

    def _dialog_parent(self) -> Any:
        return self.session.active_window() if self.session is not None else None

    def _downloads(self) -> Path:
        if self.downloads_dir is None:
            self.downloads_dir = Path(user_downloads_dir())
        return self.downloads_dir
