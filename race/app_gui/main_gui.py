import json
import tkinter as tk
from tkinter import ttk, filedialog, messagebox, simpledialog
from datetime import datetime
from pathlib import Path

from race.config import Settings, load_settings
from race.core.dispatcher import RequestDispatcher
from race.core.logger import get_logger
from race.core.session import AppSession, WindowRole, WindowSpec, specs_from_settings
from race_persist.stores.base_store import StoreError
from race_persist.stores.bootstrap import default_candidates
from race_persist.stores.document_store import DocumentStore
from race_persist.stores.record_store import RecordStore
from race_persist.utils.paths import AppPaths, resolve_paths


class TkDialogs:
    """DialogProvider backed by the native Tk file dialogs."""

    def ask_open_file(self, parent, *, title, filetypes):
        chosen = filedialog.askopenfilename(parent=parent, title=title, filetypes=list(filetypes))
        return Path(chosen) if chosen else None

    def ask_save_file(self, parent, *, title, initial_path):
        chosen = filedialog.asksaveasfilename(
            parent=parent,
            title=title,
            initialdir=str(initial_path.parent),
            initialfile=initial_path.name,
        )
        return Path(chosen) if chosen else None


class AppWindow(tk.Toplevel):
    """Toplevel that reports focus/close back to the session."""

    def __init__(self, app: "RaceApp", role: WindowRole, spec: WindowSpec, query=None):
        super().__init__(app.root)
        self.app = app
        self.role = role
        self.query = dict(query or {})
        self.title(spec.title)
        self.geometry(f"{spec.width}x{spec.height}")
        self.minsize(spec.min_width, spec.min_height)
        if spec.frameless:
            self.overrideredirect(True)
        self.protocol("WM_DELETE_WINDOW", self._on_close_request)
        self.bind("<FocusIn>", self._on_focus_in)
        self.bind("<Destroy>", self._on_destroy)
        self._build_ui()

    def _build_ui(self):
        raise NotImplementedError

    def dispatch(self, request, *args):
        return self.app.dispatcher.dispatch(request, *args)

    # WindowHandle ------------------------------------------------------------

    def focus(self):
        self.deiconify()
        self.lift()
        self.focus_force()

    def close(self):
        if not self.is_destroyed():
            self.destroy()

    def is_destroyed(self):
        try:
            return not bool(self.winfo_exists())
        except tk.TclError:
            return True

    # Events ------------------------------------------------------------------

    def _on_close_request(self):
        self.dispatch("close-window", self.role.value)

    def _on_focus_in(self, event):
        if event.widget is self:
            self.app.session.note_focus(self.role)

    def _on_destroy(self, event):
        if event.widget is self:
            self.app.session.window_closed(self.role)


class LoginWindow(AppWindow):
    def _build_ui(self):
        frame = ttk.Frame(self, padding=40)
        frame.pack(expand=True)
        ttk.Label(frame, text=self.app.settings.app_name, font=("TkDefaultFont", 18, "bold")).pack(pady=(0, 20))
        ttk.Button(frame, text="Biller", width=24, command=lambda: self.dispatch("open-home-window")).pack(pady=5)
        ttk.Button(frame, text="Admin", width=24, command=lambda: self.dispatch("open-admin-window")).pack(pady=5)
        ttk.Button(frame, text="Exit", width=24, command=self._on_close_request).pack(pady=(20, 0))


class DocumentPanel(ttk.LabelFrame):
    """Upload/list/rename/delete/open over the uploads directory."""

    def __init__(self, window: AppWindow):
        super().__init__(window, text="Documents", padding=8)
        self.window = window

        self.tree = ttk.Treeview(self, columns=("name", "modified"), show="headings", height=10)
        self.tree.heading("name", text="Name")
        self.tree.heading("modified", text="Modified")
        self.tree.column("modified", width=160, anchor=tk.W)
        self.tree.pack(fill=tk.BOTH, expand=True)
        self.tree.bind("<Double-1>", lambda _e: self._open())

        buttons = ttk.Frame(self)
        buttons.pack(fill=tk.X, pady=(8, 0))
        ttk.Button(buttons, text="Upload...", command=self._upload).pack(side=tk.LEFT)
        ttk.Button(buttons, text="Open", command=self._open).pack(side=tk.LEFT, padx=5)
        ttk.Button(buttons, text="Rename", command=self._rename).pack(side=tk.LEFT)
        ttk.Button(buttons, text="Delete", command=self._delete).pack(side=tk.LEFT, padx=5)
        ttk.Button(buttons, text="Refresh", command=self.refresh).pack(side=tk.RIGHT)
        self.refresh()

    def refresh(self):
        self.tree.delete(*self.tree.get_children())
        entries = sorted(self.window.dispatch("list-files"), key=lambda e: e["modifiedTime"], reverse=True)
        for entry in entries:
            stamp = datetime.fromtimestamp(entry["modifiedTime"] / 1000).strftime("%Y-%m-%d %H:%M")
            self.tree.insert("", tk.END, iid=entry["name"], values=(entry["name"], stamp))

    def _selected(self):
        selection = self.tree.selection()
        return selection[0] if selection else None

    def _upload(self):
        if self.window.dispatch("upload-document") is not None:
            self.refresh()

    def _open(self):
        name = self._selected()
        if name:
            self.window.dispatch("open-file", name)

    def _rename(self):
        name = self._selected()
        if not name:
            return
        new_name = simpledialog.askstring("Rename", "New name:", initialvalue=name, parent=self.window)
        if not new_name or new_name == name:
            return
        if not self.window.dispatch("rename-file", name, new_name):
            messagebox.showerror("Rename", f"Could not rename {name}.", parent=self.window)
        self.refresh()

    def _delete(self):
        name = self._selected()
        if not name or not messagebox.askyesno("Delete", f"Delete {name}?", parent=self.window):
            return
        if not self.window.dispatch("delete-file", name):
            messagebox.showerror("Delete", f"Could not delete {name}.", parent=self.window)
        self.refresh()


class HomeWindow(AppWindow):
    def _build_ui(self):
        top = ttk.Frame(self, padding=10)
        top.pack(fill=tk.X)
        ttk.Label(top, text="Biller", font=("TkDefaultFont", 14, "bold")).pack(side=tk.LEFT)
        ttk.Button(top, text="Case Rate Search", command=lambda: self.dispatch("open-race-window")).pack(side=tk.RIGHT)
        DocumentPanel(self).pack(fill=tk.BOTH, expand=True, padx=10, pady=(0, 10))


class AdminWindow(AppWindow):
    def _build_ui(self):
        data = ttk.LabelFrame(self, text="Data files", padding=8)
        data.pack(fill=tk.X, padx=10, pady=10)
        for row, kind in enumerate(("database", "requirements")):
            ttk.Label(data, text=f"{kind}.json", width=20).grid(row=row, column=0, sticky=tk.W)
            ttk.Button(data, text="Import...", command=lambda k=kind: self._import(k)).grid(row=row, column=1, padx=5)
            ttk.Button(data, text="Export...", command=lambda k=kind: self._export(k)).grid(row=row, column=2)
        DocumentPanel(self).pack(fill=tk.BOTH, expand=True, padx=10, pady=(0, 10))

    def _import(self, kind):
        try:
            content = self.dispatch("import-data", kind)
        except StoreError as exc:
            messagebox.showerror("Import failed", str(exc), parent=self)
            return
        if content is not None:
            messagebox.showinfo("Import", f"{kind}.json updated.", parent=self)

    def _export(self, kind):
        content = self.dispatch("get-data", kind)
        if self.dispatch("export-data", kind, content):
            messagebox.showinfo("Export", f"{kind}.json exported.", parent=self)


class RaceWindow(AppWindow):
    def _build_ui(self):
        self.records = self._load_records()
        self.search = tk.StringVar()
        self.search.trace_add("write", lambda *_: self._populate())

        top = ttk.Frame(self, padding=10)
        top.pack(fill=tk.X)
        ttk.Label(top, text="Search:").pack(side=tk.LEFT)
        ttk.Entry(top, textvariable=self.search, width=50).pack(side=tk.LEFT, padx=5)

        columns = []
        for record in self.records:
            for key in record:
                if key not in columns:
                    columns.append(key)
        self.tree = ttk.Treeview(self, columns=columns, show="headings")
        for column in columns:
            self.tree.heading(column, text=column.replace("_", " ").title())
        self.tree.pack(fill=tk.BOTH, expand=True, padx=10, pady=(0, 10))
        self.columns = columns
        self._populate()

    def _load_records(self):
        try:
            data = json.loads(self.dispatch("get-data", "database"))
        except json.JSONDecodeError:
            self.app.logger.warning("database.json is not valid JSON; showing no records")
            return []
        rows = data if isinstance(data, list) else [data]
        return [row if isinstance(row, dict) else {"value": row} for row in rows]

    def _populate(self):
        needle = self.search.get().strip().lower()
        self.tree.delete(*self.tree.get_children())
        for record in self.records:
            values = [record.get(column, "") for column in self.columns]
            if needle and not any(needle in str(value).lower() for value in values):
                continue
            self.tree.insert("", tk.END, values=values)


_WINDOW_CLASSES = {
    WindowRole.LOGIN: LoginWindow,
    WindowRole.HOME: HomeWindow,
    WindowRole.ADMIN: AdminWindow,
    WindowRole.RACE: RaceWindow,
}


class RaceApp:
    def __init__(self, settings: Settings | None = None, paths: AppPaths | None = None):
        self.settings = settings or load_settings()
        self.paths = paths or resolve_paths(configured=self.settings.data_dir)
        self.logger = get_logger(self.paths.logs_dir)

        self.root = tk.Tk()
        self.root.withdraw()

        self.session = AppSession(
            self._create_window,
            specs_from_settings(self.settings),
            self.paths,
            on_quit=self.root.quit,
            candidates=default_candidates(self.settings),
            logger=self.logger,
        )
        self.dispatcher = RequestDispatcher(
            DocumentStore(self.paths),
            RecordStore(self.paths),
            TkDialogs(),
            session=self.session,
            settings=self.settings,
        )

    def _create_window(self, role, spec, query):
        return _WINDOW_CLASSES[role](self, role, spec, query)

    def run(self):
        self.session.start()
        try:
            self.root.mainloop()
        finally:
            self.session.clear()
            self.root.destroy()


def main():
    RaceApp().run()


if __name__ == "__main__":
    main()
