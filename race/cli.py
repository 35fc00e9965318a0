"""Typer based command line entry points for R.A.C.E."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from race.config import Settings, load_settings
from race.core.errors import RaceError
from race.core.logger import get_logger
from race_persist.stores.base_store import StoreError
from race_persist.stores.bootstrap import default_candidates, ensure_initialized
from race_persist.stores.document_store import DocumentStore
from race_persist.stores.health import healthcheck
from race_persist.stores.record_store import RecordStore
from race_persist.utils.paths import AppPaths, resolve_paths

app = typer.Typer(help="R.A.C.E application data and document store.")
docs_app = typer.Typer(name="docs", help="Manage uploaded documents.")
data_app = typer.Typer(name="data", help="Read, import and export the JSON record documents.")
app.add_typer(docs_app, name="docs")
app.add_typer(data_app, name="data")


@dataclass
class CliState:
    settings: Settings
    paths: AppPaths


def _state(ctx: typer.Context) -> CliState:
    return ctx.find_root().obj


def _handle_error(exc: Exception) -> None:
    logging.getLogger("race").error("race operation failed: %s", exc, exc_info=True)
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        help="Alternate application data root (defaults to the per-user data directory).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    level_value = getattr(logging, log_level.upper(), None)
    if not isinstance(level_value, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")

    try:
        settings = load_settings()
        paths = resolve_paths(data_dir, configured=settings.data_dir)
        get_logger(paths.logs_dir, level=level_value)
    except (RaceError, StoreError) as exc:
        _handle_error(exc)
    except OSError as exc:
        _handle_error(StoreError(f"Cannot prepare log directory: {exc}"))

    ctx.obj = CliState(settings=settings, paths=paths)


@app.command("init")
def init_command(ctx: typer.Context) -> None:
    """Create the data root and seed missing record documents."""

    state = _state(ctx)
    try:
        report = ensure_initialized(state.paths, candidates=default_candidates(state.settings))
    except StoreError as exc:
        _handle_error(exc)
    typer.echo(f"data root ready: {report.root}")
    for kind, source in report.seeded.items():
        typer.echo(f"  {kind}.json seeded from {source}")
    for kind in report.placeholders:
        typer.secho(f"  {kind}.json missing from bundle, wrote []", fg=typer.colors.YELLOW)
    for kind in report.existing:
        typer.echo(f"  {kind}.json already present")
    for issue in report.errors:
        typer.secho(f"  error: {issue}", fg=typer.colors.RED)


@app.command("paths")
def paths_command(ctx: typer.Context) -> None:
    """Show where the application keeps its data."""

    paths = _state(ctx).paths
    typer.echo(f"root:         {paths.root}")
    typer.echo(f"database:     {paths.record_path('database')}")
    typer.echo(f"requirements: {paths.record_path('requirements')}")
    typer.echo(f"uploads:      {paths.uploads_dir}")
    typer.echo(f"logs:         {paths.logs_dir}")


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Check that the data root is writable and the record documents parse."""

    health = healthcheck(_state(ctx).paths)
    for path, ok in health.writable_paths.items():
        typer.echo(f"writable {path}: {'yes' if ok else 'no'}")
    for name, ok in health.documents.items():
        typer.echo(f"document {name}: {'OK' if ok else 'FAIL'}")
    if health.issues:
        typer.echo("issues:")
        for issue in health.issues:
            typer.echo(f"  - {issue}")
    if not health.is_healthy():
        raise typer.Exit(code=1)
    typer.echo("[OK] data root healthy")


@app.command("gui")
def gui_command(ctx: typer.Context) -> None:
    """Launch the desktop windows."""

    from race.app_gui.main_gui import RaceApp

    state = _state(ctx)
    RaceApp(settings=state.settings, paths=state.paths).run()


@docs_app.command("ls")
def docs_list(ctx: typer.Context) -> None:
    """List uploaded documents, newest first."""

    entries = DocumentStore(_state(ctx).paths).list_documents()
    if not entries:
        typer.echo("<empty>")
        return
    for entry in sorted(entries, key=lambda e: e.modified_time, reverse=True):
        stamp = datetime.fromtimestamp(entry.modified_time / 1000).strftime("%Y-%m-%d %H:%M:%S")
        typer.echo(f"{stamp}  {entry.name}")


@docs_app.command("upload")
def docs_upload(
    ctx: typer.Context,
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="File to copy in."),
) -> None:
    """Copy a file into the uploads directory."""

    entry = DocumentStore(_state(ctx).paths).upload(source)
    if entry is None:
        _handle_error(StoreError(f"Upload of {source} failed"))
    typer.echo(f"uploaded {entry.name}")


@docs_app.command("rename")
def docs_rename(ctx: typer.Context, old_name: str, new_name: str) -> None:
    """Rename an uploaded document."""

    if not DocumentStore(_state(ctx).paths).rename(old_name, new_name):
        _handle_error(StoreError(f"No document named {old_name}"))
    typer.echo(f"renamed {old_name} -> {new_name}")


@docs_app.command("rm")
def docs_delete(ctx: typer.Context, name: str) -> None:
    """Delete an uploaded document."""

    if not DocumentStore(_state(ctx).paths).delete(name):
        _handle_error(StoreError(f"No document named {name}"))
    typer.echo(f"deleted {name}")


@docs_app.command("open")
def docs_open(ctx: typer.Context, name: str) -> None:
    """Open an uploaded document with the system default application."""

    DocumentStore(_state(ctx).paths).open_externally(name)


@data_app.command("show")
def data_show(ctx: typer.Context, kind: str = typer.Argument(..., help="database or requirements")) -> None:
    """Print the raw JSON of a record document."""

    try:
        typer.echo(RecordStore(_state(ctx).paths).read(kind))
    except StoreError as exc:
        _handle_error(exc)


@data_app.command("import")
def data_import(
    ctx: typer.Context,
    kind: str = typer.Argument(..., help="database or requirements"),
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
) -> None:
    """Replace a record document with a JSON file."""

    try:
        RecordStore(_state(ctx).paths).replace(kind, source)
    except StoreError as exc:
        _handle_error(exc)
    typer.echo(f"imported {source} as {kind}")


@data_app.command("export")
def data_export(
    ctx: typer.Context,
    kind: str = typer.Argument(..., help="database or requirements"),
    destination: Path = typer.Argument(..., dir_okay=False),
) -> None:
    """Write a record document to another location."""

    store = RecordStore(_state(ctx).paths)
    try:
        written = store.export(kind, store.read(kind), destination)
    except StoreError as exc:
        _handle_error(exc)
    if not written:
        _handle_error(StoreError(f"Cannot write {destination}"))
    typer.echo(f"exported {kind} -> {destination}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
