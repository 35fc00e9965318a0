from __future__ import annotations

import json
from pathlib import Path

import pytest

from race.config import bundled_defaults_dir
from race_persist.schemas.records import RecordKind
from race_persist.stores.base_store import LocalFileSystem, StoreInitializationError
from race_persist.stores import bootstrap
from race_persist.stores.bootstrap import default_candidates, ensure_initialized
from race_persist.utils.paths import AppPaths


def _snapshot(root: Path) -> dict[str, str | None]:
    return {
        str(path.relative_to(root)): path.read_text(encoding="utf-8") if path.is_file() else None
        for path in sorted(root.rglob("*"))
    }


class FailingCopyFS(LocalFileSystem):
    def copy_file(self, source: Path, dest: Path) -> None:
        raise PermissionError("read-only bundle")


class FailingMkdirFS(LocalFileSystem):
    def make_dirs(self, path: Path) -> None:
        raise PermissionError("no home directory")


def test_fresh_install_without_defaults_writes_placeholders(paths: AppPaths, no_seeds: dict) -> None:
    report = ensure_initialized(paths, candidates=no_seeds)

    assert paths.uploads_dir.is_dir()
    for kind in RecordKind:
        assert paths.record_path(kind).read_text(encoding="utf-8") == "[]"
    assert sorted(report.placeholders) == ["database", "requirements"]
    assert report.degraded


def test_first_existing_candidate_is_copied(paths: AppPaths, tmp_path: Path) -> None:
    packaged = tmp_path / "packaged"
    development = tmp_path / "dev"
    packaged.mkdir()
    development.mkdir()
    (development / "database.json").write_text('[{"source": "dev"}]', encoding="utf-8")
    (packaged / "requirements.json").write_text('[{"source": "packaged"}]', encoding="utf-8")
    (development / "requirements.json").write_text('[{"source": "dev"}]', encoding="utf-8")

    def candidates(kind: RecordKind) -> list[Path]:
        return [packaged / kind.file_name, development / kind.file_name]

    report = ensure_initialized(paths, candidates=candidates)

    assert json.loads(paths.record_path("database").read_text(encoding="utf-8")) == [{"source": "dev"}]
    assert json.loads(paths.record_path("requirements").read_text(encoding="utf-8")) == [{"source": "packaged"}]
    assert report.seeded == {
        "database": development / "database.json",
        "requirements": packaged / "requirements.json",
    }
    assert not report.degraded


def test_bootstrap_is_idempotent_and_never_overwrites(paths: AppPaths, no_seeds: dict) -> None:
    ensure_initialized(paths, candidates=no_seeds)
    first = _snapshot(paths.root)

    ensure_initialized(paths, candidates=no_seeds)
    assert _snapshot(paths.root) == first

    paths.record_path("database").write_text('[{"code": "X"}]', encoding="utf-8")
    report = ensure_initialized(paths, candidates=no_seeds)

    assert paths.record_path("database").read_text(encoding="utf-8") == '[{"code": "X"}]'
    assert sorted(report.existing) == ["database", "requirements"]


def test_copy_failure_does_not_abort_startup(paths: AppPaths, tmp_path: Path) -> None:
    seed = tmp_path / "seed.json"
    seed.write_text("[]", encoding="utf-8")

    report = ensure_initialized(paths, fs=FailingCopyFS(), candidates=lambda kind: [seed])

    assert len(report.errors) == 2
    assert paths.uploads_dir.is_dir()
    assert not paths.record_path("database").exists()


def test_directory_creation_failure_raises(paths: AppPaths, no_seeds: dict) -> None:
    with pytest.raises(StoreInitializationError):
        ensure_initialized(paths, fs=FailingMkdirFS(), candidates=no_seeds)


def test_default_candidates_prefer_bundled_defaults(paths: AppPaths) -> None:
    candidates = default_candidates()(RecordKind.DATABASE)
    assert candidates[0] == bundled_defaults_dir() / "database.json"

    report = ensure_initialized(paths)

    assert report.seeded["database"] == bundled_defaults_dir() / "database.json"
    assert isinstance(json.loads(paths.record_path("database").read_text(encoding="utf-8")), list)


def test_logger_setup_failure_raises_initialization_error(
    paths: AppPaths, no_seeds: dict, monkeypatch: pytest.MonkeyPatch
) -> None:
    def refuse(*_args, **_kwargs):
        raise PermissionError("logs directory is read-only")

    monkeypatch.setattr(bootstrap, "get_logger", refuse)

    with pytest.raises(StoreInitializationError):
        ensure_initialized(paths, candidates=no_seeds)
