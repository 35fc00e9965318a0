"""CLI integration tests for the data root commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from race import cli


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "cli_root"


def _run(runner: CliRunner, data_dir: Path, *args: str):
    return runner.invoke(cli.app, ["--data-dir", str(data_dir), *args])


def test_init_seeds_bundled_defaults(cli_runner: CliRunner, data_dir: Path) -> None:
    result = _run(cli_runner, data_dir, "init")
    assert result.exit_code == 0, result.output
    assert "database.json seeded" in result.output
    assert (data_dir / "uploads").is_dir()

    again = _run(cli_runner, data_dir, "init")
    assert again.exit_code == 0, again.output
    assert "database.json already present" in again.output

    shown = _run(cli_runner, data_dir, "data", "show", "database")
    assert shown.exit_code == 0, shown.output
    assert "CR-1001" in shown.output


def test_paths(cli_runner: CliRunner, data_dir: Path) -> None:
    result = _run(cli_runner, data_dir, "paths")

    assert result.exit_code == 0, result.output
    assert str(data_dir.resolve() / "requirements.json") in result.output


def test_document_commands(cli_runner: CliRunner, data_dir: Path, tmp_path: Path) -> None:
    source = tmp_path / "invoice.pdf"
    source.write_bytes(b"%PDF-1.4")

    assert _run(cli_runner, data_dir, "docs", "upload", str(source)).exit_code == 0
    listed = _run(cli_runner, data_dir, "docs", "ls")
    assert "invoice.pdf" in listed.output

    assert _run(cli_runner, data_dir, "docs", "rename", "invoice.pdf", "invoice_2024.pdf").exit_code == 0
    assert _run(cli_runner, data_dir, "docs", "rename", "invoice.pdf", "other.pdf").exit_code == 1

    assert _run(cli_runner, data_dir, "docs", "rm", "invoice_2024.pdf").exit_code == 0
    assert _run(cli_runner, data_dir, "docs", "rm", "invoice_2024.pdf").exit_code == 1
    assert "<empty>" in _run(cli_runner, data_dir, "docs", "ls").output


def test_import_and_export(cli_runner: CliRunner, data_dir: Path, tmp_path: Path) -> None:
    assert _run(cli_runner, data_dir, "init").exit_code == 0
    good = tmp_path / "good.json"
    good.write_text('{"a":1}', encoding="utf-8")
    bad = tmp_path / "bad.json"
    bad.write_text("{a:1}", encoding="utf-8")

    assert _run(cli_runner, data_dir, "data", "import", "requirements", str(good)).exit_code == 0

    failed = _run(cli_runner, data_dir, "data", "import", "requirements", str(bad))
    assert failed.exit_code == 1
    assert (data_dir / "requirements.json").read_text(encoding="utf-8") == '{"a":1}'

    target = tmp_path / "out.json"
    exported = _run(cli_runner, data_dir, "data", "export", "requirements", str(target))
    assert exported.exit_code == 0, exported.output
    assert target.read_text(encoding="utf-8") == '{"a":1}'


def test_unknown_kind_fails(cli_runner: CliRunner, data_dir: Path) -> None:
    assert _run(cli_runner, data_dir, "data", "show", "invoices").exit_code == 1


def test_health(cli_runner: CliRunner, data_dir: Path) -> None:
    assert _run(cli_runner, data_dir, "init").exit_code == 0
    healthy = _run(cli_runner, data_dir, "health")
    assert healthy.exit_code == 0, healthy.output
    assert "[OK]" in healthy.output

    (data_dir / "database.json").write_text("{oops", encoding="utf-8")
    broken = _run(cli_runner, data_dir, "health")
    assert broken.exit_code == 1
    assert "database.json is not valid JSON" in broken.output


def test_bad_log_level(cli_runner: CliRunner, data_dir: Path) -> None:
    result = cli_runner.invoke(cli.app, ["--log-level", "LOUD", "--data-dir", str(data_dir), "paths"])

    assert result.exit_code != 0


def _settings_with_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    configured = tmp_path / "from_settings"
    settings_file = tmp_path / "settings.yaml"
    settings_file.write_text(f"data_dir: {configured.as_posix()}\n", encoding="utf-8")
    monkeypatch.setenv("RACE_SETTINGS", str(settings_file))
    return configured


def test_environment_overrides_configured_data_dir(
    cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    configured = _settings_with_data_dir(tmp_path, monkeypatch)
    monkeypatch.setenv("RACE_DATA_DIR", str(tmp_path / "from_env"))

    result = cli_runner.invoke(cli.app, ["paths"])

    assert result.exit_code == 0, result.output
    assert f"root:         {(tmp_path / 'from_env').resolve()}" in result.output
    assert str(configured) not in result.output


def test_configured_data_dir_used_without_environment(
    cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    configured = _settings_with_data_dir(tmp_path, monkeypatch)
    monkeypatch.delenv("RACE_DATA_DIR", raising=False)

    result = cli_runner.invoke(cli.app, ["paths"])

    assert result.exit_code == 0, result.output
    assert f"root:         {configured.resolve()}" in result.output


def test_unwritable_log_directory_exits_cleanly(
    cli_runner: CliRunner, data_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def refuse(*_args, **_kwargs):
        raise PermissionError("read-only data root")

    monkeypatch.setattr(cli, "get_logger", refuse)

    result = _run(cli_runner, data_dir, "paths")

    assert result.exit_code == 1
    assert not isinstance(result.exception, PermissionError)
