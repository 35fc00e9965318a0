from __future__ import annotations

from pathlib import Path

import pytest

from race.config import SETTINGS_ENV, load_settings, seed_candidates
from race.core.errors import ConfigError
from race.core.session import WindowRole, specs_from_settings


def test_bundled_settings_define_every_window() -> None:
    settings = load_settings()
    specs = specs_from_settings(settings)

    assert set(specs) == set(WindowRole)
    assert specs[WindowRole.LOGIN].frameless
    assert not specs[WindowRole.LOGIN].data_paths
    assert specs[WindowRole.RACE].title == "RACE 2025 - Case Rate Search"
    assert "pdf" in settings.upload_extensions


def test_settings_path_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    custom = tmp_path / "settings.yaml"
    custom.write_text("app_name: Test Shell\nseed_dirs: [/opt/race/seeds]\n", encoding="utf-8")
    monkeypatch.setenv(SETTINGS_ENV, str(custom))

    settings = load_settings()

    assert settings.app_name == "Test Shell"
    assert seed_candidates("database.json", settings)[-1] == Path("/opt/race/seeds/database.json")


def test_missing_window_role_is_a_config_error(tmp_path: Path) -> None:
    custom = tmp_path / "settings.yaml"
    custom.write_text("windows:\n  login:\n    title: Login\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        specs_from_settings(load_settings(custom))


@pytest.mark.parametrize(
    "content",
    ["- just\n- a list\n", "windows: [unclosed\n", "windows:\n  home:\n    width: 10\n"],
)
def test_malformed_settings(tmp_path: Path, content: str) -> None:
    custom = tmp_path / "settings.yaml"
    custom.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(custom)


def test_missing_settings_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "absent.yaml")
