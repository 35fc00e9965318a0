"""Configuration helpers for R.A.C.E runtime files.

Loads ``settings.yaml`` (window layout, upload filters, extra seed
directories) into a validated model and locates bundled resources both in
a source checkout and inside a frozen build.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict, List

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from race.core.errors import ConfigError


load_dotenv(override=False)

CONFIG_DIR = Path(__file__).resolve().parent
DEFAULT_SETTINGS_PATH = CONFIG_DIR / "settings.yaml"
SETTINGS_ENV = "RACE_SETTINGS"
ROOT_ENV = "RACE_ROOT"


class WindowSettings(BaseModel):
    """Geometry and behaviour of one application window."""

    model_config = ConfigDict(extra="allow")

    title: str
    width: int = 800
    height: int = 600
    min_width: int = 400
    min_height: int = 300
    frameless: bool = False
    data_paths: bool = True


class Settings(BaseModel):
    """Complete settings file model."""

    model_config = ConfigDict(extra="allow")

    app_name: str = "RACE 2025"
    data_dir: Path | None = None
    upload_extensions: List[str] = Field(default_factory=lambda: ["pdf", "docx", "xlsx", "png", "jpg", "jpeg"])
    import_extensions: List[str] = Field(default_factory=lambda: ["json"])
    seed_dirs: List[Path] = Field(default_factory=list)
    windows: Dict[str, WindowSettings] = Field(default_factory=dict)


def _is_frozen() -> bool:
    return getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS")


def _project_root() -> Path:
    env = os.getenv(ROOT_ENV)
    if env:
        return Path(env)
    # In source layout, this file is under <root>/race/config
    return Path(__file__).resolve().parents[2]


def _resources_root() -> Path:
    """Directory holding the ``race`` package data.

    - Frozen: the PyInstaller extraction directory
    - Source/installed: the directory containing the ``race`` package
    """
    if _is_frozen():
        return Path(getattr(sys, "_MEIPASS"))  # type: ignore[arg-type]
    return Path(__file__).resolve().parents[2]


def bundled_defaults_dir() -> Path:
    return _resources_root() / "race" / "defaults"


def seed_candidates(file_name: str, settings: Settings | None = None) -> list[Path]:
    """Ordered places to look for the seed copy of a record document.

    Packaged location first, then the development tree, then any ``seed_dirs``.
    """
    candidates = [bundled_defaults_dir() / file_name, _project_root() / file_name]
    if settings is not None:
        candidates.extend(Path(directory).expanduser() / file_name for directory in settings.seed_dirs)
    return candidates


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from ``settings.yaml`` (or ``$RACE_SETTINGS``)."""

    settings_path = Path(path) if path else Path(os.getenv(SETTINGS_ENV) or DEFAULT_SETTINGS_PATH)
    raw = _load_yaml(settings_path)
    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings file {settings_path}: {exc}") from exc


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Settings file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Settings file is not valid YAML: {path}") from exc
    if not isinstance(data, dict):
        raise ConfigError("Settings must be a mapping")
    return data
