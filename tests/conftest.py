from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import race.core.logger as core_logger
from race.core.session import WindowRole, WindowSpec
from race_persist.utils.paths import DATA_DIR_ENV, AppPaths


class FakeWindow:
    def __init__(self, role: WindowRole, spec: WindowSpec, query: Mapping[str, str] | None) -> None:
        self.role = role
        self.spec = spec
        self.query = query
        self.focus_count = 0
        self.destroyed = False

    def focus(self) -> None:
        self.focus_count += 1

    def close(self) -> None:
        self.destroyed = True

    def is_destroyed(self) -> bool:
        return self.destroyed


class FakeWindowFactory:
    def __init__(self) -> None:
        self.created: list[FakeWindow] = []

    def __call__(self, role: WindowRole, spec: WindowSpec, query: Mapping[str, str] | None) -> FakeWindow:
        window = FakeWindow(role, spec, query)
        self.created.append(window)
        return window


class FakeDialogs:
    """Returns queued answers and records what was asked."""

    def __init__(self, *answers: Path | None) -> None:
        self.answers = list(answers)
        self.calls: list[dict[str, Any]] = []

    def ask_open_file(self, parent: Any, *, title: str, filetypes: Any) -> Path | None:
        self.calls.append({"kind": "open", "parent": parent, "title": title, "filetypes": list(filetypes)})
        return self.answers.pop(0)

    def ask_save_file(self, parent: Any, *, title: str, initial_path: Path) -> Path | None:
        self.calls.append({"kind": "save", "parent": parent, "title": title, "initial_path": initial_path})
        return self.answers.pop(0)


@pytest.fixture(autouse=True)
def _isolated_data_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Keep the data root and application log inside the test's temp dir."""

    data_root = tmp_path / "appdata"
    monkeypatch.setenv(DATA_DIR_ENV, str(data_root))
    monkeypatch.delenv("RACE_SETTINGS", raising=False)
    core_logger.reset_logger()
    # Configure handlers now so they bind to pytest's stdout, not a CliRunner buffer.
    core_logger.get_logger(tmp_path / "logs")
    yield data_root
    core_logger.reset_logger()


@pytest.fixture
def paths(tmp_path: Path) -> AppPaths:
    return AppPaths(tmp_path / "appdata")


@pytest.fixture
def no_seeds() -> dict:
    return {}


@pytest.fixture
def window_factory() -> FakeWindowFactory:
    return FakeWindowFactory()


@pytest.fixture
def make_dialogs() -> Callable[..., FakeDialogs]:
    return FakeDialogs
