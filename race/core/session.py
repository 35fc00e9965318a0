from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Protocol

from race.config import Settings
from race.core.errors import ConfigError, SessionError
from race.core.logger import get_logger
from race_persist.stores.bootstrap import BootstrapReport, CandidateSource, ensure_initialized
from race_persist.utils.paths import AppPaths


class WindowRole(str, Enum):
    LOGIN = "login"
    HOME = "home"
    ADMIN = "admin"
    RACE = "race"

    @classmethod
    def parse(cls, value: "WindowRole | str") -> "WindowRole":
        try:
            return cls(value)
        except ValueError as exc:
            raise SessionError(f"Unknown window role: {value!r}") from exc


@dataclass(frozen=True)
class WindowSpec:
    title: str
    width: int
    height: int
    min_width: int
    min_height: int
    frameless: bool = False
    data_paths: bool = True


class WindowHandle(Protocol):
    """What the session needs from a live window."""

    def focus(self) -> None: ...

    def close(self) -> None: ...

    def is_destroyed(self) -> bool: ...


WindowFactory = Callable[[WindowRole, WindowSpec, Mapping[str, str] | None], WindowHandle]


def specs_from_settings(settings: Settings) -> dict[WindowRole, WindowSpec]:
    specs: dict[WindowRole, WindowSpec] = {}
    for role in WindowRole:
        window = settings.windows.get(role.value)
        if window is None:
            raise ConfigError(f"settings.yaml does not define the {role.value} window")
        specs[role] = WindowSpec(
            title=window.title,
            width=window.width,
            height=window.height,
            min_width=window.min_width,
            min_height=window.min_height,
            frameless=window.frameless,
            data_paths=window.data_paths,
        )
    return specs


class AppSession:
    """Owns the live windows of one application run.

    At most one window per role exists; asking for an open role focuses it.
    When the last window closes, ``on_quit`` is called.
    """

    def __init__(
        self,
        factory: WindowFactory,
        specs: Mapping[WindowRole, WindowSpec],
        paths: AppPaths,
        *,
        on_quit: Callable[[], None] | None = None,
        candidates: CandidateSource | None = None,
        logger=None,
    ) -> None:
        self.factory = factory
        self.specs = dict(specs)
        self.paths = paths
        self.on_quit = on_quit
        self.candidates = candidates
        self.logger = logger or get_logger()
        self._windows: dict[WindowRole, WindowHandle] = {}
        self._focus_order: list[WindowRole] = []
        self.bootstrap_report: BootstrapReport | None = None

    def start(self) -> WindowHandle:
        """Prepare the data root and show the login window."""
        self.bootstrap_report = ensure_initialized(self.paths, candidates=self.candidates, logger=self.logger)
        return self.open(WindowRole.LOGIN)

    def is_open(self, role: WindowRole | str) -> bool:
        window = self._windows.get(WindowRole.parse(role))
        return window is not None and not window.is_destroyed()

    def open_roles(self) -> list[WindowRole]:
        return [role for role in WindowRole if self.is_open(role)]

    def get(self, role: WindowRole | str) -> WindowHandle | None:
        role = WindowRole.parse(role)
        return self._windows.get(role) if self.is_open(role) else None

    def open(self, role: WindowRole | str) -> WindowHandle:
        role = WindowRole.parse(role)
        existing = self.get(role)
        if existing is not None:
            self.focus(role)
            return existing
        spec = self.specs.get(role)
        if spec is None:
            raise SessionError(f"No window spec for {role.value}")
        query = self.paths.as_query() if spec.data_paths else None
        self.logger.info("Opening %s window", role.value)
        window = self.factory(role, spec, query)
        self._windows[role] = window
        self._touch(role)
        return window

    def focus(self, role: WindowRole | str) -> None:
        window = self.get(role)
        if window is None:
            return
        window.focus()
        self._touch(WindowRole.parse(role))

    def note_focus(self, role: WindowRole | str) -> None:
        """Record that the user focused ``role`` without refocusing it."""
        role = WindowRole.parse(role)
        if self.is_open(role):
            self._touch(role)

    def close(self, role: WindowRole | str) -> None:
        """Ask the window to close; the factory reports back via window_closed()."""
        window = self.get(role)
        if window is not None:
            window.close()
        self.window_closed(role)

    def window_closed(self, role: WindowRole | str) -> None:
        role = WindowRole.parse(role)
        if self._windows.pop(role, None) is None:
            return
        if role in self._focus_order:
            self._focus_order.remove(role)
        if not self.open_roles():
            self.logger.info("All windows closed")
            if self.on_quit is not None:
                self.on_quit()

    def active_window(self) -> WindowHandle | None:
        """Most recently focused live window, used to parent dialogs."""
        for role in reversed(self._focus_order):
            window = self.get(role)
            if window is not None:
                return window
        return None

    def activate(self) -> WindowHandle | None:
        if self.open_roles():
            return None
        return self.open(WindowRole.LOGIN)

    def clear(self) -> None:
        self._windows.clear()
        self._focus_order.clear()

    def _touch(self, role: WindowRole) -> None:
        if role in self._focus_order:
            self._focus_order.remove(role)
        self._focus_order.append(role)
