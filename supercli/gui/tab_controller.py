"""Tab and terminal-surface bookkeeping, pure Python, no tkinter."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Protocol

from loguru import logger

from supercli.session.project_store import Project, ProjectRegistry, ProjectStore
from supercli.terminal import banners
from supercli.terminal.events import SESSION_DATA, SESSION_EXITED, SessionData, SessionExited
from supercli.terminal.models import SessionMode
from supercli.terminal.service import TerminalService

OnInput = Callable[[str, str], None]
OnResize = Callable[[str], None]


class TerminalSurface(Protocol):
    """One terminal view plus its tab indicator."""

    def write(self, data: str) -> None: ...

    def set_active(self, active: bool) -> None: ...

    def set_tab_visible(self, visible: bool) -> None: ...

    def fit(self) -> tuple[int, int]: ...

    def focus(self) -> None: ...

    def mark_exited(self) -> None: ...

    def dispose(self) -> None: ...


SurfaceFactory = Callable[[str, str, OnInput, OnResize], TerminalSurface]


class StatusSink(Protocol):
    def set_info(self, text: str, level: str = "muted") -> None: ...

    def flash(self, text: str, level: str = "info", duration_ms: int | None = None) -> None: ...


class _NullStatus:
    def set_info(self, text: str, level: str = "muted") -> None:
        del text, level

    def flash(self, text: str, level: str = "info", duration_ms: int | None = None) -> None:
        del text, level, duration_ms


@dataclass
class TabEntry:
    session_id: str
    surface: TerminalSurface
    cli_command: str
    mode: SessionMode | None = None
    exited: bool = False

    @property
    def label(self) -> str:
        return self.cli_command.strip() or "shell"


def tab_label(cli_command: str) -> str:
    """Tab caption: the CLI name with a capital first letter."""
    name = (cli_command or "").strip() or "shell"
    return name[:1].upper() + name[1:]


class TabController:
    """Keeps exactly one terminal surface visible.

    Hidden surfaces stay alive so scrollback and running processes survive
    tab and project switches.
    """

    def __init__(
        self,
        service: TerminalService,
        projects: ProjectRegistry,
        surface_factory: SurfaceFactory,
        on_request_session: Callable[[], None],
        project_store: ProjectStore | None = None,
        status: StatusSink | None = None,
    ) -> None:
        self._service = service
        self._projects = projects
        self._surface_factory = surface_factory
        self._on_request_session = on_request_session
        self._project_store = project_store
        self._status: StatusSink = status or _NullStatus()
        self._entries: dict[str, TabEntry] = {}
        self._counter = 0

        service.subscribe(SESSION_DATA, self._on_session_data)
        service.subscribe(SESSION_EXITED, self._on_session_exited)

    @property
    def active_session_id(self) -> str | None:
        return self._projects.active_session_id

    def entry(self, session_id: str) -> TabEntry | None:
        return self._entries.get(session_id)

    def session_ids(self) -> list[str]:
        return list(self._entries)

    # ------------------------------------------------------------------ #
    # Projects                                                             #
    # ------------------------------------------------------------------ #

    def select_project(self, path: str, prompt_if_empty: bool = False) -> Project:
        """Activate a folder chosen in the picker, creating it on first use."""
        project = self._projects.select(path)
        if self._project_store is not None:
            try:
                self._project_store.ensure_structure(project.path)
            except OSError as exc:
                logger.warning(f"Unable to create project structure in {project.path}: {exc}")
        self._render_tabs(prompt_if_empty)
        return project

    def switch_project(self, path: str) -> Project:
        """Show another already-open project; its sessions kept running."""
        project = self._projects.switch(path)
        self._render_tabs(prompt_if_empty=True)
        return project

    def _render_tabs(self, prompt_if_empty: bool) -> None:
        for entry in self._entries.values():
            entry.surface.set_active(False)
            entry.surface.set_tab_visible(False)
        for session_id in self._projects.visible_sessions():
            entry = self._entries.get(session_id)
            if entry is not None:
                entry.surface.set_tab_visible(True)

        active = self._projects.active_session_id
        if active is not None and active in self._entries:
            self.activate(active)
            return
        self._status.set_info("Ready")
        if prompt_if_empty:
            self._on_request_session()

    # ------------------------------------------------------------------ #
    # Session lifecycle                                                    #
    # ------------------------------------------------------------------ #

    def open_session(self, cli_command: str, cwd: str | None = None) -> str | None:
        """Create a session in the active project and show it."""
        session_id = f"terminal-{self._counter}"
        self._counter += 1
        project = self._projects.active_project
        workdir = cwd or (project.path if project is not None else os.getcwd())

        surface = self._surface_factory(
            session_id,
            tab_label(cli_command),
            self._forward_input,
            self.on_surface_resized,
        )
        entry = TabEntry(session_id=session_id, surface=surface, cli_command=cli_command or "")
        self._entries[session_id] = entry

        result = self._service.create_session(
            session_id,
            workdir,
            cli_command or "",
            project.path if project is not None else None,
        )
        if not result.success or session_id not in self._service.registry:
            logger.error(f"Failed to create terminal {session_id}: {result.error or 'closed during startup'}")
            self._entries.pop(session_id, None)
            surface.dispose()
            if not result.success:
                self._status.flash(result.error or "Unable to start terminal session", "error")
            return None

        entry.mode = result.mode
        self._projects.attach_session(session_id)
        if project is not None and self._project_store is not None:
            try:
                self._project_store.record_session(project.path, session_id, cli_command or "")
            except OSError as exc:
                logger.warning(f"Unable to record session in {project.path}: {exc}")
        surface.set_tab_visible(True)
        self.activate(session_id)
        return session_id

    def activate(self, session_id: str) -> bool:
        for entry in self._entries.values():
            entry.surface.set_active(False)

        entry = self._entries.get(session_id)
        if entry is None or session_id not in self._projects.visible_sessions():
            self._status.set_info("Ready")
            return False

        entry.surface.set_active(True)
        self._projects.set_active_session(session_id)
        self._refit(entry)
        entry.surface.focus()
        self._update_info(entry)
        return True

    def close(self, session_id: str) -> None:
        if self._service.is_creating(session_id):
            self._service.close_session(session_id)
            return

        visible = self._projects.visible_sessions()
        was_active = self._projects.active_session_id == session_id
        position = visible.index(session_id) if session_id in visible else 0

        result = self._service.close_session(session_id)
        if not result.success:
            logger.debug(f"close_session({session_id}) -> {result.error}")
        self._projects.detach_session(session_id)

        entry = self._entries.pop(session_id, None)
        if entry is not None:
            entry.surface.dispose()

        if not was_active:
            return
        remaining = self._projects.visible_sessions()
        if remaining:
            self.activate(remaining[min(position, len(remaining) - 1)])
            return
        self._projects.set_active_session(None)
        self._status.set_info("Ready")
        self._on_request_session()

    def shutdown(self) -> None:
        self._service.shutdown()

    # ------------------------------------------------------------------ #
    # Resize / input                                                       #
    # ------------------------------------------------------------------ #

    def on_surface_resized(self, session_id: str) -> None:
        """Container resized; hidden surfaces are ignored (they fit to 0x0)."""
        if session_id != self._projects.active_session_id:
            return
        entry = self._entries.get(session_id)
        if entry is not None:
            self._refit(entry)

    def resize_active(self) -> None:
        active = self._projects.active_session_id
        if active is not None:
            self.on_surface_resized(active)

    def send_command(self, text: str) -> bool:
        """Submit a line from the input bar to the active session."""
        command = text.strip()
        if not command:
            return False
        active = self._projects.active_session_id
        entry = self._entries.get(active) if active is not None else None
        if entry is None:
            self._status.flash("No active terminal", "error")
            return False

        result = self._service.write_to_session(entry.session_id, f"{command}\r")
        if not result.success:
            self._status.flash(f"{entry.label} session is not running", "error")
            return False
        if result.external:
            self._status.flash(
                f"Command logged - run it inside the external {entry.label} window",
                "warn",
                4000,
            )
        else:
            self._status.flash("Command sent to embedded terminal", "success", 2500)
        return True

    def paste(self, session_id: str, text: str) -> bool:
        """Paste clipboard text into an embedded session as typed input."""
        entry = self._entries.get(session_id)
        if entry is None or entry.mode is not SessionMode.EMBEDDED or not text:
            return False
        normalized = text.replace("\r\n", "\r").replace("\n", "\r")
        return self._service.write_to_session(session_id, normalized).success

    def _forward_input(self, session_id: str, data: str) -> None:
        entry = self._entries.get(session_id)
        if entry is None or entry.exited or entry.mode is not SessionMode.EMBEDDED:
            return
        self._service.write_to_session(session_id, data)

    def _refit(self, entry: TabEntry) -> None:
        cols, rows = entry.surface.fit()
        self._service.resize_session(entry.session_id, cols, rows)

    # ------------------------------------------------------------------ #
    # Event routing                                                        #
    # ------------------------------------------------------------------ #

    def _on_session_data(self, payload: object) -> None:
        if not isinstance(payload, SessionData):
            return
        entry = self._entries.get(payload.session_id)
        if entry is None:
            logger.debug(f"Terminal {payload.session_id} not found for output")
            return
        entry.surface.write(payload.data)

    def _on_session_exited(self, payload: object) -> None:
        if not isinstance(payload, SessionExited):
            return
        entry = self._entries.get(payload.session_id)
        if entry is None:
            return
        entry.exited = True
        entry.surface.write(banners.session_ended())
        entry.surface.mark_exited()
        if payload.session_id == self._projects.active_session_id:
            self._update_info(entry)

    def _update_info(self, entry: TabEntry) -> None:
        if entry.exited:
            self._status.set_info(f"{entry.label} session ended. Close the tab or open a new one.", "error")
        elif entry.mode is SessionMode.EMBEDDED:
            self._status.set_info(
                f"Connected to {entry.label}. Type below or click the terminal pane to interact.",
                "success",
            )
        else:
            self._status.set_info(
                f"External {entry.label} window opened. Use that window to run commands; "
                "this log keeps status only.",
                "warn",
            )
