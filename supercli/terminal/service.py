"""Boundary facade exposed to the GUI shell."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from loguru import logger

from supercli.config.schema import TerminalConfig
from supercli.terminal.backend import PTYCapability
from supercli.terminal.events import EventHandler, EventHub
from supercli.terminal.launcher import BackendFactory, BackendLauncher, ExternalSpawner
from supercli.terminal.models import CreateResult, OpResult, SessionMode, WriteResult
from supercli.terminal.registry import SessionRegistry
from supercli.terminal.timers import Scheduler, SessionTimers
from supercli.terminal.transport import SessionTransport

if TYPE_CHECKING:
    from supercli.session.project_store import ProjectRegistry


class TerminalService:
    """createSession / writeToSession / resizeSession / closeSession.

    Owns the session registry, the launcher and the transport, and wires
    session removal into the project registry so tab order never keeps a
    closed id.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        settings: TerminalConfig | None = None,
        projects: "ProjectRegistry | None" = None,
        capability: PTYCapability | None = None,
        backend_factory: BackendFactory | None = None,
        external_spawner: ExternalSpawner | None = None,
        platform: str | None = None,
    ) -> None:
        self.hub = EventHub()
        self.registry = SessionRegistry()
        self._projects = projects
        self._timers = SessionTimers(scheduler)
        self.transport = SessionTransport(
            self.registry,
            self.hub,
            self._timers,
            on_session_removed=self._forget_session,
        )
        extra: dict[str, Callable] = {}
        if backend_factory is not None:
            extra["backend_factory"] = backend_factory
        if external_spawner is not None:
            extra["external_spawner"] = external_spawner
        self.launcher = BackendLauncher(
            self.registry,
            emit=self.transport.emit,
            timers=self._timers,
            sink=self.transport.events,
            settings=settings,
            capability=capability,
            platform=platform,
            **extra,
        )
        self._creating: set[str] = set()
        self._close_after_create: set[str] = set()

    @property
    def timers(self) -> SessionTimers:
        return self._timers

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self.hub.subscribe(event_name, handler)

    def mode_of(self, session_id: str) -> SessionMode | None:
        return self.registry.mode_of(session_id)

    def is_creating(self, session_id: str) -> bool:
        return session_id in self._creating

    def create_session(
        self,
        session_id: str,
        cwd: str,
        cli_command: str = "",
        project_path: str | None = None,
    ) -> CreateResult:
        self._creating.add(session_id)
        try:
            result = self.launcher.create_session(session_id, cwd, cli_command, project_path)
        finally:
            self._creating.discard(session_id)

        if session_id in self._close_after_create:
            self._close_after_create.discard(session_id)
            if session_id in self.registry:
                logger.info(f"Closing {session_id}: close was requested during creation")
                self.transport.close(session_id)
        return result

    def write_to_session(self, session_id: str, data: str) -> WriteResult:
        return self.transport.write(session_id, data)

    def resize_session(self, session_id: str, cols: int, rows: int) -> OpResult:
        return self.transport.resize(session_id, cols, rows)

    def close_session(self, session_id: str) -> OpResult:
        if session_id in self._creating:
            self._close_after_create.add(session_id)
            return OpResult(False, error=f"Session {session_id} is still starting")
        return self.transport.close(session_id)

    def pump(self, max_events: int = 512) -> int:
        return self.transport.pump(max_events)

    def shutdown(self) -> None:
        self.transport.shutdown()

    def _forget_session(self, session_id: str) -> None:
        if self._projects is not None:
            self._projects.detach_session(session_id)
