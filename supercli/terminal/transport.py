"""Bridge between session backends and the UI event stream."""

from __future__ import annotations

import queue
from typing import Callable

from loguru import logger

from supercli.terminal import banners
from supercli.terminal.channel import ChannelData, ChannelEvent, ChannelExited
from supercli.terminal.events import SESSION_DATA, SESSION_EXITED, EventHub, SessionData, SessionExited
from supercli.terminal.models import EmbeddedBackend, ExternalBackend, OpResult, Session, WriteResult
from supercli.terminal.registry import SessionRegistry
from supercli.terminal.timers import SessionTimers


class SessionTransport:
    """Fans backend output out to the UI and relays input back.

    Backend reader threads only enqueue; :meth:`pump` runs on the UI thread
    and is the only place channel events turn into registry changes.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        hub: EventHub,
        timers: SessionTimers,
        on_session_removed: Callable[[str], None] | None = None,
    ) -> None:
        self._registry = registry
        self._hub = hub
        self._timers = timers
        self._on_session_removed = on_session_removed
        self.events: "queue.Queue[ChannelEvent]" = queue.Queue()

    # ------------------------------------------------------------------ #
    # Outbound (backend -> UI)                                             #
    # ------------------------------------------------------------------ #

    def emit(self, session_id: str, data: str) -> None:
        """Publish output for a session, registered or not (status banners)."""
        self._hub.publish(SESSION_DATA, SessionData(session_id, data))

    def on_backend_data(self, session_id: str, chunk: str) -> None:
        if session_id not in self._registry:
            logger.debug(f"Dropping output for unknown/closed session {session_id!r}")
            return
        self.emit(session_id, chunk)

    def on_backend_exit(self, session_id: str) -> None:
        session = self._registry.pop(session_id)
        if session is None:
            return
        self._timers.cancel_session(session_id)
        if isinstance(session.backend, EmbeddedBackend):
            self._terminate(session)
        logger.info(f"[transport] Session {session_id} exited")
        self._hub.publish(SESSION_EXITED, SessionExited(session_id))

    def pump(self, max_events: int = 512) -> int:
        """Dispatch up to ``max_events`` queued backend events; returns count."""
        handled = 0
        while handled < max_events:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                break
            handled += 1
            if isinstance(event, ChannelData):
                self.on_backend_data(event.session_id, event.chunk)
            elif isinstance(event, ChannelExited):
                self.on_backend_exit(event.session_id)
        return handled

    # ------------------------------------------------------------------ #
    # Inbound (UI -> backend)                                              #
    # ------------------------------------------------------------------ #

    def write(self, session_id: str, data: str) -> WriteResult:
        session = self._registry.get(session_id)
        if session is None:
            return WriteResult(False)

        backend = session.backend
        if isinstance(backend, ExternalBackend):
            self.emit(session_id, banners.external_input_echo(data, session.display_label))
            return WriteResult(True, external=True)

        try:
            backend.handle.write(data)
        except Exception as exc:
            logger.warning(f"[transport] Unable to write to {session_id}: {exc}")
            return WriteResult(False)
        return WriteResult(True)

    def resize(self, session_id: str, cols: int, rows: int) -> OpResult:
        """Resize an embedded PTY. Always reports success, even for unknown ids."""
        session = self._registry.get(session_id)
        if session is None or not isinstance(session.backend, EmbeddedBackend):
            return OpResult(True)
        cols = max(int(cols or 0), 1)
        rows = max(int(rows or 0), 1)
        try:
            session.backend.handle.resize(cols, rows)
        except Exception as exc:
            logger.warning(f"Unable to resize terminal {session_id}: {exc}")
        return OpResult(True)

    def close(self, session_id: str) -> OpResult:
        session = self._registry.get(session_id)
        if session is None:
            return OpResult(False, error=f"Unknown session {session_id}")

        self._timers.cancel_session(session_id)
        self._terminate(session)
        self._registry.pop(session_id)
        if self._on_session_removed is not None:
            self._on_session_removed(session_id)
        logger.info(f"[transport] Closed session {session_id}")
        return OpResult(True)

    def shutdown(self) -> None:
        """Close every session; used on application exit."""
        for session_id in self._registry.ids():
            self.close(session_id)
        self._timers.cancel_all()

    @staticmethod
    def _terminate(session: Session) -> None:
        backend = session.backend
        if isinstance(backend, EmbeddedBackend):
            if backend.channel is not None:
                backend.channel.stop()
            try:
                backend.handle.close()
            except Exception as exc:
                logger.warning(f"Unable to kill embedded terminal for {session.session_id}: {exc}")
            return

        process = backend.process
        if process is None:
            return
        try:
            if process.poll() is None:
                process.kill()
        except Exception as exc:
            logger.warning(f"Unable to kill terminal process for {session.session_id}: {exc}")
