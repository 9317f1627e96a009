"""Process-wide session table."""

from __future__ import annotations

from typing import Iterator

from supercli.terminal.models import Session, SessionMode


class SessionRegistry:
    """Maps session id to its :class:`Session`.

    Only the UI thread mutates the registry. Each operation is a single
    dict operation, so an exit event handled between two calls never sees a
    half-written entry.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def add(self, session: Session) -> None:
        if session.session_id in self._sessions:
            raise ValueError(f"session {session.session_id!r} is already registered")
        self._sessions[session.session_id] = session

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def pop(self, session_id: str) -> Session | None:
        return self._sessions.pop(session_id, None)

    def ids(self) -> list[str]:
        return list(self._sessions)

    def mode_of(self, session_id: str) -> SessionMode | None:
        session = self._sessions.get(session_id)
        return session.mode if session is not None else None

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))
