"""Session event contracts and lightweight signal bus."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

EventHandler = Callable[[object], None]

SESSION_DATA = "session_data"
SESSION_EXITED = "session_exited"


@dataclass(frozen=True)
class SessionData:
    """Output bytes for one session, delivered in emission order."""

    session_id: str
    data: str


@dataclass(frozen=True)
class SessionExited:
    """Backend process for a session has ended."""

    session_id: str


class EventHub:
    """Simple in-process pub/sub for the terminal core and the GUI."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._handlers[event_name].append(handler)

    def unsubscribe(self, event_name: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event_name: str, payload: object) -> None:
        for handler in list(self._handlers.get(event_name, [])):
            handler(payload)
