"""Delayed tasks bound to a session's lifetime."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Protocol

from loguru import logger


class Scheduler(Protocol):
    """Runs callbacks later on the UI thread."""

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> Any:
        """Schedule ``fn`` and return a cancellation token."""

    def cancel(self, token: Any) -> None:
        """Cancel a pending callback; unknown or fired tokens are ignored."""


class AfterScheduler:
    """Scheduler on top of a Tk widget's ``after`` / ``after_cancel``."""

    def __init__(self, widget: Any) -> None:
        self._widget = widget

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> Any:
        return self._widget.after(max(0, int(delay_s * 1000)), fn)

    def cancel(self, token: Any) -> None:
        import tkinter as tk

        try:
            self._widget.after_cancel(token)
        except tk.TclError as exc:
            logger.debug(f"[timers] after_cancel failed: {exc}")


class SessionTimers:
    """Tracks pending callbacks per session so closing cancels them."""

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._pending: dict[str, dict[int, Any]] = defaultdict(dict)
        self._next_key = 0

    def schedule(self, session_id: str, delay_s: float, fn: Callable[[], None]) -> None:
        self._next_key += 1
        key = self._next_key

        def _fire() -> None:
            if self._pending.get(session_id, {}).pop(key, None) is None:
                return
            fn()

        self._pending[session_id][key] = self._scheduler.call_later(delay_s, _fire)

    def pending(self, session_id: str) -> int:
        return len(self._pending.get(session_id, {}))

    def cancel_session(self, session_id: str) -> None:
        tokens = self._pending.pop(session_id, {})
        for token in tokens.values():
            self._scheduler.cancel(token)
        if tokens:
            logger.debug(f"[timers] cancelled {len(tokens)} pending task(s) for {session_id}")

    def cancel_all(self) -> None:
        for session_id in list(self._pending):
            self.cancel_session(session_id)
