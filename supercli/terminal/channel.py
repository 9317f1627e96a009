"""Per-session reader threads feeding one ordered event queue."""

from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass
from typing import Union

from loguru import logger

from supercli.terminal.backend import PTYBackend


@dataclass(frozen=True)
class ChannelData:
    session_id: str
    chunk: str


@dataclass(frozen=True)
class ChannelExited:
    session_id: str


ChannelEvent = Union[ChannelData, ChannelExited]


class SessionChannel:
    """Pumps one backend's output into ``sink`` from a daemon thread.

    A single thread per backend keeps the session's chunks in emission
    order. Stopping the channel closes it: no further events are queued,
    including the exit event.
    """

    def __init__(
        self,
        session_id: str,
        backend: PTYBackend,
        sink: "queue.Queue[ChannelEvent]",
        idle_sleep_s: float = 0.01,
    ) -> None:
        self.session_id = session_id
        self._backend = backend
        self._sink = sink
        self._idle_sleep_s = idle_sleep_s
        self._running = False
        self._reader: threading.Thread | None = None

    @property
    def closed(self) -> bool:
        return not self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._reader = threading.Thread(
            target=self._read_loop,
            name=f"pty-reader-{self.session_id}",
            daemon=True,
        )
        self._reader.start()

    def stop(self) -> None:
        self._running = False

    def _read_loop(self) -> None:
        while self._running:
            try:
                data = self._backend.read()
            except Exception as exc:
                logger.debug(f"[channel] read failed for {self.session_id}: {exc}")
                break
            if data:
                if self._running:
                    self._sink.put(ChannelData(self.session_id, data))
                continue
            if not self._backend.is_alive():
                break
            time.sleep(self._idle_sleep_s)

        if self._running:
            self._running = False
            self._sink.put(ChannelExited(self.session_id))
