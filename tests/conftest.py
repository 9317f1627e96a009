from __future__ import annotations

import queue
import time
from typing import Callable

import pytest

from supercli.config.schema import TerminalConfig
from supercli.session.project_store import ProjectRegistry
from supercli.terminal.backend import PTYCapability
from supercli.terminal.external import ExternalLaunch
from supercli.terminal.service import TerminalService


class ManualScheduler:
    """Scheduler whose callbacks only run when the test says so."""

    def __init__(self) -> None:
        self.calls: dict[int, tuple[float, Callable[[], None]]] = {}
        self._next = 0

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> int:
        self._next += 1
        self.calls[self._next] = (delay_s, fn)
        return self._next

    def cancel(self, token: int) -> None:
        self.calls.pop(token, None)

    def run_all(self) -> None:
        pending = list(self.calls.values())
        self.calls.clear()
        for _delay, fn in pending:
            fn()


class FakePTY:
    def __init__(self, shell, cols=80, rows=30, cwd=None, env=None) -> None:
        self.shell = shell
        self.cols = cols
        self.rows = rows
        self.cwd = cwd
        self.env = env or {}
        self.writes: list[str] = []
        self.resizes: list[tuple[int, int]] = []
        self.closed = False
        self.alive = True
        self._chunks: "queue.Queue[str]" = queue.Queue()

    def feed(self, data: str) -> None:
        self._chunks.put(data)

    def read(self) -> str:
        try:
            return self._chunks.get(timeout=0.01)
        except queue.Empty:
            return ""

    def write(self, data: str) -> None:
        if self.closed:
            raise OSError("pty closed")
        self.writes.append(data)

    def resize(self, cols: int, rows: int) -> None:
        self.resizes.append((cols, rows))

    def is_alive(self) -> bool:
        return self.alive and not self.closed

    def close(self) -> None:
        self.closed = True


class FakeProcess:
    def __init__(self) -> None:
        self.killed = False

    def poll(self):
        return -9 if self.killed else None

    def kill(self) -> None:
        self.killed = True


class PTYFactory:
    def __init__(self) -> None:
        self.created: list[FakePTY] = []
        self.error: Exception | None = None

    def __call__(self, shell, cols=80, rows=30, cwd=None, env=None) -> FakePTY:
        if self.error is not None:
            raise self.error
        pty = FakePTY(shell, cols=cols, rows=rows, cwd=cwd, env=env)
        self.created.append(pty)
        return pty


class Spawner:
    def __init__(self) -> None:
        self.launches: list[ExternalLaunch] = []
        self.processes: list[FakeProcess] = []
        self.error: Exception | None = None

    def __call__(self, launch: ExternalLaunch) -> FakeProcess:
        self.launches.append(launch)
        if self.error is not None:
            raise self.error
        process = FakeProcess()
        self.processes.append(process)
        return process


def pump_until(service: TerminalService, predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        service.pump()
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def pty_factory() -> PTYFactory:
    return PTYFactory()


@pytest.fixture
def spawner() -> Spawner:
    return Spawner()


@pytest.fixture
def projects() -> ProjectRegistry:
    return ProjectRegistry()


@pytest.fixture
def make_service(scheduler, pty_factory, spawner, projects):
    created: list[TerminalService] = []

    def _make(embedded: bool = True) -> TerminalService:
        service = TerminalService(
            scheduler,
            settings=TerminalConfig(shell="/bin/bash"),
            projects=projects,
            capability=PTYCapability(embedded, "fake", "" if embedded else "not installed"),
            backend_factory=pty_factory,
            external_spawner=spawner,
            platform="linux",
        )
        created.append(service)
        return service

    yield _make
    for service in created:
        service.shutdown()


def collect_output(service: TerminalService) -> dict[str, list[str]]:
    from supercli.terminal.events import SESSION_DATA

    collected: dict[str, list[str]] = {}
    service.subscribe(SESSION_DATA, lambda ev: collected.setdefault(ev.session_id, []).append(ev.data))
    return collected
