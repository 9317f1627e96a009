from __future__ import annotations

import pytest
from conftest import pump_until

from supercli.gui.tab_controller import TabController, tab_label
from supercli.session.project_store import ProjectStore
from supercli.terminal.events import SESSION_DATA, SESSION_EXITED
from supercli.terminal.models import SessionMode


class FakeSurface:
    def __init__(self, session_id: str, title: str, on_input, on_resize) -> None:
        self.session_id = session_id
        self.title = title
        self.on_input = on_input
        self.on_resize = on_resize
        self.written: list[str] = []
        self.active = False
        self.tab_visible = False
        self.exited = False
        self.disposed = False
        self.focused = 0
        self.size = (100, 40)

    def write(self, data: str) -> None:
        self.written.append(data)

    def set_active(self, active: bool) -> None:
        self.active = active

    def set_tab_visible(self, visible: bool) -> None:
        self.tab_visible = visible

    def fit(self) -> tuple[int, int]:
        return self.size

    def focus(self) -> None:
        self.focused += 1

    def mark_exited(self) -> None:
        self.exited = True

    def dispose(self) -> None:
        self.disposed = True


class RecordingStatus:
    def __init__(self) -> None:
        self.info: list[tuple[str, str]] = []
        self.flashes: list[tuple[str, str]] = []

    def set_info(self, text: str, level: str = "muted") -> None:
        self.info.append((text, level))

    def flash(self, text: str, level: str = "info", duration_ms: int | None = None) -> None:
        self.flashes.append((text, level))


@pytest.fixture
def harness(make_service, projects):
    service = make_service()
    surfaces: dict[str, FakeSurface] = {}
    prompts: list[int] = []
    status = RecordingStatus()

    def factory(session_id, title, on_input, on_resize):
        surface = FakeSurface(session_id, title, on_input, on_resize)
        surfaces[session_id] = surface
        return surface

    controller = TabController(
        service,
        projects,
        surface_factory=factory,
        on_request_session=lambda: prompts.append(1),
        project_store=ProjectStore(),
        status=status,
    )
    return controller, service, surfaces, prompts, status


def test_tab_label_capitalises_cli_name() -> None:
    assert tab_label("claude") == "Claude"
    assert tab_label("") == "Shell"


def test_open_session_activates_and_records(harness, projects, pty_factory, tmp_path) -> None:
    controller, service, surfaces, _prompts, status = harness
    controller.select_project(str(tmp_path))

    session_id = controller.open_session("claude")

    assert session_id == "terminal-0"
    surface = surfaces["terminal-0"]
    assert surface.title == "Claude"
    assert surface.active and surface.tab_visible and surface.focused
    assert projects.active_session_id == "terminal-0"
    assert pty_factory.created[0].resizes[-1] == (100, 40)
    assert status.info[-1][1] == "success"

    meta = ProjectStore().read_metadata(tmp_path)
    assert [s["id"] for s in meta["sessions"]] == ["terminal-0"]
    assert meta["sessions"][0]["cli"] == "claude"


def test_only_one_surface_is_active(harness, tmp_path) -> None:
    controller, _service, surfaces, _prompts, _status = harness
    controller.select_project(str(tmp_path))
    controller.open_session("claude")
    controller.open_session("codex")

    controller.activate("terminal-0")

    assert [s.session_id for s in surfaces.values() if s.active] == ["terminal-0"]


def test_failed_creation_disposes_surface(harness, pty_factory, spawner, projects, tmp_path) -> None:
    controller, _service, surfaces, _prompts, status = harness
    controller.select_project(str(tmp_path))
    pty_factory.error = OSError("no pty")
    spawner.error = RuntimeError("no terminal either")

    assert controller.open_session("claude") is None

    assert surfaces["terminal-0"].disposed
    assert projects.visible_sessions() == []
    assert status.flashes[-1][1] == "error"
    assert controller.session_ids() == []


def test_hidden_surface_resize_is_ignored(harness, pty_factory, tmp_path) -> None:
    controller, _service, surfaces, _prompts, _status = harness
    controller.select_project(str(tmp_path))
    controller.open_session("claude")
    controller.open_session("codex")
    first = pty_factory.created[0]
    resizes_before = list(first.resizes)

    surfaces["terminal-0"].size = (0, 0)
    controller.on_surface_resized("terminal-0")
    assert first.resizes == resizes_before

    surfaces["terminal-1"].size = (132, 50)
    controller.resize_active()
    assert pty_factory.created[1].resizes[-1] == (132, 50)


def test_closing_active_tab_activates_next_in_project(harness, projects, tmp_path) -> None:
    controller, _service, surfaces, prompts, _status = harness
    controller.select_project(str(tmp_path))
    for cli in ("claude", "codex", "gemini"):
        controller.open_session(cli)
    controller.activate("terminal-1")

    controller.close("terminal-1")

    assert surfaces["terminal-1"].disposed
    assert projects.active_session_id == "terminal-2"
    assert surfaces["terminal-2"].active
    assert prompts == []


def test_closing_last_tab_prompts_exactly_once(harness, projects, tmp_path) -> None:
    controller, service, _surfaces, prompts, status = harness
    controller.select_project(str(tmp_path))
    controller.open_session("claude")

    controller.close("terminal-0")

    assert prompts == [1]
    assert projects.active_session_id is None
    assert "terminal-0" not in service.registry
    assert status.info[-1][0] == "Ready"


def test_switch_project_shows_only_its_tabs(harness, projects, pty_factory, tmp_path) -> None:
    a, b = tmp_path / "a", tmp_path / "b"
    a.mkdir()
    b.mkdir()
    controller, service, surfaces, prompts, _status = harness

    controller.select_project(str(a))
    controller.open_session("claude")
    controller.open_session("codex")
    controller.select_project(str(b))
    controller.open_session("gemini")

    assert [sid for sid, s in surfaces.items() if s.tab_visible] == ["terminal-2"]

    controller.switch_project(str(a))

    assert [sid for sid, s in surfaces.items() if s.tab_visible] == ["terminal-0", "terminal-1"]
    assert projects.active_session_id == "terminal-0"
    assert surfaces["terminal-0"].active
    assert len(service.registry) == 3
    assert not any(p.closed for p in pty_factory.created)
    assert prompts == []


def test_switch_to_empty_project_requests_session(harness, tmp_path) -> None:
    a, b = tmp_path / "a", tmp_path / "b"
    a.mkdir()
    b.mkdir()
    controller, _service, _surfaces, prompts, _status = harness
    controller.select_project(str(b))
    controller.select_project(str(a))
    controller.open_session("claude")

    controller.switch_project(str(b))

    assert prompts == [1]


def test_keystrokes_forwarded_only_for_embedded(harness, pty_factory, tmp_path) -> None:
    controller, service, surfaces, _prompts, _status = harness
    controller.select_project(str(tmp_path))
    controller.open_session("claude")
    pty_factory.error = OSError("no pty")
    controller.open_session("codex")
    assert controller.entry("terminal-1").mode is SessionMode.EXTERNAL

    surfaces["terminal-0"].on_input("terminal-0", "a")
    surfaces["terminal-1"].on_input("terminal-1", "b")

    assert pty_factory.created[0].writes[-1] == "a"
    assert not any("b" == chunk for chunk in surfaces["terminal-1"].written)


def test_send_command_reports_mode(harness, pty_factory, tmp_path) -> None:
    controller, _service, _surfaces, _prompts, status = harness
    assert not controller.send_command("ls")
    assert status.flashes[-1] == ("No active terminal", "error")

    controller.select_project(str(tmp_path))
    controller.open_session("")
    assert controller.send_command("  ls -la  ")
    assert pty_factory.created[0].writes[-1] == "ls -la\r"
    assert status.flashes[-1][1] == "success"

    pty_factory.error = OSError("no pty")
    controller.open_session("codex")
    assert controller.send_command("run tests")
    assert status.flashes[-1][1] == "warn"

    assert not controller.send_command("   ")


def test_paste_normalises_newlines(harness, pty_factory, tmp_path) -> None:
    controller, _service, _surfaces, _prompts, _status = harness
    controller.select_project(str(tmp_path))
    controller.open_session("")

    assert controller.paste("terminal-0", "one\r\ntwo\nthree")

    assert pty_factory.created[0].writes[-1] == "one\rtwo\rthree"


def test_session_exit_marks_surface(harness, pty_factory, tmp_path) -> None:
    controller, service, surfaces, _prompts, status = harness
    controller.select_project(str(tmp_path))
    controller.open_session("claude")

    pty_factory.created[0].alive = False
    assert pump_until(service, lambda: surfaces["terminal-0"].exited)

    assert "Terminal session ended" in surfaces["terminal-0"].written[-1]
    assert status.info[-1][1] == "error"
    surfaces["terminal-0"].on_input("terminal-0", "x")
    assert "x" not in pty_factory.created[0].writes

    controller.close("terminal-0")
    assert surfaces["terminal-0"].disposed


def test_output_is_routed_by_session_id(harness, pty_factory, tmp_path) -> None:
    controller, service, surfaces, _prompts, _status = harness
    controller.select_project(str(tmp_path))
    controller.open_session("claude")
    controller.open_session("codex")

    pty_factory.created[0].feed("from-zero")
    pty_factory.created[1].feed("from-one")
    assert pump_until(
        service,
        lambda: "from-zero" in "".join(surfaces["terminal-0"].written)
        and "from-one" in "".join(surfaces["terminal-1"].written),
    )
    assert "from-one" not in "".join(surfaces["terminal-0"].written)


def test_unexpected_event_payloads_are_ignored(harness, tmp_path) -> None:
    controller, service, surfaces, _prompts, _status = harness
    controller.select_project(str(tmp_path))
    controller.open_session("claude")
    before = list(surfaces["terminal-0"].written)

    service.hub.publish(SESSION_DATA, {"session_id": "terminal-0", "data": "raw"})
    service.hub.publish(SESSION_EXITED, "terminal-0")

    assert surfaces["terminal-0"].written == before
    assert not surfaces["terminal-0"].exited
