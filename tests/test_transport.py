from conftest import collect_output, pump_until

from supercli.terminal.events import SESSION_EXITED


def test_external_write_logs_exactly_one_echo(make_service, scheduler, tmp_path) -> None:
    service = make_service(embedded=False)
    service.create_session("terminal-0", str(tmp_path), "claude")
    scheduler.run_all()
    output = collect_output(service)

    result = service.write_to_session("terminal-0", "fix the tests\r")

    assert result.success and result.external
    assert len(output["terminal-0"]) == 1
    echo = output["terminal-0"][0]
    assert "> fix the tests" in echo
    assert "Type this command in the external claude window" in echo


def test_embedded_write_is_forwarded_verbatim(make_service, pty_factory, tmp_path) -> None:
    service = make_service()
    service.create_session("terminal-0", str(tmp_path), "")

    result = service.write_to_session("terminal-0", "ls -la\r")

    assert result.success and not result.external
    assert pty_factory.created[0].writes[-1] == "ls -la\r"


def test_write_to_unknown_or_dead_session_fails(make_service, pty_factory, tmp_path) -> None:
    service = make_service()
    assert not service.write_to_session("nope", "x").success

    service.create_session("terminal-0", str(tmp_path), "")
    pty_factory.created[0].closed = True
    result = service.write_to_session("terminal-0", "x")
    assert not result.success and not result.external


def test_resize_clamps_and_always_succeeds(make_service, pty_factory, tmp_path) -> None:
    service = make_service()
    service.create_session("terminal-0", str(tmp_path), "")

    assert service.resize_session("terminal-0", 0, -3).success
    assert service.resize_session("terminal-0", 120, 40).success
    assert pty_factory.created[0].resizes == [(1, 1), (120, 40)]

    assert service.resize_session("missing", 80, 24).success


def test_resize_ignores_external_sessions(make_service, tmp_path) -> None:
    service = make_service(embedded=False)
    service.create_session("terminal-0", str(tmp_path), "")

    assert service.resize_session("terminal-0", 100, 30).success


def test_close_cancels_pending_external_banner(make_service, spawner, scheduler, tmp_path) -> None:
    service = make_service(embedded=False)
    output = collect_output(service)
    service.create_session("terminal-0", str(tmp_path), "codex")
    assert service.timers.pending("terminal-0") == 1

    assert service.close_session("terminal-0").success
    scheduler.run_all()

    assert service.timers.pending("terminal-0") == 0
    assert not any("Launched" in chunk for chunk in output.get("terminal-0", []))
    assert spawner.processes[0].killed


def test_close_unknown_session_reports_failure(make_service) -> None:
    service = make_service()
    assert not service.close_session("terminal-9").success


def test_close_embedded_kills_pty_and_detaches_from_project(make_service, pty_factory, projects, tmp_path) -> None:
    service = make_service()
    projects.select(tmp_path)
    service.create_session("terminal-0", str(tmp_path), "")
    projects.attach_session("terminal-0")

    assert service.close_session("terminal-0").success

    assert pty_factory.created[0].closed
    assert "terminal-0" not in service.registry
    assert projects.visible_sessions() == []
    assert not service.close_session("terminal-0").success


def test_backend_output_and_exit_flow_through_pump(make_service, pty_factory, tmp_path) -> None:
    service = make_service()
    output = collect_output(service)
    exited: list[str] = []
    service.subscribe(SESSION_EXITED, lambda ev: exited.append(ev.session_id))
    service.create_session("terminal-0", str(tmp_path), "")
    pty = pty_factory.created[0]

    pty.feed("one ")
    pty.feed("two")
    assert pump_until(service, lambda: "two" in "".join(output["terminal-0"]))
    chunks = "".join(output["terminal-0"])
    assert chunks.index("one ") < chunks.index("two")

    pty.alive = False
    assert pump_until(service, lambda: exited == ["terminal-0"])
    assert "terminal-0" not in service.registry
    assert pty.closed


def test_output_after_close_is_dropped(make_service, tmp_path) -> None:
    service = make_service()
    output = collect_output(service)
    service.create_session("terminal-0", str(tmp_path), "")
    service.close_session("terminal-0")
    before = list(output["terminal-0"])

    service.transport.on_backend_data("terminal-0", "late output")
    service.transport.on_backend_exit("terminal-0")

    assert output["terminal-0"] == before


def test_shutdown_closes_every_session(make_service, pty_factory, spawner, tmp_path) -> None:
    service = make_service()
    service.create_session("terminal-0", str(tmp_path), "")
    pty_factory.error = OSError("boom")
    service.create_session("terminal-1", str(tmp_path), "claude")

    service.shutdown()

    assert len(service.registry) == 0
    assert pty_factory.created[0].closed
    assert spawner.processes[0].killed
