from conftest import ManualScheduler

from supercli.terminal.timers import SessionTimers


def test_fired_callbacks_are_forgotten() -> None:
    scheduler = ManualScheduler()
    timers = SessionTimers(scheduler)
    fired: list[str] = []

    timers.schedule("terminal-0", 0.1, lambda: fired.append("a"))
    assert timers.pending("terminal-0") == 1

    scheduler.run_all()

    assert fired == ["a"]
    assert timers.pending("terminal-0") == 0


def test_cancel_session_only_affects_that_session() -> None:
    scheduler = ManualScheduler()
    timers = SessionTimers(scheduler)
    fired: list[str] = []
    timers.schedule("terminal-0", 0.1, lambda: fired.append("zero"))
    timers.schedule("terminal-1", 0.1, lambda: fired.append("one"))

    timers.cancel_session("terminal-0")
    scheduler.run_all()

    assert fired == ["one"]


def test_cancel_all() -> None:
    scheduler = ManualScheduler()
    timers = SessionTimers(scheduler)
    timers.schedule("terminal-0", 0.1, lambda: None)
    timers.schedule("terminal-1", 0.1, lambda: None)

    timers.cancel_all()

    assert scheduler.calls == {}
