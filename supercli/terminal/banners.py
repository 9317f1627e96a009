"""ANSI status lines written into session output."""

from __future__ import annotations

RESET = "\x1b[0m"
RED = "\x1b[31m"
GREEN = "\x1b[32m"
YELLOW = "\x1b[33m"
GREY = "\x1b[90m"

CRLF = "\r\n"


def ok(text: str) -> str:
    return f"{GREEN}[ok]{RESET} {text}{CRLF}"


def error(text: str) -> str:
    return f"{RED}[error]{RESET} {text}{CRLF}"


def warn(text: str) -> str:
    return f"{YELLOW}[warn]{RESET} {text}{CRLF}"


def dim(text: str) -> str:
    return f"{GREY}{text}{RESET}{CRLF}"


def session_ended() -> str:
    return f"{CRLF}{RED}Terminal session ended{RESET}{CRLF}"


def embedded_ready(shell_name: str, cwd: str) -> str:
    return ok(f"Embedded terminal ready ({shell_name})") + f"Working directory: {cwd}{CRLF}"


def embedded_failed(message: str) -> str:
    return error(f"Unable to initialize embedded terminal{CRLF}{message}") + warn(
        "Falling back to an external terminal window..."
    )


def external_launched(label: str, window_kind: str, cwd: str) -> str:
    return (
        ok(f"Launched {label} in an external {window_kind} window")
        + f"Working directory: {cwd}{CRLF}{CRLF}"
        + dim(f"The CLI is running in a separate {window_kind} window.")
        + dim("Switch to that window to interact with it; this tab is not writable.")
    )


def external_input_echo(data: str, label: str) -> str:
    """One log line for input typed at an external session."""
    shown = data[:-1] if data.endswith("\r") else data
    return f"{GREY}> {shown}{RESET}{CRLF}{YELLOW}[warn]{RESET} Type this command in the external {label} window{CRLF}"
