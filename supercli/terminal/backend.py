"""Embedded PTY backends for interactive shells."""

from __future__ import annotations

import importlib.util
import os
import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from loguru import logger

IS_WINDOWS = os.name == "nt"

POWERSHELL_ARGS = ["-NoLogo", "-NoProfile", "-ExecutionPolicy", "Bypass"]
DEFAULT_POSIX_SHELL = "/bin/bash"

_capability: Optional["PTYCapability"] = None


class PTYBackend(Protocol):
    """Minimal PTY backend contract."""

    def read(self) -> str:
        """Read a stdout/stderr chunk; empty string when nothing is pending."""

    def write(self, data: str) -> None:
        """Write input data."""

    def resize(self, cols: int, rows: int) -> None:
        """Apply terminal resize."""

    def is_alive(self) -> bool:
        """Return False once the child process has exited."""

    def close(self) -> None:
        """Terminate the process and release resources."""


@dataclass(frozen=True)
class PTYCapability:
    available: bool
    provider: str
    reason: str = ""


@dataclass(frozen=True)
class ShellSpec:
    """Interactive shell binary plus arguments."""

    program: str
    args: tuple[str, ...]
    display_name: str
    powershell: bool = False

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]


def detect_pty_capability(refresh: bool = False) -> PTYCapability:
    """Probe whether an embedded PTY library is importable.

    The result is cached and logged once per process.
    """
    global _capability
    if _capability is not None and not refresh:
        return _capability

    module = "winpty" if IS_WINDOWS else "pexpect"
    provider = "pywinpty" if IS_WINDOWS else "pexpect"
    try:
        found = importlib.util.find_spec(module) is not None
    except (ImportError, ValueError):
        found = False

    if found:
        _capability = PTYCapability(available=True, provider=provider)
        logger.info(f"[pty] Embedded terminals enabled via {provider}")
    else:
        _capability = PTYCapability(
            available=False,
            provider=provider,
            reason=f"{provider} is not installed",
        )
        logger.warning(f"[pty] {provider} not available, falling back to external terminals")
    return _capability


def resolve_shell(override: str = "", windows: bool | None = None) -> ShellSpec:
    """Pick the platform's interactive shell.

    PowerShell on Windows; otherwise ``override``, ``$SHELL`` or bash,
    started as a login shell.
    """
    windows = IS_WINDOWS if windows is None else windows
    if windows:
        program = override.strip() or "powershell.exe"
        return ShellSpec(program, tuple(POWERSHELL_ARGS), "PowerShell", powershell=True)
    program = override.strip() or os.environ.get("SHELL", "") or DEFAULT_POSIX_SHELL
    return ShellSpec(program, ("-l",), program)


class UnixPexpectBackend:
    """PTY backend for Unix-like systems via pexpect."""

    def __init__(
        self,
        shell: ShellSpec,
        cols: int = 80,
        rows: int = 30,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        import pexpect

        self._pexpect = pexpect
        self._proc = pexpect.spawn(
            shell.program,
            list(shell.args),
            encoding="utf-8",
            codec_errors="ignore",
            dimensions=(rows, cols),
            cwd=cwd,
            env=dict(env) if env is not None else None,
        )

    @property
    def pid(self) -> int | None:
        return getattr(self._proc, "pid", None)

    def read(self) -> str:
        try:
            return self._proc.read_nonblocking(size=4096, timeout=0.1)
        except self._pexpect.TIMEOUT:
            return ""
        except self._pexpect.EOF:
            return ""

    def write(self, data: str) -> None:
        self._proc.send(data)

    def resize(self, cols: int, rows: int) -> None:
        self._proc.setwinsize(rows, cols)

    def is_alive(self) -> bool:
        return bool(self._proc.isalive())

    def close(self) -> None:
        # Also releases the master fd when the child has already exited.
        try:
            self._proc.close(force=True)
        except (OSError, self._pexpect.ExceptionPexpect) as exc:
            logger.debug(f"[pty] close failed: {exc}")


class WinptyBackend:
    """PTY backend for Windows via pywinpty."""

    def __init__(
        self,
        shell: ShellSpec,
        cols: int = 80,
        rows: int = 30,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        from winpty import Backend, PtyProcess

        merged = dict(env if env is not None else os.environ)
        merged.setdefault("TERM", "xterm-256color")
        merged.setdefault("COLORTERM", "truecolor")

        launch_attempts = (
            {"backend": Backend.ConPTY},
            {"backend": Backend.WinPTY},
            {},
        )

        self._proc = None
        last_error: Optional[Exception] = None
        for extra in launch_attempts:
            try:
                self._proc = PtyProcess.spawn(
                    subprocess.list2cmdline(shell.argv),
                    dimensions=(rows, cols),
                    env=merged,
                    cwd=cwd,
                    **extra,
                )
                break
            except Exception as exc:  # pragma: no cover - platform specific
                last_error = exc

        if self._proc is None:
            raise RuntimeError("Failed to start PTY backend") from last_error

    @property
    def pid(self) -> int | None:
        return getattr(self._proc, "pid", None)

    def read(self) -> str:
        try:
            return self._proc.read(4096)
        except EOFError:
            return ""

    def write(self, data: str) -> None:
        self._proc.write(data)

    def resize(self, cols: int, rows: int) -> None:
        self._proc.setwinsize(rows, cols)

    def is_alive(self) -> bool:
        try:
            return bool(self._proc.isalive())
        except Exception:
            return False

    def close(self) -> None:
        pid = self.pid
        try:
            self._proc.close()
        finally:
            # Kill the whole tree so CLI children don't linger.
            if pid is not None:
                subprocess.run(
                    ["taskkill", "/F", "/T", "/PID", str(pid)],
                    capture_output=True,
                    timeout=3,
                    check=False,
                )


def build_embedded_backend(
    shell: ShellSpec,
    cols: int = 80,
    rows: int = 30,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
) -> PTYBackend:
    """Spawn ``shell`` on the platform's PTY implementation.

    Raises whatever the PTY library raises; the launcher owns fallback.
    """
    if IS_WINDOWS:
        backend: PTYBackend = WinptyBackend(shell, cols=cols, rows=rows, cwd=cwd, env=env)
        logger.info(f"[pty] Using WinptyBackend for: {shell.display_name}")
        return backend
    backend = UnixPexpectBackend(shell, cols=cols, rows=rows, cwd=cwd, env=env)
    logger.info(f"[pty] Using UnixPexpectBackend for: {shell.display_name}")
    return backend
