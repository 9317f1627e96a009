"""Create session backends: embedded PTY first, external window as fallback."""

from __future__ import annotations

import os
import queue
import sys
from typing import Callable

from loguru import logger

from supercli.config.schema import TerminalConfig
from supercli.terminal import banners
from supercli.terminal.backend import (
    IS_WINDOWS,
    PTYBackend,
    PTYCapability,
    ShellSpec,
    build_embedded_backend,
    detect_pty_capability,
    resolve_shell,
)
from supercli.terminal.channel import ChannelEvent, SessionChannel
from supercli.terminal.external import ExternalLaunch, build_external_launch, cli_label, spawn_external
from supercli.terminal.models import (
    CreateResult,
    EmbeddedBackend,
    ExternalBackend,
    Session,
    SessionMode,
)
from supercli.terminal.registry import SessionRegistry
from supercli.terminal.timers import SessionTimers
from supercli.utils.shell import escape_posix, escape_powershell

BackendFactory = Callable[..., PTYBackend]
ExternalSpawner = Callable[[ExternalLaunch], object]
Emit = Callable[[str, str], None]


def build_init_line(shell: ShellSpec, cwd: str, cli_command: str) -> str:
    """Command line typed into a fresh embedded shell.

    ``cd`` into the project, print a green banner, then run the CLI.
    """
    label = cli_label(cli_command)
    if shell.powershell:
        parts = [
            f"Set-Location -LiteralPath '{escape_powershell(cwd)}'",
            f"Write-Host 'SuperCLI: {escape_powershell(label)}' -ForegroundColor Green",
        ]
        separator = "; "
    else:
        parts = [
            f"cd '{escape_posix(cwd)}'",
            f"printf '\\033[32m%s\\033[0m\\n' 'SuperCLI: {escape_posix(label)}'",
        ]
        separator = " && "
    if cli_command and cli_command.strip():
        parts.append(cli_command.strip())
    return separator.join(parts) + "\r"


class BackendLauncher:
    """Produces a running backend for a session and registers it."""

    def __init__(
        self,
        registry: SessionRegistry,
        emit: Emit,
        timers: SessionTimers,
        sink: "queue.Queue[ChannelEvent]",
        settings: TerminalConfig | None = None,
        capability: PTYCapability | None = None,
        backend_factory: BackendFactory = build_embedded_backend,
        external_spawner: ExternalSpawner = spawn_external,
        platform: str | None = None,
    ) -> None:
        self._registry = registry
        self._emit = emit
        self._timers = timers
        self._sink = sink
        self._settings = settings or TerminalConfig()
        self._capability = capability
        self._backend_factory = backend_factory
        self._external_spawner = external_spawner
        self._platform = platform or sys.platform
        self._windows = self._platform.startswith("win") if platform else IS_WINDOWS

    @property
    def capability(self) -> PTYCapability:
        if self._capability is None:
            self._capability = detect_pty_capability()
        return self._capability

    def create_session(
        self,
        session_id: str,
        cwd: str,
        cli_command: str = "",
        project_path: str | None = None,
    ) -> CreateResult:
        logger.info(f"Creating terminal {session_id} with CLI: {cli_command or 'shell'} in {cwd}")
        if session_id in self._registry:
            return CreateResult(False, error=f"Session {session_id} already exists")
        cwd = cwd or os.getcwd()
        try:
            if self.capability.available:
                try:
                    return self._create_embedded(session_id, cwd, cli_command, project_path)
                except Exception as exc:
                    logger.error(f"[pty] Embedded terminal failed for {session_id}, falling back: {exc}")
                    self._emit(session_id, banners.embedded_failed(str(exc)))
            return self._create_external(session_id, cwd, cli_command, project_path)
        except Exception as exc:
            logger.exception(f"Error creating terminal {session_id}")
            return CreateResult(False, error=str(exc))

    def _create_embedded(
        self,
        session_id: str,
        cwd: str,
        cli_command: str,
        project_path: str | None,
    ) -> CreateResult:
        shell = resolve_shell(self._settings.shell, windows=self._windows)
        env = dict(os.environ)
        env[self._settings.cli_env_var] = cli_command or ""
        env.setdefault("TERM", "xterm-256color")

        handle = self._backend_factory(
            shell,
            cols=self._settings.cols,
            rows=self._settings.rows,
            cwd=cwd,
            env=env,
        )
        channel = SessionChannel(session_id, handle, self._sink, self._settings.poll_interval_s)
        session = Session(
            session_id=session_id,
            backend=EmbeddedBackend(handle=handle, shell=shell.display_name, channel=channel),
            working_directory=cwd,
            cli_label=cli_command or "",
            project_path=project_path,
        )
        self._registry.add(session)
        try:
            self._emit(session_id, banners.embedded_ready(shell.display_name, cwd))
            handle.write(build_init_line(shell, cwd, cli_command))
            channel.start()
        except Exception:
            self._registry.pop(session_id)
            channel.stop()
            try:
                handle.close()
            except Exception as close_exc:
                logger.debug(f"[pty] cleanup after failed start of {session_id}: {close_exc}")
            raise
        return CreateResult(True, SessionMode.EMBEDDED)

    def _create_external(
        self,
        session_id: str,
        cwd: str,
        cli_command: str,
        project_path: str | None,
    ) -> CreateResult:
        posix_shell = resolve_shell(self._settings.shell, windows=False).program
        launch = build_external_launch(
            cwd,
            cli_command,
            platform=self._platform,
            shell=posix_shell,
            terminal_binary=self._settings.external_terminal,
        )
        label = cli_label(cli_command)

        process = None
        try:
            process = self._external_spawner(launch)
        except OSError as exc:
            logger.error(f"[external] Failed to launch external terminal for {session_id}: {exc}")
            self._emit(
                session_id,
                banners.error(f"Unable to open {launch.window_kind} window{banners.CRLF}{exc}"),
            )

        self._registry.add(Session(
            session_id=session_id,
            backend=ExternalBackend(process=process, window_kind=launch.window_kind),
            working_directory=cwd,
            cli_label=cli_command or "",
            project_path=project_path,
        ))

        if process is not None:
            self._timers.schedule(
                session_id,
                self._settings.external_banner_delay_s,
                lambda: self._emit(session_id, banners.external_launched(label, launch.window_kind, cwd)),
            )
        return CreateResult(True, SessionMode.EXTERNAL)
