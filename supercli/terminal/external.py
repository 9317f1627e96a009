"""Launch a CLI in an OS-native terminal window outside the app."""

from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass

from loguru import logger

from supercli.utils.shell import escape_powershell, quote_posix


@dataclass(frozen=True)
class ExternalLaunch:
    """Everything needed to spawn the launcher process."""

    argv: list[str]
    window_kind: str
    hide_window: bool = False


def _has_command(cli_command: str) -> bool:
    return bool(cli_command and cli_command.strip())


def cli_label(cli_command: str) -> str:
    return cli_command.strip() if _has_command(cli_command) else "shell"


def powershell_launch(cwd: str, cli_command: str) -> ExternalLaunch:
    """Start a new PowerShell console running the CLI.

    The inner script is single-quoted twice: once for ``-Command`` of the
    new window and once for ``Start-Process -ArgumentList``.
    """
    label = cli_label(cli_command)
    safe_cwd = escape_powershell(cwd)
    script_parts = [
        f"$host.ui.RawUI.WindowTitle = '{escape_powershell(f'SuperCLI - {label}')}'",
        f"Set-Location -LiteralPath '{safe_cwd}'",
        f"Write-Host 'SuperCLI: {escape_powershell(label)}' -ForegroundColor Green",
    ]
    if _has_command(cli_command):
        script_parts.append(f"Invoke-Expression '{escape_powershell(cli_command)}'")

    script = escape_powershell("; ".join(script_parts))
    start_process = (
        "Start-Process PowerShell -ArgumentList "
        f"'-NoExit','-NoLogo','-Command','& {{ {script} }}' "
        f"-WorkingDirectory '{safe_cwd}'"
    )
    argv = [
        "powershell.exe",
        "-NoProfile",
        "-ExecutionPolicy", "Bypass",
        "-Command",
        start_process,
    ]
    return ExternalLaunch(argv=argv, window_kind="PowerShell", hide_window=True)


def posix_command(cwd: str, cli_command: str, shell: str = "bash") -> str:
    """Compose ``cd && banner && cli; exec shell`` for a fresh window.

    The trailing ``exec`` keeps the window open after the CLI exits.
    """
    label = cli_label(cli_command)
    parts = [f"cd {quote_posix(cwd)}", f"echo {quote_posix(f'SuperCLI: {label}')}"]
    if _has_command(cli_command):
        parts.append(cli_command.strip())
    return " && ".join(parts) + f"; exec {shell}"


def _applescript_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def macos_launch(cwd: str, cli_command: str, shell: str = "bash") -> ExternalLaunch:
    command = posix_command(cwd, cli_command, shell)
    script = f'tell application "Terminal" to do script "{_applescript_string(command)}"'
    return ExternalLaunch(argv=["osascript", "-e", script], window_kind="Terminal")


def linux_launch(
    cwd: str,
    cli_command: str,
    shell: str = "bash",
    terminal_binary: str = "x-terminal-emulator",
) -> ExternalLaunch:
    command = posix_command(cwd, cli_command, shell)
    return ExternalLaunch(
        argv=[terminal_binary or "x-terminal-emulator", "-e", shell, "-c", command],
        window_kind="terminal",
    )


def build_external_launch(
    cwd: str,
    cli_command: str,
    platform: str | None = None,
    shell: str = "bash",
    terminal_binary: str = "x-terminal-emulator",
) -> ExternalLaunch:
    """Pick the launcher for ``platform`` (defaults to ``sys.platform``)."""
    platform = platform or sys.platform
    if platform.startswith("win"):
        return powershell_launch(cwd, cli_command)
    if platform == "darwin":
        return macos_launch(cwd, cli_command, shell)
    return linux_launch(cwd, cli_command, shell, terminal_binary)


def spawn_external(launch: ExternalLaunch) -> subprocess.Popen:
    """Start the launcher detached from our stdio; raises OSError on failure."""
    logger.info(f"[external] Launching {launch.window_kind} window: {' '.join(launch.argv[:3])} ...")
    kwargs: dict = {
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.DEVNULL,
    }
    if launch.hide_window:
        kwargs["creationflags"] = getattr(subprocess, "CREATE_NO_WINDOW", 0)
    else:
        kwargs["start_new_session"] = True
    return subprocess.Popen(launch.argv, **kwargs)
