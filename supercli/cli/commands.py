"""CLI commands for supercli."""

from __future__ import annotations

import shutil
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console

from supercli import __version__

app = typer.Typer(
    name="supercli",
    help="supercli - desktop workspace for terminal AI CLIs",
    no_args_is_help=True,
)
console = Console()

_LOG_FILENAME = "supercli.log"


def version_callback(value: bool) -> None:
    if value:
        console.print(f"supercli v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """supercli entrypoint."""
    del version


def configure_logging(level: str = "INFO", to_file: bool = True, log_dir: Path | None = None) -> Path | None:
    """Route loguru to stderr at ``level`` plus an optional rotating file."""
    from supercli.utils.helpers import ensure_dir, get_data_path

    logger.remove()
    logger.add(sys.stderr, level=level.upper())
    if not to_file:
        return None
    directory = ensure_dir(log_dir or get_data_path() / "logs")
    log_path = directory / _LOG_FILENAME
    logger.add(log_path, level=level.upper(), rotation="5 MB", retention=3, encoding="utf-8")
    return log_path


@app.command()
def gui(
    project: str = typer.Option("", "--project", "-p", help="Open this folder as the first project"),
) -> None:
    """Start the SuperCLI desktop GUI."""
    from supercli.config.loader import load_config
    from supercli.gui.app import SuperCLIApp

    config = load_config()
    log_path = configure_logging(config.logging.level, config.logging.to_file)
    if log_path is not None:
        logger.info(f"Logging to {log_path}")

    project_path = None
    if project:
        candidate = Path(project).expanduser()
        if not candidate.is_dir():
            console.print(f"[red]Project folder not found: {candidate}[/red]")
            raise typer.Exit(1)
        project_path = str(candidate.resolve())

    logger.info(f"Starting supercli v{__version__}")
    SuperCLIApp(config=config, project_path=project_path).run()


@app.command()
def status() -> None:
    """Show supercli status."""
    from supercli.config.loader import get_config_path, load_config
    from supercli.terminal.backend import detect_pty_capability, resolve_shell

    config_path = get_config_path()
    config = load_config()

    console.print("supercli Status\n")
    console.print(f"Config: {config_path} {'[green]OK[/green]' if config_path.exists() else '[dim]defaults[/dim]'}")
    console.print(
        f"GUI: {config.gui.width}x{config.gui.height}, font {config.gui.font_size}, theme {config.gui.theme}"
    )

    capability = detect_pty_capability()
    if capability.available:
        console.print(f"Embedded terminal: [green]{capability.provider}[/green]")
    else:
        console.print(f"Embedded terminal: [yellow]unavailable[/yellow] ({capability.reason})")
    shell = resolve_shell(config.terminal.shell)
    console.print(f"Shell: [cyan]{' '.join(shell.argv)}[/cyan]")

    console.print("\nCLIs:")
    for cli in config.clis:
        binary = cli.strip().split(" ")[0]
        found = shutil.which(binary) if binary else None
        state = f"[green]{found}[/green]" if found else "[dim]not found[/dim]"
        console.print(f"  - {cli}: {state}")


if __name__ == "__main__":
    app()
