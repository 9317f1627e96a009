"""Entry point for a frozen (PyInstaller) SuperCLI build."""

from __future__ import annotations

import os
import sys


def main() -> None:
    """Launch the GUI, handling frozen-app path setup."""
    if getattr(sys, "frozen", False):
        # Frozen builds start inside the bundle; terminals without a project open in $HOME.
        os.chdir(os.path.expanduser("~"))

    # Set sys.argv so typer dispatches to the gui command; extra args pass through.
    sys.argv = [sys.argv[0], "gui", *sys.argv[1:]]

    from supercli.cli.commands import app

    app()


if __name__ == "__main__":
    main()
