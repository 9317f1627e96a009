"""Filesystem helpers shared by stores and the CLI."""

from __future__ import annotations

from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Create directory (and parents) if missing and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """Return ~/.supercli, creating it on first use."""
    return ensure_dir(Path.home() / ".supercli")
