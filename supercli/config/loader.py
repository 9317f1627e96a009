"""Load and persist supercli configuration."""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from supercli.config.schema import Config


def get_config_path() -> Path:
    """Return default path of the JSON config file."""
    return Path.home() / ".supercli" / "config.json"


def load_config(path: Path | None = None) -> Config:
    """Load config from disk; fall back to defaults (plus env) on any problem."""
    target = path or get_config_path()
    if not target.exists():
        return Config()

    try:
        payload = json.loads(target.read_text(encoding="utf-8"))
        return Config(**payload)
    except (OSError, json.JSONDecodeError, ValidationError, TypeError) as exc:
        logger.warning(f"Failed to load config from {target}: {exc}; using defaults")
        return Config()


def save_config(config: Config, path: Path | None = None) -> None:
    """Persist config as pretty JSON."""
    target = path or get_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(config.model_dump(), indent=2), encoding="utf-8")
