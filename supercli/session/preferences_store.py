"""User preferences: home-level defaults overridden per project."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from loguru import logger

_PREFS_FILENAME = "preferences.json"


@dataclass
class Preferences:
    theme: str = "dark"
    font_size: int = 13
    per_language_defaults: dict[str, Any] = field(default_factory=dict)
    backup_config: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Preferences":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class PreferencesStore:
    """Two JSON files, merged shallowly with the project file winning::

        ~/.supercli/preferences.json
        <project>/.supercli/preferences.json
    """

    def __init__(self, home_dir: Path | None = None) -> None:
        self._home_path = (home_dir or Path.home() / ".supercli") / _PREFS_FILENAME

    def project_path_for(self, project_path: str | Path) -> Path:
        return Path(project_path) / ".supercli" / _PREFS_FILENAME

    def load(self, project_path: str | Path | None = None) -> Preferences:
        merged = dict(self._read(self._home_path))
        if project_path is not None:
            merged.update(self._read(self.project_path_for(project_path)))
        return Preferences.from_dict(merged)

    def save(self, prefs: Preferences, project_path: str | Path | None = None) -> Path:
        """Write to the project file when a project is given, else home."""
        target = self.project_path_for(project_path) if project_path is not None else self._home_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(asdict(prefs), indent=2), encoding="utf-8")
        return target

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f"Ignoring unreadable preferences {path}: {exc}")
            return {}
        return payload if isinstance(payload, dict) else {}
