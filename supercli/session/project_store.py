"""Project folders: in-memory tab membership plus on-disk .supercli layout."""

from __future__ import annotations

import base64
import binascii
import json
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

_META_DIR = ".supercli"
_DATA_URL_RE = re.compile(r"^data:image/[\w.+-]+;base64,")


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


def normalize_path(path: str | Path) -> str:
    return str(Path(path).expanduser().resolve())


@dataclass
class Project:
    """A selected project folder and the sessions opened under it."""

    path: str
    tab_order: list[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return Path(self.path).name or self.path


class ProjectRegistry:
    """Open projects plus the two active pointers.

    Invariants:
      * a session id belongs to at most one project (or to ``unassigned``);
      * ``active_path`` is None or a known project;
      * ``active_session_id`` is None or a member of the active project's
        tab order (``unassigned`` when no project is active yet).
    """

    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}
        self._unassigned: list[str] = []
        self.active_path: str | None = None
        self.active_session_id: str | None = None

    # ------------------------------------------------------------------ #
    # Projects                                                             #
    # ------------------------------------------------------------------ #

    def projects(self) -> list[Project]:
        return list(self._projects.values())

    def get(self, path: str) -> Project | None:
        return self._projects.get(normalize_path(path))

    @property
    def active_project(self) -> Project | None:
        if self.active_path is None:
            return None
        return self._projects.get(self.active_path)

    def select(self, path: str | Path) -> Project:
        """Make ``path`` the active project, creating it on first use."""
        key = normalize_path(path)
        project = self._projects.get(key)
        if project is None:
            project = Project(path=key)
            self._projects[key] = project
            logger.info(f"Project opened: {key}")
        self.active_path = key
        self._reconcile_active_session()
        return project

    def switch(self, path: str | Path) -> Project:
        """Switch to an already-known project."""
        key = normalize_path(path)
        if key not in self._projects:
            raise KeyError(f"Unknown project: {key}")
        return self.select(key)

    # ------------------------------------------------------------------ #
    # Session membership                                                   #
    # ------------------------------------------------------------------ #

    def attach_session(self, session_id: str, path: str | None = None) -> Project | None:
        """Append a session to a project's tab order (default: active project)."""
        self.detach_session(session_id, keep_active=True)
        if path is not None:
            key = normalize_path(path)
            project = self._projects.setdefault(key, Project(path=key))
        else:
            project = self.active_project
        if project is None:
            self._unassigned.append(session_id)
            return None
        project.tab_order.append(session_id)
        return project

    def detach_session(self, session_id: str, keep_active: bool = False) -> None:
        for project in self._projects.values():
            if session_id in project.tab_order:
                project.tab_order.remove(session_id)
        if session_id in self._unassigned:
            self._unassigned.remove(session_id)
        if not keep_active and self.active_session_id == session_id:
            self.active_session_id = None

    def owner_of(self, session_id: str) -> Project | None:
        for project in self._projects.values():
            if session_id in project.tab_order:
                return project
        return None

    def visible_sessions(self) -> list[str]:
        """Tab order of the active project (or unassigned sessions)."""
        project = self.active_project
        if project is None:
            return list(self._unassigned)
        return list(project.tab_order)

    def set_active_session(self, session_id: str | None) -> None:
        if session_id is not None and session_id not in self.visible_sessions():
            raise ValueError(f"Session {session_id} is not part of the active project")
        self.active_session_id = session_id

    def _reconcile_active_session(self) -> None:
        members = self.visible_sessions()
        if self.active_session_id in members:
            return
        self.active_session_id = members[0] if members else None


@dataclass(frozen=True)
class ProjectStructure:
    project_path: str
    temp_dir: Path
    images_dir: Path
    metadata_path: Path


@dataclass(frozen=True)
class ImageSaveResult:
    success: bool
    filepath: str = ""
    filename: str = ""
    error: str = ""


class ProjectStore:
    """On-disk project metadata under ``<project>/.supercli``.

    Directory layout::

        <project>/.supercli/
            project.json
            temp/
            images/
    """

    def ensure_structure(self, project_path: str | Path) -> ProjectStructure:
        root = Path(project_path) / _META_DIR
        temp_dir = root / "temp"
        images_dir = root / "images"
        temp_dir.mkdir(parents=True, exist_ok=True)
        images_dir.mkdir(parents=True, exist_ok=True)

        metadata_path = root / "project.json"
        if not metadata_path.exists():
            self._write_meta(metadata_path, {"created": _now(), "sessions": []})

        return ProjectStructure(
            project_path=str(project_path),
            temp_dir=temp_dir,
            images_dir=images_dir,
            metadata_path=metadata_path,
        )

    def read_metadata(self, project_path: str | Path) -> dict[str, Any]:
        meta_path = Path(project_path) / _META_DIR / "project.json"
        if not meta_path.exists():
            return {}
        try:
            data = json.loads(meta_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f"Unreadable project metadata {meta_path}: {exc}")
            return {}
        return data if isinstance(data, dict) else {}

    def record_session(self, project_path: str | Path, session_id: str, cli_label: str) -> None:
        """Append a session entry to project.json."""
        structure = self.ensure_structure(project_path)
        meta = self.read_metadata(project_path)
        sessions = meta.get("sessions")
        if not isinstance(sessions, list):
            sessions = []
        sessions.append({"id": session_id, "cli": cli_label, "started_at": _now()})
        meta["sessions"] = sessions
        meta.setdefault("created", _now())
        self._write_meta(structure.metadata_path, meta)

    def save_image(self, project_path: str | Path, image_data: bytes | str) -> ImageSaveResult:
        """Store an image (raw bytes or base64 data URL) under images/."""
        try:
            if isinstance(image_data, str):
                payload = base64.b64decode(_DATA_URL_RE.sub("", image_data), validate=True)
            else:
                payload = bytes(image_data)
            images_dir = self.ensure_structure(project_path).images_dir
            filename = f"image_{int(time.time() * 1000)}.png"
            filepath = images_dir / filename
            filepath.write_bytes(payload)
        except (OSError, binascii.Error, ValueError) as exc:
            return ImageSaveResult(False, error=str(exc))
        return ImageSaveResult(True, filepath=str(filepath), filename=filename)

    @staticmethod
    def _write_meta(meta_path: Path, payload: dict[str, Any]) -> None:
        meta_path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
