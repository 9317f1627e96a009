"""Session records and result types for the terminal core."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from supercli.terminal.backend import PTYBackend
    from supercli.terminal.channel import SessionChannel


class SessionMode(str, Enum):
    """How a session's process is attached to the application."""

    EMBEDDED = "embedded"
    EXTERNAL = "external"


@dataclass(frozen=True)
class EmbeddedBackend:
    """PTY process whose I/O is proxied into our own terminal view."""

    handle: "PTYBackend"
    shell: str
    channel: "SessionChannel | None" = None


@dataclass(frozen=True)
class ExternalBackend:
    """Detached OS terminal window; we only keep the launcher process.

    ``process`` is None when the launcher itself failed to spawn.
    """

    process: subprocess.Popen | None
    window_kind: str = "terminal"


Backend = Union[EmbeddedBackend, ExternalBackend]


@dataclass(frozen=True)
class Session:
    """One CLI/shell process bound to a terminal surface."""

    session_id: str
    backend: Backend
    working_directory: str
    cli_label: str = ""
    project_path: str | None = None

    @property
    def mode(self) -> SessionMode:
        if isinstance(self.backend, EmbeddedBackend):
            return SessionMode.EMBEDDED
        return SessionMode.EXTERNAL

    @property
    def display_label(self) -> str:
        """CLI label for banners; empty label means a plain shell."""
        label = (self.cli_label or "").strip()
        return label or "shell"


@dataclass(frozen=True)
class CreateResult:
    success: bool
    mode: SessionMode | None = None
    error: str = ""


@dataclass(frozen=True)
class WriteResult:
    success: bool
    external: bool = False


@dataclass(frozen=True)
class OpResult:
    success: bool
    error: str = ""
