"""Terminal session lifecycle: PTY/external backends, registry and transport."""

from .backend import PTYBackend, PTYCapability, ShellSpec, detect_pty_capability, resolve_shell
from .events import SESSION_DATA, SESSION_EXITED, EventHub, SessionData, SessionExited
from .models import CreateResult, OpResult, Session, SessionMode, WriteResult
from .registry import SessionRegistry
from .service import TerminalService
from .timers import AfterScheduler, Scheduler

__all__ = [
    "AfterScheduler",
    "CreateResult",
    "EventHub",
    "OpResult",
    "PTYBackend",
    "PTYCapability",
    "SESSION_DATA",
    "SESSION_EXITED",
    "Scheduler",
    "Session",
    "SessionData",
    "SessionExited",
    "SessionMode",
    "SessionRegistry",
    "ShellSpec",
    "TerminalService",
    "WriteResult",
    "detect_pty_capability",
    "resolve_shell",
]
