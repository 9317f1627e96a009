"""Shared GUI theme defaults."""

from __future__ import annotations

import sys

import customtkinter as ctk

WINDOW_WIDTH = 1200
WINDOW_HEIGHT = 800
FONT_SIZE = 13
FONT_FAMILY = "Segoe UI"
MONO_FAMILY = "Consolas" if sys.platform == "win32" else ("Menlo" if sys.platform == "darwin" else "DejaVu Sans Mono")

COLOR_BG_APP = "#0E1116"
COLOR_BG_PANEL = "#131A22"
COLOR_BG_INPUT = "#101722"
COLOR_BG_TERMINAL = "#0B0F14"
COLOR_BORDER = "#223247"
COLOR_TEXT = "#D9E2EF"
COLOR_TEXT_MUTED = "#93A3B8"
COLOR_ACCENT = "#2E9BFF"
COLOR_STATUS_BG = "#0B1119"
COLOR_SUCCESS = "#39C172"
COLOR_WARN = "#FFA940"
COLOR_DANGER = "#EA5F5F"

# Tab strip
COLOR_TAB_ACTIVE_BG = "#192B3E"
COLOR_TAB_NORMAL_BG = "#111927"
COLOR_TAB_HOVER_BG = "#141E2C"
COLOR_TAB_EXITED_TEXT = "#5C6B7E"

# CLI badge colours in the tab strip
COLOR_CLI_CLAUDE = "#7C6FCD"
COLOR_CLI_GEMINI = "#4285F4"
COLOR_CLI_CODEX = "#10A37F"
COLOR_CLI_DEFAULT = "#4A5568"

_LEVEL_COLORS = {
    "info": COLOR_ACCENT,
    "success": COLOR_SUCCESS,
    "warn": COLOR_WARN,
    "error": COLOR_DANGER,
    "muted": COLOR_TEXT_MUTED,
}


def level_color(level: str) -> str:
    """Status-line colour for a message level."""
    return _LEVEL_COLORS.get(level, COLOR_TEXT_MUTED)


def cli_color(cli_command: str) -> str:
    """Badge colour for the first word of a CLI command."""
    name = (cli_command or "").strip().split(" ")[0].lower()
    return {
        "claude": COLOR_CLI_CLAUDE,
        "gemini": COLOR_CLI_GEMINI,
        "codex": COLOR_CLI_CODEX,
    }.get(name, COLOR_CLI_DEFAULT)


def setup_theme(mode: str = "dark") -> None:
    """Apply global appearance settings."""
    ctk.set_appearance_mode(mode)
    ctk.set_default_color_theme("blue")
