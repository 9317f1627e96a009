"""Utility functions for supercli."""

from supercli.utils.helpers import ensure_dir, get_data_path
from supercli.utils.shell import escape_posix, escape_powershell, quote_posix, quote_powershell

__all__ = [
    "ensure_dir",
    "escape_posix",
    "escape_powershell",
    "get_data_path",
    "quote_posix",
    "quote_powershell",
]
