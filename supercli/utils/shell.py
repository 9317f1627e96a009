"""Single-quote escaping for POSIX sh and PowerShell command lines."""

from __future__ import annotations

_POSIX_QUOTE_BREAK = "'\"'\"'"


def escape_posix(value: str | None = "") -> str:
    """Escape ``value`` for use inside a POSIX single-quoted string.

    Each ``'`` becomes ``'"'"'``: close the quote, emit a double-quoted
    literal quote, reopen. Wrap the result in single quotes yourself or use
    :func:`quote_posix`.
    """
    return str(value or "").replace("'", _POSIX_QUOTE_BREAK)


def escape_powershell(value: str | None = "") -> str:
    """Escape ``value`` for use inside a PowerShell single-quoted string."""
    return str(value or "").replace("'", "''")


def quote_posix(value: str | None = "") -> str:
    return f"'{escape_posix(value)}'"


def quote_powershell(value: str | None = "") -> str:
    return f"'{escape_powershell(value)}'"
