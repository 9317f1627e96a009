import shutil
import subprocess

import pytest

from supercli.utils.shell import escape_posix, escape_powershell, quote_posix, quote_powershell


def test_escape_posix_breaks_out_of_single_quotes() -> None:
    assert escape_posix("it's") == "it'\"'\"'s"
    assert escape_posix("plain path") == "plain path"


def test_escape_powershell_doubles_quotes() -> None:
    assert escape_powershell("it's") == "it''s"
    assert escape_powershell("C:\\Users\\o'brien") == "C:\\Users\\o''brien"


def test_escape_treats_none_as_empty() -> None:
    assert escape_posix(None) == ""
    assert escape_powershell(None) == ""
    assert quote_posix(None) == "''"
    assert quote_powershell(None) == "''"


def test_quote_wraps_escaped_value() -> None:
    assert quote_posix("a'b") == "'a'\"'\"'b'"
    assert quote_powershell("a'b") == "'a''b'"


@pytest.mark.skipif(shutil.which("sh") is None, reason="needs a POSIX sh")
@pytest.mark.parametrize("value", ["", "simple", "it's a 'test'", "it's", "''", "$HOME `id` \"x\"", "a\\b; rm -rf /", "multi\nline"])
def test_quote_posix_round_trips_through_sh(value: str) -> None:
    result = subprocess.run(
        ["sh", "-c", f"printf '%s' {quote_posix(value)}"],
        capture_output=True,
        text=True,
        check=True,
    )
    assert result.stdout == value
