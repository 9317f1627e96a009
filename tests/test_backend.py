import os
import shutil
import time

import pytest

from supercli.terminal.backend import ShellSpec


@pytest.mark.skipif(os.name == "nt" or shutil.which("sh") is None, reason="needs a POSIX sh")
def test_pexpect_close_releases_exited_child() -> None:
    pytest.importorskip("pexpect")
    from supercli.terminal.backend import UnixPexpectBackend

    backend = UnixPexpectBackend(ShellSpec("sh", ("-c", "exit 0"), "sh"))
    deadline = time.monotonic() + 5
    while backend.is_alive() and time.monotonic() < deadline:
        backend.read()
    assert not backend.is_alive()

    backend.close()

    assert backend._proc.closed
    backend.close()
