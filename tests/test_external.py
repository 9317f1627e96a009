from supercli.terminal.external import build_external_launch, cli_label, posix_command


def test_cli_label_defaults_to_shell() -> None:
    assert cli_label("") == "shell"
    assert cli_label("  codex  ") == "codex"


def test_posix_command_keeps_window_open() -> None:
    command = posix_command("/work/o'neil", "claude", shell="zsh")

    assert command == "cd '/work/o'\"'\"'neil' && echo 'SuperCLI: claude' && claude; exec zsh"


def test_linux_launch_uses_configured_terminal() -> None:
    launch = build_external_launch("/work", "", platform="linux", shell="bash", terminal_binary="kitty")

    assert launch.argv[:4] == ["kitty", "-e", "bash", "-c"]
    assert launch.argv[4] == "cd '/work' && echo 'SuperCLI: shell'; exec bash"
    assert launch.window_kind == "terminal"
    assert not launch.hide_window


def test_macos_launch_escapes_applescript() -> None:
    launch = build_external_launch('/Users/me/"quoted"', "gemini", platform="darwin")

    assert launch.argv[:2] == ["osascript", "-e"]
    script = launch.argv[2]
    assert script.startswith('tell application "Terminal" to do script "')
    assert '\\"quoted\\"' in script
    assert launch.window_kind == "Terminal"


def test_windows_launch_is_hidden_powershell() -> None:
    launch = build_external_launch("C:\\o'brien", "claude", platform="win32")

    assert launch.argv[0] == "powershell.exe"
    assert launch.hide_window
    assert launch.window_kind == "PowerShell"
    start_process = launch.argv[-1]
    assert start_process.startswith("Start-Process PowerShell -ArgumentList")
    assert "-WorkingDirectory 'C:\\o''brien'" in start_process
    assert "Invoke-Expression" in start_process
