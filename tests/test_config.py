import json

from supercli.config.loader import load_config, save_config
from supercli.config.schema import DEFAULT_CLIS, Config


def test_missing_file_gives_defaults(tmp_path) -> None:
    config = load_config(tmp_path / "config.json")

    assert config.clis == DEFAULT_CLIS
    assert config.terminal.cols == 80
    assert config.terminal.rows == 30
    assert config.terminal.cli_env_var == "SUPERCLI_ACTIVE_CLI"
    assert config.terminal.external_banner_delay_s == 0.1


def test_save_then_load(tmp_path) -> None:
    path = tmp_path / "nested" / "config.json"
    config = Config()
    config.terminal.shell = "/bin/zsh"
    config.clis = ["claude", "aider"]

    save_config(config, path)
    loaded = load_config(path)

    assert loaded.terminal.shell == "/bin/zsh"
    assert loaded.clis == ["claude", "aider"]


def test_invalid_file_falls_back_to_defaults(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{oops", encoding="utf-8")
    assert load_config(path).gui.width == 1200

    path.write_text(json.dumps({"gui": {"width": "wide"}}), encoding="utf-8")
    assert load_config(path).gui.width == 1200


def test_environment_overrides(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("SUPERCLI_GUI__WIDTH", "1600")

    assert load_config(tmp_path / "missing.json").gui.width == 1600
