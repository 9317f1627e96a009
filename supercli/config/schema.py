"""Configuration schema for supercli."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

DEFAULT_CLIS = ["claude", "codex", "gemini"]


class TerminalConfig(BaseModel):
    """Session backend settings."""

    shell: str = ""
    cols: int = 80
    rows: int = 30
    cli_env_var: str = "SUPERCLI_ACTIVE_CLI"
    external_terminal: str = "x-terminal-emulator"
    external_banner_delay_s: float = 0.1
    poll_interval_s: float = 0.01
    pump_interval_ms: int = 30


class GUIConfig(BaseModel):
    """Desktop GUI configuration."""

    theme: str = "dark"
    width: int = 1200
    height: int = 800
    font_size: int = 13
    scrollback: int = 1000
    status_revert_ms: int = 3000
    error_revert_ms: int = 4000


class LoggingConfig(BaseModel):
    level: str = "INFO"
    to_file: bool = True


class Config(BaseSettings):
    """Root configuration for supercli."""

    terminal: TerminalConfig = Field(default_factory=TerminalConfig)
    gui: GUIConfig = Field(default_factory=GUIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    clis: list[str] = Field(default_factory=lambda: list(DEFAULT_CLIS))

    model_config = ConfigDict(
        env_prefix="SUPERCLI_",
        env_nested_delimiter="__",
        extra="ignore",
    )
