"""Configuration module for supercli."""

from supercli.config.loader import get_config_path, load_config, save_config
from supercli.config.schema import Config

__all__ = ["Config", "get_config_path", "load_config", "save_config"]
