"""Configuration module for censusbot."""

from censusbot.config.loader import load_config, get_config_path
from censusbot.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
