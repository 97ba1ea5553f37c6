"""Configuration loading utilities."""

import json
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from loguru import logger

from censusbot.config.schema import Config

# Load .env into os.environ (won't overwrite existing env vars)
load_dotenv(override=False)


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".censusbot" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file, then apply env-var overrides.

    Priority (highest → lowest):
        1. CENSUSBOT_* environment variables / .env
        2. ~/.censusbot/config.json
        3. Built-in defaults
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            config = Config.model_validate(convert_keys(data))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            logger.warning("Using default configuration.")
            config = Config()
    else:
        config = Config()

    _apply_env_overrides(config)
    return config


# ---------------------------------------------------------------------------
# Flat env-var overrides, keeps .env readable (no ugly __ nesting)
# ---------------------------------------------------------------------------

_TRUTHY = ("1", "true", "yes", "on")


def _apply_env_overrides(config: Config) -> None:
    """Apply flat CENSUSBOT_* env vars on top of the loaded config."""

    # --- Dataset ---
    if val := os.environ.get("CENSUSBOT_DATASET_PATH"):
        config.dataset.path = val
    if val := os.environ.get("CENSUSBOT_DATASET_ROOT_KEY"):
        config.dataset.root_key = val

    # --- WhatsApp bridge ---
    wa = config.channels.whatsapp
    if val := os.environ.get("CENSUSBOT_WHATSAPP_ENABLED"):
        wa.enabled = val.strip().lower() in _TRUTHY
    if val := os.environ.get("CENSUSBOT_WHATSAPP_BRIDGE_URL"):
        wa.bridge_url = val
    if val := os.environ.get("CENSUSBOT_WHATSAPP_BRIDGE_TOKEN"):
        wa.bridge_token = val
    if val := os.environ.get("CENSUSBOT_WHATSAPP_ALLOW_FROM"):
        wa.allow_from = [v.strip() for v in val.split(",") if v.strip()]

    # --- Pairing ---
    if val := os.environ.get("CENSUSBOT_QR_IMAGE_PATH"):
        config.pairing.qr_image_path = val
    if val := os.environ.get("CENSUSBOT_QR_TIMEOUT"):
        config.pairing.qr_timeout = int(val)

    # --- Logging ---
    if val := os.environ.get("CENSUSBOT_LOG_LEVEL"):
        config.logging.level = val.upper()
    if val := os.environ.get("CENSUSBOT_LOG_FILE"):
        config.logging.file = val


def save_config(config: Config, config_path: Path | None = None) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    # Convert to camelCase format
    data = config.model_dump()
    data = convert_to_camel(data)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """Convert snake_case keys to camelCase."""
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)


def snake_to_camel(name: str) -> str:
    """Convert snake_case to camelCase."""
    components = name.split("_")
    return components[0] + "".join(x.title() for x in components[1:])
