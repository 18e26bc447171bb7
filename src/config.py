"""Configuration loader for the monitoring dashboard view.

Configurable values come from config/config.yaml (or the file named by
the DASHBOARD_CONFIG environment variable).

Configuration is validated at load time using Pydantic.
Typos and invalid values fail fast with clear error messages.

Usage:
    from src.config import load_config, get, get_validated_config

    # Load and validate (call once at startup)
    load_config("config/config.yaml")

    # Get values by dot-path
    tolerance = get("view.zoom_tolerance_seconds")

    # Or use the typed config object (preferred)
    config = get_validated_config()
    tolerance = config.view.zoom_tolerance_seconds
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from .config_schema import AppConfig, load_validated_config, validate_config_dict


# Global config instances
_config: dict[str, Any] | None = None
_validated_config: AppConfig | None = None

# Default config path
DEFAULT_CONFIG_PATH: Path = Path(__file__).parent.parent / "config" / "config.yaml"
CONFIG_ENV_VAR = "DASHBOARD_CONFIG"


def _resolve_path(config_path: str | Path | None) -> Path:
    if config_path:
        return Path(config_path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to $DASHBOARD_CONFIG,
            then config/config.yaml.

    Returns:
        Configuration dictionary (for backward compatibility).

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid.
    """
    global _config, _validated_config

    path = _resolve_path(config_path)

    # Load and validate with Pydantic
    _validated_config = load_validated_config(path)

    # Also keep raw dict for dot-path lookups
    with open(path) as f:
        loaded: Any = yaml.safe_load(f)
        if not isinstance(loaded, dict):
            loaded = {}
        _config = loaded

    return _config


def use_config(config: AppConfig) -> None:
    """Install an already validated config (tests, embedding hosts)."""
    global _config, _validated_config
    _validated_config = config
    _config = config.model_dump()


def reset_config() -> None:
    """Forget the loaded config so the next access reloads it."""
    global _config, _validated_config
    _config = None
    _validated_config = None


def get_config() -> dict[str, Any]:
    """Get the loaded configuration dict. Loads default if not already loaded.

    For typed access, use get_validated_config() instead.
    """
    global _config
    if _config is None:
        load_config()
    if _config is None:
        raise RuntimeError("Config failed to load. Call load_config() first.")
    return _config


def get_validated_config() -> AppConfig:
    """Get the validated configuration object.

    Returns a typed AppConfig instance with IDE autocompletion support.
    Loads default config if not already loaded.
    """
    global _validated_config
    if _validated_config is None:
        load_config()
    if _validated_config is None:
        raise RuntimeError("Validated config failed to load. Call load_config() first.")
    return _validated_config


def get(key: str, default: Any = None) -> Any:
    """Get a config value by dot-separated key path.

    Examples:
        get("view.default_lookback_seconds")
        get("dashboard.port")
    """
    config: dict[str, Any] = get_config()
    keys: list[str] = key.split(".")

    value: Any = config
    for k in keys:
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default

    return value


def set_config_value(key: str, value: Any) -> None:
    """Set a config value by dot-separated key path.

    Used for runtime overrides. The merged config is re-validated.

    Args:
        key: Dot-separated key path (e.g., "view.zoom_tolerance_seconds")
        value: Value to set
    """
    global _config, _validated_config

    if _config is None:
        load_config()

    if _config is None:
        raise RuntimeError("Config failed to load. Call load_config() first.")

    keys = key.split(".")
    target = _config

    # Navigate to parent
    for k in keys[:-1]:
        if k not in target:
            target[k] = {}
        target = target[k]

    target[keys[-1]] = value

    _validated_config = validate_config_dict(_config)


def configure_logging(config: AppConfig | None = None) -> None:
    """Configure root logging from the logging section."""
    cfg = config or get_validated_config()
    logging.basicConfig(level=cfg.logging.level, format=cfg.logging.format)
