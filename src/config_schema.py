"""Pydantic schema for configuration validation.

All config values are validated at startup. Typos and invalid values
fail fast with clear error messages.

Usage:
    from src.config_schema import load_validated_config, AppConfig
    config = load_validated_config("config/config.yaml")
    # config is now a validated AppConfig instance
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator


# =============================================================================
# BASE MODEL WITH STRICT VALIDATION
# =============================================================================

class StrictModel(BaseModel):
    """Base model that rejects unknown fields (catches typos)."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# VIEW MODEL
# =============================================================================

class ViewConfig(StrictModel):
    """Time window and refresh defaults for a dashboard view.

    A null default lookback means an undefined window stays unresolvable,
    so no subscription is started until the user picks a window.
    """

    default_lookback_seconds: PositiveInt | None = Field(
        default=1800,
        description="Lookback used when the window is undefined (null disables)"
    )
    default_refresh_seconds: PositiveInt | None = Field(
        default=15,
        description="Refresh cadence after a reset (null means disabled)"
    )
    zoom_tolerance_seconds: int = Field(
        default=5,
        ge=0,
        description="Brushes within this many seconds of the window are not a new zoom"
    )


# =============================================================================
# SUBSCRIPTION MODEL
# =============================================================================

class SubscriptionConfig(StrictModel):
    """Live metrics subscription settings."""

    resolution_limit_message: str = Field(
        default="exceeded maximum resolution",
        min_length=1,
        description="Upstream error text fragment meaning the resolution limit was hit"
    )


# =============================================================================
# DASHBOARD SERVER MODEL
# =============================================================================

class DashboardConfig(StrictModel):
    """Dashboard server configuration."""

    host: str = Field(
        default="0.0.0.0",
        description="Host to bind (0.0.0.0 for all interfaces)"
    )
    port: int = Field(
        default=8080,
        gt=0,
        description="Port number"
    )
    websocket_path: str = Field(
        default="/ws",
        description="WebSocket endpoint path"
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed CORS origins"
    )
    keepalive_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Seconds of client silence before a keepalive ping"
    )


# =============================================================================
# LOGGING MODEL
# =============================================================================

class LoggingConfig(StrictModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level"
    )
    format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="logging.Formatter format string"
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.upper()
        return v


# =============================================================================
# ROOT CONFIG
# =============================================================================

class AppConfig(StrictModel):
    """Root configuration model for the entire application.

    All fields have sensible defaults, so an empty config file is valid.
    """

    view: ViewConfig = Field(default_factory=ViewConfig)
    subscription: SubscriptionConfig = Field(default_factory=SubscriptionConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# LOADING FUNCTIONS
# =============================================================================

def load_validated_config(config_path: str | Path = "config/config.yaml") -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config YAML file.

    Returns:
        Validated AppConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid (with detailed error message).
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw_config = yaml.safe_load(f) or {}

    return AppConfig.model_validate(raw_config)


def validate_config_dict(config_dict: dict[str, Any]) -> AppConfig:
    """Validate a configuration dictionary.

    Args:
        config_dict: Configuration as a dictionary.

    Returns:
        Validated AppConfig instance.

    Raises:
        pydantic.ValidationError: If config is invalid.
    """
    return AppConfig.model_validate(config_dict)


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    # Root config
    "AppConfig",
    # Sub-configs
    "ViewConfig",
    "SubscriptionConfig",
    "DashboardConfig",
    "LoggingConfig",
    # Functions
    "load_validated_config",
    "validate_config_dict",
]
