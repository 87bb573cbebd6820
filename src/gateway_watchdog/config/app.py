"""
Configuration management for the gateway watchdog.

Provides YAML-based configuration with CLI overrides,
configuration hierarchy (CLI > YAML > Defaults), and validation.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from gateway_watchdog.config.channels import ChannelsConfig
from gateway_watchdog.config.watchdog import WatchdogConfig
from gateway_watchdog.errors import ConfigError

__all__ = [
    "AppConfig",
    "LoggingSettings",
    "apply_cli_overrides",
    "default_config_path",
    "generate_default_config",
    "get_watchdog_home",
    "load_config",
    "load_yaml",
]


def get_watchdog_home() -> Path:
    """Get watchdog home directory, respecting GATEWAY_WATCHDOG_HOME env var."""
    home = os.environ.get("GATEWAY_WATCHDOG_HOME")
    if home:
        return Path(home)
    return Path.home() / ".gateway-watchdog"


def default_config_path() -> Path:
    """Path of the config file used when none is given."""
    return get_watchdog_home() / "config.yaml"


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Log level",
    )
    file: str | None = Field(
        default=None,
        description="Optional log file path (logs go to stderr when unset)",
    )


class AppConfig(BaseModel):
    """Top-level configuration file model."""

    watchdog: WatchdogConfig = Field(
        default_factory=WatchdogConfig,
        description="Watchdog polling, alert and recovery settings",
    )
    channels: ChannelsConfig = Field(
        default_factory=ChannelsConfig,
        description="Notification channel credentials",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging settings",
    )


def load_yaml(config_file: str | Path) -> dict[str, Any]:
    """
    Load YAML or JSON configuration file.

    Args:
        config_file: Path to YAML or JSON configuration file

    Returns:
        Dictionary with parsed content ({} if the file does not exist)

    Raises:
        ConfigError: If the file is invalid or has the wrong extension
    """
    config_path = Path(config_file).expanduser()

    if not config_path.exists():
        return {}

    file_ext = config_path.suffix.lower()
    if file_ext not in [".yaml", ".yml", ".json"]:
        raise ConfigError(
            f"Config file must have .yaml, .yml, or .json extension, got: {file_ext}\n"
            f"File: {config_path}"
        )

    try:
        content = config_path.read_text()

        if file_ext == ".json":
            data = json.loads(content) if content.strip() else {}
        else:
            data = yaml.safe_load(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Invalid configuration file {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read configuration file {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a mapping")
    return data


def apply_cli_overrides(
    config_dict: dict[str, Any],
    cli_overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Apply CLI argument overrides to config dictionary.

    Nested keys use dots, e.g. "watchdog.interval_sec".
    """
    if cli_overrides is None:
        return config_dict

    for key, value in cli_overrides.items():
        if "." in key:
            parts = key.split(".")
            current = config_dict
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = value
        else:
            config_dict[key] = value

    return config_dict


def generate_default_config(config_file: str | Path) -> None:
    """
    Generate default configuration file from Pydantic model defaults.

    Args:
        config_file: Path where to create the config file
    """
    config_path = Path(config_file).expanduser()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    default_config = AppConfig().model_dump(mode="python", exclude_none=True)

    with open(config_path, "w") as f:
        yaml.safe_dump(default_config, f, default_flow_style=False, sort_keys=False)

    # Credentials may be added later, keep it owner-only
    config_path.chmod(0o600)


def load_config(
    config_file: str | Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """
    Load configuration with hierarchy: CLI > YAML > Defaults.

    Args:
        config_file: Path to YAML config file (default: ~/.gateway-watchdog/config.yaml)
        cli_overrides: Dictionary of CLI argument overrides

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If configuration is invalid
    """
    if config_file is None:
        config_file = default_config_path()

    config_dict = load_yaml(config_file)
    config_dict = apply_cli_overrides(config_dict, cli_overrides)

    try:
        return AppConfig(**config_dict)
    except Exception as e:
        raise ConfigError(
            f"Configuration validation failed: {e}\n"
            f"Please check your configuration file at {config_file}"
        ) from e
