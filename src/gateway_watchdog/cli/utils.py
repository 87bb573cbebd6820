"""
Shared utilities for CLI commands.
"""

import logging
from pathlib import Path
from typing import Any

import click

from gateway_watchdog.config.app import AppConfig, load_config
from gateway_watchdog.errors import ConfigError


def setup_logging(verbose: bool = False, level: str = "info", log_file: str | None = None) -> None:
    """
    Configure logging for CLI.

    Args:
        verbose: If True, enable DEBUG level logging (overrides level)
        level: Configured log level name
        log_file: Optional file to log to instead of stderr
    """
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers = [logging.FileHandler(path)]

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )

    # Silence noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def load_config_or_exit(
    config_file: str | None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Load configuration, turning ConfigError into a CLI error."""
    try:
        return load_config(config_file, cli_overrides)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
