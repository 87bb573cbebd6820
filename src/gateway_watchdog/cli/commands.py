"""
Watchdog commands: run, check, init.
"""

import asyncio
import logging
import signal
from pathlib import Path
from typing import Any

import click

from gateway_watchdog.config.app import AppConfig, default_config_path, generate_default_config
from gateway_watchdog.errors import ProbeError
from gateway_watchdog.probe import HealthProber
from gateway_watchdog.scheduler import WatchdogScheduler

from .utils import load_config_or_exit, setup_logging

logger = logging.getLogger(__name__)


async def run_until_signalled(config: AppConfig) -> None:
    """Run the watchdog until SIGINT or SIGTERM."""
    scheduler = WatchdogScheduler(config.watchdog, config.channels)
    handle = await scheduler.start()
    if handle is None:
        return

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await stop_event.wait()
        logger.info("Received shutdown signal, stopping watchdog")
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        await scheduler.stop(handle)


@click.command()
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    help="Path to configuration file",
)
@click.option(
    "--interval",
    type=float,
    help="Seconds between health checks (overrides watchdog.interval_sec)",
)
@click.option(
    "--alert-to",
    help="Rocket.Chat roomId or #channel (overrides watchdog.alert.to)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose debug output",
)
def run(
    config_file: str | None,
    interval: float | None,
    alert_to: str | None,
    verbose: bool,
) -> None:
    """Run the watchdog in the foreground."""
    cli_overrides: dict[str, Any] = {}
    if interval is not None:
        cli_overrides["watchdog.interval_sec"] = interval
    if alert_to is not None:
        cli_overrides["watchdog.alert.to"] = alert_to

    config = load_config_or_exit(config_file, cli_overrides)
    setup_logging(verbose, level=config.logging.level, log_file=config.logging.file)

    if not config.watchdog.enabled:
        click.echo("Watchdog is disabled in config (watchdog.enabled: false)")
        return

    asyncio.run(run_until_signalled(config))


@click.command()
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    help="Path to configuration file",
)
def check(config_file: str | None) -> None:
    """Probe gateway health once and exit (0 = OK, 1 = DOWN)."""
    config = load_config_or_exit(config_file)
    prober = HealthProber.from_config(config.watchdog.probe)

    try:
        result = asyncio.run(prober.probe())
    except ProbeError as e:
        click.echo(f"DOWN ({e})")
        raise SystemExit(1) from e

    click.echo(f"{'OK' if result.healthy else 'DOWN'} ({result.detail})")
    if not result.healthy:
        raise SystemExit(1)


@click.command()
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    help="Where to write the configuration file",
)
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file")
def init(config_file: str | None, force: bool) -> None:
    """Write a default configuration file."""
    path = Path(config_file).expanduser() if config_file else default_config_path()
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists (use --force to overwrite)")

    generate_default_config(path)
    click.echo(f"Wrote default configuration to {path}")
