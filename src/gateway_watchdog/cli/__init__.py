"""
Gateway watchdog CLI entry point.
"""

import click

from gateway_watchdog import __version__

from .commands import check, init, run


@click.group()
@click.version_option(__version__, prog_name="gateway-watchdog")
def cli() -> None:
    """Gateway health watchdog with alerts and optional recovery."""


cli.add_command(run)
cli.add_command(check)
cli.add_command(init)


def main() -> None:
    cli()
