"""Rules command for seedwarden CLI.

Commands:
- rules: Validate the configuration and list its rules
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from seedwarden.client.cli.config import CONFIG_ENV_VAR, ConfigError, load_config


@click.command()
@click.argument(
    "config_path",
    metavar="CONFIG",
    envvar=CONFIG_ENV_VAR,
    type=click.Path(dir_okay=False, path_type=Path),
)
def rules(config_path: Path) -> None:
    """Validate CONFIG and list its rules in priority order."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not len(config.rules):
        click.echo("No rules configured: limited torrents will be reset to global limits.")
        return

    click.echo(f"{len(config.rules)} rules for {config.server.address}")
    for i, rule in enumerate(config.rules, start=1):
        click.echo(f"  #{i}: {rule}")
