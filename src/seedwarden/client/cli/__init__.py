"""Command-line interface for seedwarden.

This module provides the main CLI entry point and assembles all commands.

Commands:
- run: Enforce share-limit rules on a qBittorrent server
- rules: Validate a configuration file and list its rules
"""

from __future__ import annotations

import click

from seedwarden.client.cli.config import Config, ConfigError, load_config, parse_config
from seedwarden.client.cli.logs import setup_logging
from seedwarden.client.cli.rules import rules
from seedwarden.client.cli.run import run


@click.group()
@click.version_option(package_name="seedwarden")
def cli() -> None:
    """seedwarden - Share-limit rules for qBittorrent."""


cli.add_command(run)
cli.add_command(rules)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "Config",
    "ConfigError",
    "load_config",
    "parse_config",
    "setup_logging",
]
