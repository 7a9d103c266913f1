"""Run command for seedwarden CLI.

Commands:
- run: Enforce the configured share-limit rules on a qBittorrent server
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from seedwarden.client.cli.config import CONFIG_ENV_VAR, ConfigError, load_config
from seedwarden.client.cli.logs import LOG_LEVEL_ENV_VAR, LOG_LEVELS, setup_logging

logger = logging.getLogger(__name__)


@click.command()
@click.argument(
    "config_path",
    metavar="CONFIG",
    envvar=CONFIG_ENV_VAR,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "--interval",
    "-i",
    type=click.FloatRange(min=1),
    default=60.0,
    show_default=True,
    envvar="SEEDWARDEN_INTERVAL",
    help="Seconds between two checks.",
)
@click.option("--once", is_flag=True, help="Run a single check and exit.")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
    envvar=LOG_LEVEL_ENV_VAR,
    help="Minimum level of log messages.",
)
def run(config_path: Path, interval: float, once: bool, log_level: str) -> None:
    """Enforce share-limit rules on a qBittorrent server.

    CONFIG is the path to the YAML configuration file (or set
    SEEDWARDEN_CONFIG). Torrents are checked immediately and then every
    --interval seconds until interrupted.
    """
    from seedwarden.client.api import (
        InvalidURLError,
        LoginError,
        MissingCredentialsError,
        QBittorrentClient,
    )
    from seedwarden.client.sync.reconciler import Reconciler
    from seedwarden.client.sync.supervisor import FatalError, Supervisor

    setup_logging(log_level)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    logger.info(f"Loaded configuration with {len(config.rules)} rules")
    for i, rule in enumerate(config.rules, start=1):
        logger.info(f"Rule #{i}: {rule}")

    try:
        client = QBittorrentClient(config.server)
    except InvalidURLError as e:
        click.echo(f"Error: Configuration did not contain a valid base URL: {e}", err=True)
        sys.exit(1)

    with client:
        try:
            client.login()
        except MissingCredentialsError:
            logger.info("No login: username and password are not set")
        except LoginError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        reconciler = Reconciler(client, config.rules)
        supervisor = Supervisor(reconciler, client, interval=interval)

        if once:
            try:
                report = supervisor.tick()
            except FatalError as e:
                click.echo(f"Error: {e}", err=True)
                sys.exit(1)
            if report is None:
                click.echo("Error: Could not sync with the server.", err=True)
                sys.exit(1)
            click.echo(
                f"Checked {len(reconciler.store)} torrents: "
                f"{len(report.applied)} updated, {len(report.failed)} failed"
            )
            if not report.success:
                sys.exit(1)
            return

        try:
            supervisor.run_forever()
        except FatalError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        except KeyboardInterrupt:
            click.echo("\nStopping...")
