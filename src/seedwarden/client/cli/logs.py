"""Logging setup for the seedwarden CLI."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_LEVEL_ENV_VAR = "SEEDWARDEN_LOG_LEVEL"


def setup_logging(level: str = "INFO") -> None:
    """Configure the seedwarden logger to write to stdout.

    Args:
        level: Name of the minimum level to output.
    """
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger("seedwarden")
    root_logger.setLevel(level.upper())

    # Calling twice (e.g. in tests) must not duplicate output
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)
