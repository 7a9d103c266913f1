"""Configuration file loading for the seedwarden CLI.

This module provides:
- ConfigError: Raised for unreadable or invalid configuration files
- Config: Server settings plus the ordered rule set
- parse_config / load_config: Validate YAML configuration

The file layout is::

    server:
      address: http://localhost:8080/
      username: admin
      password: adminadmin
    rules:
      - category: movies
        seedingTime: ">=1440"
        limits:
          ratio: 2
          minutes: 10080

Rules are validated eagerly: a malformed comparison fails the whole load
with a message naming the rule and the field.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from seedwarden.client.sync.domain.comparison import Comparison, parse_comparison
from seedwarden.client.sync.domain.rules import Rule, RuleLimits, RuleSet
from seedwarden.client.sync.store import TagList
from seedwarden.core.config import ServerConfig
from seedwarden.core.types import GLOBAL_WIRE, ShareLimit

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SEEDWARDEN_CONFIG"

# Seeding time limits are 32-bit signed on the server
MAX_SEEDING_MINUTES = 2**31 - 1


class ConfigError(Exception):
    """Configuration file could not be loaded or is invalid."""


class _ServerSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    address: str
    username: str | None = None
    password: str | None = None
    timeout: float = Field(default=30.0, gt=0)
    verify_ssl: bool = True


class _LimitsSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Strict so that YAML booleans and strings are not read as numbers
    ratio: float | None = Field(default=None, strict=True, allow_inf_nan=False, ge=GLOBAL_WIRE)
    minutes: int | None = Field(
        default=None, strict=True, ge=GLOBAL_WIRE, le=MAX_SEEDING_MINUTES
    )


class _RuleSection(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    category: str | None = None
    seeding_time: Any = Field(default=None, alias="seedingTime")
    tags: list[str] | None = None
    limits: _LimitsSection

    @field_validator("seeding_time", mode="before")
    @classmethod
    def _parse_seeding_time(cls, value: Any) -> Comparison[int] | None:
        if value is None or isinstance(value, Comparison):
            return value
        if not isinstance(value, str):
            raise ValueError(f"expected a string such as '>=60', got {value!r}")
        return parse_comparison(value)

    def to_rule(self) -> Rule:
        ratio = self.limits.ratio
        minutes = self.limits.minutes
        return Rule(
            category=self.category,
            seeding_time=self.seeding_time,
            tags=TagList(self.tags) if self.tags is not None else None,
            limits=RuleLimits(
                ratio=ShareLimit.from_wire(ratio) if ratio is not None else None,
                minutes=ShareLimit.from_wire(minutes) if minutes is not None else None,
            ),
        )


class _ConfigFile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    server: _ServerSection
    rules: list[_RuleSection] = Field(default_factory=list)


@dataclass
class Config:
    """Loaded seedwarden configuration."""

    server: ServerConfig
    rules: RuleSet


def _format_validation_error(error: ValidationError) -> str:
    lines = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        message = item["msg"].removeprefix("Value error, ")
        lines.append(f"{location}: {message}")
    return "; ".join(lines)


def parse_config(data: Any) -> Config:
    """Validate already-parsed YAML data.

    Args:
        data: Result of parsing the configuration document.

    Returns:
        Validated configuration.

    Raises:
        ConfigError: If the document does not match the schema.
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping with 'server' and 'rules'")
    try:
        document = _ConfigFile.model_validate(data)
    except ValidationError as e:
        raise ConfigError(_format_validation_error(e)) from e

    section = document.server
    server = ServerConfig(
        address=section.address,
        username=section.username,
        password=section.password,
        timeout=section.timeout,
        verify_ssl=section.verify_ssl,
    )
    rules = RuleSet(rule.to_rule() for rule in document.rules)
    return Config(server=server, rules=rules)


def load_config(path: Path) -> Config:
    """Load the configuration from a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Validated configuration.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or is
            not a valid configuration.
    """
    logger.debug(f"Using configuration at {path}")
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Could not load configuration file: {e}") from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse configuration file: {e}") from e
    return parse_config(data)
