"""Shared configuration classes for seedwarden.

This module defines the connection settings used by the qBittorrent client.
Loading them from the YAML file lives in seedwarden.client.cli.config.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ServerConfig:
    """Configuration for connecting to a qBittorrent server.

    Attributes:
        address: Base URL of the Web UI (e.g., "http://localhost:8080/").
        username: Web UI username, None to skip login.
        password: Web UI password, None to skip login.
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
    """

    address: str
    username: str | None = None
    password: str | None = None
    timeout: float = 30.0
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Normalize address so relative API paths resolve under it."""
        if not self.address.endswith("/"):
            self.address += "/"

    @property
    def has_credentials(self) -> bool:
        """Check if both username and password are set."""
        return self.username is not None and self.password is not None
