"""HTTP client for the qBittorrent Web API.

This module provides:
- QBittorrentClient: HTTP client for communicating with the server
- Login with the Web UI credentials (session kept in the cookie jar)
- Incremental torrent sync (sync/maindata)
- Share limit updates (torrents/setShareLimits)
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from seedwarden.client.sync.store import DiffPayload, InvalidFieldError
from seedwarden.core.config import ServerConfig
from seedwarden.core.types import GLOBAL_WIRE, ShareLimit

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(APIError):
    """Session lost or no permission to access the server."""


class TransportError(APIError):
    """Network or HTTP-layer failure."""


class MalformedResponseError(TransportError):
    """Server answered with an unexpected payload."""


class RejectedError(APIError):
    """Server refused a request."""


class InvalidURLError(APIError):
    """Server address is not an absolute http(s) URL."""


class LoginError(APIError):
    """Login failed."""


class MissingCredentialsError(LoginError):
    """Username and password are not set."""


class BannedError(LoginError):
    """IP is banned for too many failed login attempts."""


class CredentialsError(LoginError):
    """Server rejected the username or password."""


def _encode_limit(limit: ShareLimit | None) -> str:
    if limit is None:
        return str(GLOBAL_WIRE)
    return str(limit.to_wire())


def validate_address(address: str) -> httpx.URL:
    """Parse and check a server address.

    Raises:
        InvalidURLError: If address is not an absolute http or https URL.
    """
    try:
        url = httpx.URL(address)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidURLError(f"Invalid server address {address!r}: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidURLError(f"Invalid server address {address!r}")
    return url


class QBittorrentClient:
    """HTTP client for the qBittorrent Web API."""

    def __init__(self, config: ServerConfig) -> None:
        """Initialize the client.

        Args:
            config: Server configuration with address and credentials.

        Raises:
            InvalidURLError: If the configured address is not usable.
        """
        self._config = config
        self._base_url = validate_address(config.address)
        # The Web UI rejects cross-origin requests without a matching Referer
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            headers={"Referer": str(self._base_url)},
        )

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> QBittorrentClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP client error: {e}") from e

    # === Authentication ===

    def login(self) -> None:
        """Log in with the configured credentials.

        The session cookie is kept by the underlying HTTP client.

        Raises:
            MissingCredentialsError: If username or password is not configured.
            BannedError: If the server banned this IP.
            CredentialsError: If the server did not open a session.
            TransportError: On network failures.
        """
        if not self._config.has_credentials:
            raise MissingCredentialsError("Username and password are not set")
        username = self._config.username
        password = self._config.password

        logger.debug(f"Logging in as {username}")
        try:
            response = self._request(
                "POST",
                "api/v2/auth/login",
                data={"username": username, "password": password},
            )
        except TransportError as e:
            raise LoginError(str(e)) from e
        if response.status_code == 403:
            raise BannedError("This IP is banned for too many login attempts", 403)
        if "set-cookie" not in response.headers:
            raise CredentialsError("Could not log in to server", response.status_code)
        logger.info(f"Logged in as {username}")

    # === Sync ===

    def fetch_diff(self, rid: int) -> DiffPayload:
        """Get torrent changes since a cursor.

        Args:
            rid: Cursor returned by the previous call, 0 for a full snapshot.

        Returns:
            The parsed diff payload.

        Raises:
            AuthenticationError: If the session is missing or expired.
            TransportError: On network failures or an unreadable response.
        """
        logger.debug("Syncing data")
        response = self._request("GET", "api/v2/sync/maindata", params={"rid": rid})
        if response.status_code == 403:
            raise AuthenticationError("No permission to access server", 403)
        if response.status_code >= 400:
            raise TransportError(
                f"Sync failed with status {response.status_code}", response.status_code
            )
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Sync response is not JSON: {e}") from e
        if not isinstance(data, dict):
            raise MalformedResponseError("Sync response is not a JSON object")
        try:
            return DiffPayload.from_dict(data)
        except InvalidFieldError as e:
            raise MalformedResponseError(f"Unexpected sync response: {e}") from e

    # === Share limits ===

    def apply_limits(
        self,
        torrent_hash: str,
        ratio: ShareLimit | None,
        minutes: ShareLimit | None,
    ) -> None:
        """Set the share limits of a torrent.

        Args:
            torrent_hash: Hash of the torrent.
            ratio: Ratio limit, None for the global default.
            minutes: Seeding time limit in minutes, None for the global default.

        Raises:
            RejectedError: If the server did not accept the change.
            TransportError: On network failures.
        """
        data = {
            "hashes": torrent_hash,
            "inactiveSeedingTimeLimit": str(GLOBAL_WIRE),
            "ratioLimit": _encode_limit(ratio),
            "seedingTimeLimit": _encode_limit(minutes),
        }
        response = self._request("POST", "api/v2/torrents/setShareLimits", data=data)
        if response.status_code != 200:
            raise RejectedError(
                f"Share limits rejected with status {response.status_code}",
                response.status_code,
            )
