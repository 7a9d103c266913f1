"""Tests for the qBittorrent HTTP client."""

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from seedwarden.client.api import (
    AuthenticationError,
    BannedError,
    CredentialsError,
    InvalidURLError,
    LoginError,
    MalformedResponseError,
    MissingCredentialsError,
    QBittorrentClient,
    RejectedError,
    TransportError,
)
from seedwarden.client.sync.store import PartialTorrent
from seedwarden.core.config import ServerConfig
from seedwarden.core.types import ShareLimit

SYNC_URL = "http://test/api/v2/sync/maindata"
LOGIN_URL = "http://test/api/v2/auth/login"
LIMITS_URL = "http://test/api/v2/torrents/setShareLimits"


def make_config(
    address: str = "http://test",
    username: str | None = "admin",
    password: str | None = "secret",
) -> ServerConfig:
    """Create a ServerConfig for testing."""
    return ServerConfig(address=address, username=username, password=password)


def form_data(request: httpx.Request) -> dict[str, str]:
    """Decode a form-encoded request body."""
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


class TestInit:
    """Tests for client construction."""

    @pytest.mark.parametrize(
        "address", ["ftp://test/", "localhost:8080", "not a url", "/relative/path"]
    )
    def test_invalid_address(self, address: str) -> None:
        """Should reject addresses that are not absolute http(s) URLs."""
        with pytest.raises(InvalidURLError):
            QBittorrentClient(make_config(address=address))

    def test_base_url_with_path(self) -> None:
        """Should keep a path prefix in the base URL."""
        with QBittorrentClient(make_config(address="https://host/qbt")) as client:
            assert str(client.base_url) == "https://host/qbt/"


class TestLogin:
    """Tests for QBittorrentClient.login."""

    def test_success(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should post the credentials with the Referer header."""
        httpx_mock.add_response(
            method="POST",
            url=LOGIN_URL,
            text="Ok.",
            headers={"set-cookie": "SID=abc123; HttpOnly; path=/"},
        )

        with QBittorrentClient(make_config()) as client:
            client.login()

        request = httpx_mock.get_request()
        assert form_data(request) == {"username": "admin", "password": "secret"}
        assert request.headers["referer"] == "http://test/"

    def test_missing_credentials(self) -> None:
        """Should fail without contacting the server when credentials are unset."""
        with QBittorrentClient(make_config(password=None)) as client:
            with pytest.raises(MissingCredentialsError):
                client.login()

    def test_banned(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise BannedError on 403."""
        httpx_mock.add_response(method="POST", url=LOGIN_URL, status_code=403)

        with QBittorrentClient(make_config()) as client:
            with pytest.raises(BannedError):
                client.login()

    def test_wrong_credentials(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise CredentialsError when no session cookie is set."""
        httpx_mock.add_response(method="POST", url=LOGIN_URL, text="Fails.")

        with QBittorrentClient(make_config()) as client:
            with pytest.raises(CredentialsError):
                client.login()

    def test_network_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise LoginError on network failures."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"), url=LOGIN_URL)

        with QBittorrentClient(make_config()) as client:
            with pytest.raises(LoginError):
                client.login()


class TestFetchDiff:
    """Tests for QBittorrentClient.fetch_diff."""

    def test_full_update(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should parse a full snapshot and ignore unknown keys."""
        httpx_mock.add_response(
            url=f"{SYNC_URL}?rid=0",
            json={
                "rid": 1,
                "full_update": True,
                "torrents": {
                    "abc": {
                        "category": "movies",
                        "max_ratio": -1,
                        "max_seeding_time": -1,
                        "name": "Some.Movie",
                        "seeding_time": 60,
                        "tags": "",
                        "state": "uploading",
                    }
                },
                "server_state": {"dl_info_speed": 0},
            },
        )

        with QBittorrentClient(make_config()) as client:
            diff = client.fetch_diff(0)

        assert diff.rid == 1
        assert diff.full_update is True
        assert diff.torrents["abc"].name == "Some.Movie"
        assert diff.torrents["abc"].tags == ""

    def test_incremental_update(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should send the cursor and parse a partial update."""
        httpx_mock.add_response(
            url=f"{SYNC_URL}?rid=41",
            json={"rid": 42, "torrents": {"abc": {"seeding_time": 120}}, "torrents_removed": ["def"]},
        )

        with QBittorrentClient(make_config()) as client:
            diff = client.fetch_diff(41)

        assert diff.rid == 42
        assert diff.full_update is False
        assert diff.torrents == {"abc": PartialTorrent(seeding_time=120)}
        assert diff.torrents_removed == ["def"]

    def test_forbidden(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise AuthenticationError on 403."""
        httpx_mock.add_response(url=f"{SYNC_URL}?rid=0", status_code=403)

        with QBittorrentClient(make_config()) as client:
            with pytest.raises(AuthenticationError) as exc_info:
                client.fetch_diff(0)
        assert exc_info.value.status_code == 403

    def test_server_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise TransportError on server errors."""
        httpx_mock.add_response(url=f"{SYNC_URL}?rid=0", status_code=500)

        with QBittorrentClient(make_config()) as client:
            with pytest.raises(TransportError):
                client.fetch_diff(0)

    def test_network_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise TransportError on network failures."""
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"), url=f"{SYNC_URL}?rid=0")

        with QBittorrentClient(make_config()) as client:
            with pytest.raises(TransportError):
                client.fetch_diff(0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"text": "not json"},
            {"json": [1, 2, 3]},
            {"json": {"torrents": {}}},
            {"json": {"rid": 1, "torrents": {"abc": {"seeding_time": "long"}}}},
        ],
    )
    def test_malformed_response(self, httpx_mock, kwargs: dict[str, object]) -> None:  # type: ignore[no-untyped-def]
        """Should raise MalformedResponseError on unexpected payloads."""
        httpx_mock.add_response(url=f"{SYNC_URL}?rid=0", **kwargs)

        with QBittorrentClient(make_config()) as client:
            with pytest.raises(MalformedResponseError):
                client.fetch_diff(0)


class TestApplyLimits:
    """Tests for QBittorrentClient.apply_limits."""

    def test_fixed_limits(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should send both limits with inactive seeding time set to global."""
        httpx_mock.add_response(method="POST", url=LIMITS_URL)

        with QBittorrentClient(make_config()) as client:
            client.apply_limits("abc", ShareLimit.fixed(2.5), ShareLimit.fixed(1440))

        assert form_data(httpx_mock.get_request()) == {
            "hashes": "abc",
            "inactiveSeedingTimeLimit": "-2",
            "ratioLimit": "2.5",
            "seedingTimeLimit": "1440",
        }

    def test_none_means_global(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should send -2 for limits left to the global default."""
        httpx_mock.add_response(method="POST", url=LIMITS_URL)

        with QBittorrentClient(make_config()) as client:
            client.apply_limits("abc", None, None)

        data = form_data(httpx_mock.get_request())
        assert data["ratioLimit"] == "-2"
        assert data["seedingTimeLimit"] == "-2"

    def test_unlimited(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should send -1 for unlimited limits."""
        httpx_mock.add_response(method="POST", url=LIMITS_URL)

        with QBittorrentClient(make_config()) as client:
            client.apply_limits("abc", ShareLimit.unlimited(), None)

        data = form_data(httpx_mock.get_request())
        assert data["ratioLimit"] == "-1"
        assert data["seedingTimeLimit"] == "-2"

    def test_rejected(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise RejectedError on any status other than 200."""
        httpx_mock.add_response(method="POST", url=LIMITS_URL, status_code=400)

        with QBittorrentClient(make_config()) as client:
            with pytest.raises(RejectedError) as exc_info:
                client.apply_limits("abc", None, None)
        assert exc_info.value.status_code == 400
