"""Tests for CLI commands - run, rules."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from seedwarden.client.api import BannedError, MissingCredentialsError, RejectedError
from seedwarden.client.cli import cli
from seedwarden.client.sync.store import DiffPayload, PartialTorrent

CONFIG = """\
server:
  address: http://localhost:8080
  username: admin
  password: adminadmin
rules:
  - category: movies
    seedingTime: ">=60"
    limits:
      ratio: 2
      minutes: 1440
  - category: tv
    limits:
      ratio: -1
"""


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Create a valid configuration file."""
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


@pytest.fixture
def mock_client() -> MagicMock:
    """Create a mock qBittorrent client serving two torrents."""
    client = MagicMock()
    client.fetch_diff.return_value = DiffPayload(
        rid=1,
        full_update=True,
        torrents={
            "aaa": PartialTorrent(
                category="movies",
                max_ratio=-1,
                max_seeding_time=-1,
                name="Some.Movie",
                seeding_time=7200,
                tags="",
            ),
            "bbb": PartialTorrent(
                category="tv",
                max_ratio=-1,
                max_seeding_time=-2,
                name="Some.Show",
                seeding_time=60,
                tags="",
            ),
        },
    )
    return client


class TestRulesCommand:
    """Tests for 'seedwarden rules' command."""

    def test_lists_rules(self, runner: CliRunner, config_file: Path) -> None:
        """Rules should list each rule with its number."""
        result = runner.invoke(cli, ["rules", str(config_file)])
        assert result.exit_code == 0
        assert "2 rules for http://localhost:8080/" in result.output
        assert (
            "#1: category = movies, seeding time >= 60 minutes "
            "=> 2.0 ratio and 1440 minutes"
        ) in result.output
        assert "#2: category = tv => unlimited ratio and global minutes" in result.output

    def test_no_rules(self, runner: CliRunner, tmp_path: Path) -> None:
        """Rules should say when nothing is configured."""
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  address: http://localhost:8080\n", encoding="utf-8")
        result = runner.invoke(cli, ["rules", str(path)])
        assert result.exit_code == 0
        assert "No rules configured" in result.output

    def test_invalid_rule(self, runner: CliRunner, tmp_path: Path) -> None:
        """Rules should fail on an invalid rule."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "server:\n  address: http://localhost:8080\n"
            "rules:\n  - seedingTime: '<='\n    limits: {}\n",
            encoding="utf-8",
        )
        result = runner.invoke(cli, ["rules", str(path)])
        assert result.exit_code == 1
        assert "rules.0.seedingTime" in result.output

    def test_config_from_environment(self, runner: CliRunner, config_file: Path) -> None:
        """Rules should read the config path from the environment."""
        result = runner.invoke(cli, ["rules"], env={"SEEDWARDEN_CONFIG": str(config_file)})
        assert result.exit_code == 0
        assert "2 rules" in result.output


class TestRunCommand:
    """Tests for 'seedwarden run' command."""

    def test_once_applies_rules(
        self, runner: CliRunner, config_file: Path, mock_client: MagicMock
    ) -> None:
        """Run --once should sync, apply and summarize."""
        with (
            patch("seedwarden.client.cli.run.setup_logging"),
            patch("seedwarden.client.api.QBittorrentClient", return_value=mock_client),
        ):
            result = runner.invoke(cli, ["run", "--once", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "Checked 2 torrents: 1 updated, 0 failed" in result.output
        mock_client.login.assert_called_once()
        mock_client.fetch_diff.assert_called_once_with(0)
        # Only the movie needs new limits, the show is already unlimited
        assert mock_client.apply_limits.call_count == 1
        assert mock_client.apply_limits.call_args.args[0] == "aaa"

    def test_once_reports_failures(
        self, runner: CliRunner, config_file: Path, mock_client: MagicMock
    ) -> None:
        """Run --once should exit 1 when an update fails."""
        mock_client.apply_limits.side_effect = RejectedError("rejected", 400)
        with (
            patch("seedwarden.client.cli.run.setup_logging"),
            patch("seedwarden.client.api.QBittorrentClient", return_value=mock_client),
        ):
            result = runner.invoke(cli, ["run", "--once", str(config_file)])

        assert result.exit_code == 1
        assert "1 failed" in result.output

    def test_once_without_credentials(
        self, runner: CliRunner, config_file: Path, mock_client: MagicMock
    ) -> None:
        """Run should continue without login when credentials are unset."""
        mock_client.login.side_effect = MissingCredentialsError("not set")
        with (
            patch("seedwarden.client.cli.run.setup_logging"),
            patch("seedwarden.client.api.QBittorrentClient", return_value=mock_client),
        ):
            result = runner.invoke(cli, ["run", "--once", str(config_file)])

        assert result.exit_code == 0, result.output

    def test_login_failure(
        self, runner: CliRunner, config_file: Path, mock_client: MagicMock
    ) -> None:
        """Run should stop when login fails."""
        mock_client.login.side_effect = BannedError("This IP is banned", 403)
        with (
            patch("seedwarden.client.cli.run.setup_logging"),
            patch("seedwarden.client.api.QBittorrentClient", return_value=mock_client),
        ):
            result = runner.invoke(cli, ["run", "--once", str(config_file)])

        assert result.exit_code == 1
        assert "banned" in result.output
        mock_client.fetch_diff.assert_not_called()

    def test_invalid_address(self, runner: CliRunner, tmp_path: Path) -> None:
        """Run should fail on an invalid server address."""
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  address: localhost:8080\n", encoding="utf-8")
        with patch("seedwarden.client.cli.run.setup_logging"):
            result = runner.invoke(cli, ["run", "--once", str(path)])

        assert result.exit_code == 1
        assert "valid base URL" in result.output

    def test_missing_config(self, runner: CliRunner, tmp_path: Path) -> None:
        """Run should fail when the config file is missing."""
        with patch("seedwarden.client.cli.run.setup_logging"):
            result = runner.invoke(cli, ["run", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Could not load configuration file" in result.output

    def test_interval_minimum(self, runner: CliRunner, config_file: Path) -> None:
        """Run should reject intervals below one second."""
        result = runner.invoke(cli, ["run", "--interval", "0", str(config_file)])
        assert result.exit_code == 2
