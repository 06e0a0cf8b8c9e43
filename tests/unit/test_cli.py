"""Tests for CLI module."""
from __future__ import annotations

import json
from collections.abc import Generator
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from hockey_stats.cli import _verdict, app
from hockey_stats.config import Settings

runner = CliRunner()


def _json(output: str) -> dict:
    """Parse the JSON document printed after any log lines."""
    lines = output.splitlines()
    start = lines.index("{")
    return json.loads("\n".join(lines[start:]))


@pytest.fixture
def cli_settings(test_settings: Settings) -> Generator[Settings, None, None]:
    """Settings pointing at a temporary database, with a fresh engine."""
    from hockey_stats.data.db import reset_engine

    reset_engine()
    yield test_settings
    reset_engine()


@pytest.fixture
def offline_client(monkeypatch: pytest.MonkeyPatch, failing_client: MagicMock) -> MagicMock:
    """Make the backfill command use a client that returns no data."""
    factory = MagicMock()
    factory.return_value.__enter__.return_value = failing_client
    monkeypatch.setattr("hockey_stats.data.NHLApiClient", factory)
    return failing_client


class TestMainApp:
    """Tests for main CLI app."""

    def test_help_shows_all_commands(self) -> None:
        """Help should list all subcommand groups."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "data" in result.stdout
        assert "dashboard" in result.stdout

    def test_version_flag(self) -> None:
        """--version should show version and exit."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.stdout

    def test_short_version_flag(self) -> None:
        """-v should show version and exit."""
        result = runner.invoke(app, ["-v"])

        assert result.exit_code == 0
        assert "0.1.0" in result.stdout

    def test_verbose_flag(self, cli_settings: Settings) -> None:
        """--verbose should enable verbose mode."""
        result = runner.invoke(app, ["--verbose", "data", "--help"])

        assert result.exit_code == 0


class TestDataCommands:
    """Tests for data subcommands."""

    def test_data_help(self) -> None:
        """Data help should list its commands."""
        result = runner.invoke(app, ["data", "--help"])

        assert result.exit_code == 0
        for command in ("backfill", "status", "validate", "aggregate"):
            assert command in result.stdout

    def test_status_without_database(self, cli_settings: Settings) -> None:
        """Status should say when there is no database yet."""
        result = runner.invoke(app, ["data", "status"])

        assert result.exit_code == 0
        assert "Database not found" in result.stdout

    def test_validate_creates_nothing(self, cli_settings: Settings) -> None:
        """Validate on a blank database should report missing tables."""
        result = runner.invoke(app, ["data", "validate"])

        assert result.exit_code == 1
        assert "Missing tables" in result.stdout

    def test_backfill_requires_seasons(self, cli_settings: Settings) -> None:
        """Backfill without seasons is a usage error."""
        result = runner.invoke(app, ["data", "backfill"])

        assert result.exit_code != 0

    def test_backfill_invalid_season(self, cli_settings: Settings, offline_client: MagicMock) -> None:
        """A malformed season should fail before any upstream call."""
        result = runner.invoke(app, ["data", "backfill", "--seasons", "2024"])

        assert result.exit_code == 1
        assert "Error" in result.stdout
        offline_client.get_standings.assert_not_called()

    def test_backfill_offline(self, cli_settings: Settings, offline_client: MagicMock) -> None:
        """An offline backfill completes from the fallback snapshot."""
        result = runner.invoke(app, ["data", "backfill", "-s", "20242025"])

        assert result.exit_code == 0, result.stdout
        assert "Status: completed" in result.stdout
        assert "Fallback data used" in result.stdout

    def test_backfill_json_report(self, cli_settings: Settings, offline_client: MagicMock) -> None:
        """--json should print the report as a JSON document."""
        result = runner.invoke(app, ["data", "backfill", "-s", "20242025", "--json"])

        assert result.exit_code == 0
        report = _json(result.stdout)
        assert report["status"] == "completed"
        assert report["row_counts"]["teams"] == 32

    def test_status_after_backfill(self, cli_settings: Settings, offline_client: MagicMock) -> None:
        """Status should show counts and a partial verdict."""
        runner.invoke(app, ["data", "backfill", "-s", "20242025"])

        result = runner.invoke(app, ["data", "status"])

        assert result.exit_code == 0
        assert "Database Status" in result.stdout
        assert "partial" in result.stdout

    def test_validate_after_backfill(self, cli_settings: Settings, offline_client: MagicMock) -> None:
        """All tables exist once the backfill has run."""
        runner.invoke(app, ["data", "backfill", "-s", "20242025"])

        result = runner.invoke(app, ["data", "validate"])

        assert result.exit_code == 0
        assert "All tables present" in result.stdout
        assert "Foreign keys enforced" in result.stdout

    def test_validate_foreign_keys_off(
        self, cli_settings: Settings, offline_client: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Validate should fail when foreign keys are not enforced."""
        runner.invoke(app, ["data", "backfill", "-s", "20242025"])
        monkeypatch.setattr("hockey_stats.data.verify_foreign_keys_enabled", lambda engine: False)

        result = runner.invoke(app, ["data", "validate"])

        assert result.exit_code == 1
        assert "not enforced" in result.stdout

    def test_aggregate(self, cli_settings: Settings, offline_client: MagicMock) -> None:
        """Aggregate should recompute without the network."""
        runner.invoke(app, ["data", "backfill", "-s", "20242025"])

        result = runner.invoke(app, ["data", "aggregate", "-s", "20242025"])

        assert result.exit_code == 0
        assert "team 15 (2 pts)" in result.stdout

    def test_aggregate_invalid_season(self, cli_settings: Settings) -> None:
        """Aggregate should reject malformed seasons."""
        result = runner.invoke(app, ["data", "aggregate", "-s", "20242026"])

        assert result.exit_code == 1


class TestVerdict:
    """Tests for the store completeness verdict."""

    def test_empty(self) -> None:
        """Too few teams means empty."""
        assert _verdict({"teams": 0}) == "empty"

    def test_partial(self) -> None:
        """Teams but few games means partial."""
        assert _verdict({"teams": 32, "games": 5, "players": 10}) == "partial"

    def test_complete(self) -> None:
        """Enough games and players means complete."""
        assert _verdict({"teams": 32, "games": 1312, "players": 900}) == "complete"


class TestDashboardCommands:
    """Tests for dashboard subcommands."""

    def test_package_mock(self, cli_settings: Settings) -> None:
        """The mock package should be printed as JSON."""
        result = runner.invoke(app, ["dashboard", "package", "--mock"])

        assert result.exit_code == 0
        package = _json(result.stdout)
        assert package["team"]["abbreviation"] == "WSH"
        assert package["season_stats"]["points"] == 6

    def test_game_mock(self, cli_settings: Settings) -> None:
        """A sample game should be printed as JSON."""
        result = runner.invoke(app, ["dashboard", "game", "2024020500", "--mock"])

        assert result.exit_code == 0
        assert _json(result.stdout)["game"]["id"] == 2024020500

    def test_game_not_found(self, cli_settings: Settings) -> None:
        """Unknown games should exit with an error."""
        result = runner.invoke(app, ["dashboard", "game", "1", "--mock"])

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_package_unknown_team(self, cli_settings: Settings, monkeypatch: pytest.MonkeyPatch) -> None:
        """An unknown focus team should exit with an error."""
        from hockey_stats.config import reset_settings

        monkeypatch.setenv("FOCUS_TEAM", "QUE")
        reset_settings()

        result = runner.invoke(app, ["dashboard", "package", "--mock"])

        assert result.exit_code == 1
        assert "QUE" in result.stdout
