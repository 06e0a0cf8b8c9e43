"""Tests for configuration module."""

from __future__ import annotations

from pathlib import Path

import pytest

from hockey_stats.config import Settings, get_settings, reset_settings


class TestSettings:
    """Tests for Settings class."""

    def test_default_values(self) -> None:
        """Settings should have sensible defaults."""
        settings = Settings()

        assert settings.db_path == "data/hockey.db"
        assert settings.api_delay == 0.05
        assert settings.api_max_retries == 1
        assert settings.log_level == "INFO"
        assert settings.focus_team_abbrev == "WSH"

    def test_stage_defaults(self) -> None:
        """Per-stage throttles and caps should match the backfill defaults."""
        settings = Settings()

        assert settings.player_stats_delay == 0.15
        assert settings.goalie_stats_delay == 0.20
        assert settings.shot_events_delay == 0.30
        assert settings.max_games_player_stats == 200
        assert settings.max_games_goalie_stats == 100
        assert settings.max_games_shot_events == 50

    def test_path_properties(self) -> None:
        """Path properties should return Path objects."""
        settings = Settings()

        assert isinstance(settings.db_path_obj, Path)
        assert isinstance(settings.log_dir_obj, Path)
        assert isinstance(settings.data_dir_obj, Path)

    def test_db_url_uses_sqlite(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """db_url should point SQLAlchemy at the configured file."""
        monkeypatch.setenv("HOCKEY_DB_PATH", "/tmp/x/hockey.db")

        assert Settings().db_url == "sqlite:////tmp/x/hockey.db"

    def test_validation_rejects_empty_path(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Empty paths should be rejected."""
        # pydantic_settings uses aliases as env var names
        monkeypatch.setenv("HOCKEY_DB_PATH", "   ")
        with pytest.raises(ValueError, match="cannot be empty"):
            Settings()

    def test_validation_rejects_too_many_retries(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Retry count is bounded."""
        monkeypatch.setenv("API_MAX_RETRIES", "9")
        with pytest.raises(ValueError):
            Settings()

    def test_focus_team_is_upper_cased(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Focus team abbreviation should be normalised to upper case."""
        monkeypatch.setenv("FOCUS_TEAM", " nyr ")

        assert Settings().focus_team_abbrev == "NYR"

    def test_ensure_directories_creates_dirs(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """ensure_directories should create required directories."""
        monkeypatch.setenv("HOCKEY_DB_PATH", str(tmp_path / "data" / "test.db"))
        monkeypatch.setenv("DATA_DIR", str(tmp_path / "exports"))
        monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))

        settings = Settings()
        settings.ensure_directories()

        assert (tmp_path / "data").exists()
        assert (tmp_path / "exports").exists()
        assert (tmp_path / "logs").exists()


class TestGetSettings:
    """Tests for get_settings function."""

    def setup_method(self) -> None:
        """Reset settings before each test."""
        reset_settings()

    def teardown_method(self) -> None:
        """Reset settings after each test."""
        reset_settings()

    def test_returns_singleton(self) -> None:
        """get_settings should return the same instance."""
        assert get_settings() is get_settings()

    def test_reset_creates_new_instance(self) -> None:
        """reset_settings should drop the cached instance."""
        first = get_settings()
        reset_settings()

        assert get_settings() is not first
