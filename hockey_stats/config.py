"""Configuration management using Pydantic Settings.

This module provides centralized configuration for the hockey stats
application, supporting environment variables and .env file loading.

Example:
    >>> from hockey_stats.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.db_path)
    'data/hockey.db'
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Environment variables take precedence over .env file values.

    Attributes:
        db_path: Path to SQLite database file.
        nhl_api_base: Base URL of the NHL web API (roster, schedule, gamecenter).
        nhl_stats_api_base: Base URL of the NHL stats REST API (summaries).
        moneypuck_base: Base URL of the MoneyPuck CSV downloads.
        api_timeout: Request timeout in seconds.
        api_delay: Minimum interval between any two upstream requests.
        api_max_retries: Retry attempts for retriable HTTP failures.
        player_stats_delay: Per-game throttle for skater box scores.
        goalie_stats_delay: Per-game throttle for goalie box scores.
        team_stats_delay: Per-game throttle for team box scores.
        shot_events_delay: Per-game throttle for play-by-play.
        max_games_player_stats: Games processed per season for skater stats.
        max_games_goalie_stats: Games processed per season for goalie stats.
        max_games_team_stats: Games processed per season for team stats.
        max_games_shot_events: Focus-team games processed for shot events.
        focus_team_abbrev: Team whose roster and shots are collected in depth.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Directory for log files.
        data_dir: Directory for exported reports.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    db_path: str = Field(
        default="data/hockey.db",
        alias="HOCKEY_DB_PATH",
        description="Path to SQLite database file",
    )

    # Upstream endpoints
    nhl_api_base: str = Field(
        default="https://api-web.nhle.com/v1",
        alias="NHL_API_BASE",
        description="NHL web API base URL",
    )
    nhl_stats_api_base: str = Field(
        default="https://api.nhle.com/stats/rest/en",
        alias="NHL_STATS_API_BASE",
        description="NHL stats REST API base URL",
    )
    moneypuck_base: str = Field(
        default="https://moneypuck.com/moneypuck/playerData",
        alias="MONEYPUCK_BASE",
        description="MoneyPuck CSV base URL",
    )

    # HTTP client
    api_timeout: float = Field(
        default=30.0,
        alias="API_TIMEOUT",
        gt=0.0,
        description="Request timeout in seconds",
    )
    api_delay: float = Field(
        default=0.05,
        alias="API_DELAY",
        ge=0.0,
        description="Minimum interval between upstream requests in seconds",
    )
    api_max_retries: int = Field(
        default=1,
        alias="API_MAX_RETRIES",
        ge=0,
        le=5,
        description="Retry attempts for retriable HTTP failures",
    )

    # Per-stage throttles
    player_stats_delay: float = Field(
        default=0.15, alias="PLAYER_STATS_DELAY", ge=0.0
    )
    goalie_stats_delay: float = Field(
        default=0.20, alias="GOALIE_STATS_DELAY", ge=0.0
    )
    team_stats_delay: float = Field(default=0.15, alias="TEAM_STATS_DELAY", ge=0.0)
    shot_events_delay: float = Field(
        default=0.30, alias="SHOT_EVENTS_DELAY", ge=0.0
    )

    # Per-stage game caps
    max_games_player_stats: int = Field(
        default=200, alias="MAX_GAMES_PLAYER_STATS", ge=1
    )
    max_games_goalie_stats: int = Field(
        default=100, alias="MAX_GAMES_GOALIE_STATS", ge=1
    )
    max_games_team_stats: int = Field(default=200, alias="MAX_GAMES_TEAM_STATS", ge=1)
    max_games_shot_events: int = Field(
        default=50, alias="MAX_GAMES_SHOT_EVENTS", ge=1
    )

    focus_team_abbrev: str = Field(
        default="WSH",
        alias="FOCUS_TEAM",
        min_length=2,
        max_length=4,
        description="Abbreviation of the focus team",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )
    log_dir: str = Field(
        default="logs",
        alias="LOG_DIR",
        description="Directory for log files",
    )
    data_dir: str = Field(
        default="data",
        alias="DATA_DIR",
        description="Directory for exported reports",
    )

    @field_validator("db_path", "log_dir", "data_dir")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Ensure path strings are valid."""
        if not v or v.isspace():
            raise ValueError("Path cannot be empty or whitespace")
        return v

    @field_validator("focus_team_abbrev")
    @classmethod
    def normalize_abbrev(cls, v: str) -> str:
        """Team abbreviations are stored upper case."""
        return v.strip().upper()

    @property
    def db_path_obj(self) -> Path:
        """Return database path as Path object."""
        return Path(self.db_path)

    @property
    def db_url(self) -> str:
        """SQLAlchemy URL for the configured database file."""
        return f"sqlite:///{self.db_path_obj}"

    @property
    def log_dir_obj(self) -> Path:
        """Return log directory as Path object."""
        return Path(self.log_dir)

    @property
    def data_dir_obj(self) -> Path:
        """Return data directory as Path object."""
        return Path(self.data_dir)

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.db_path_obj.parent.mkdir(parents=True, exist_ok=True)
        self.data_dir_obj.mkdir(parents=True, exist_ok=True)
        self.log_dir_obj.mkdir(parents=True, exist_ok=True)


# Cached settings for the CLI; library classes take explicit arguments.
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the cached application settings.

    Returns:
        Settings instance loaded from environment.

    Example:
        >>> settings = get_settings()
        >>> print(settings.api_delay)
        0.05
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings
    _settings = None
