"""Shared pytest fixtures for hockey stats tests.

This module contains fixtures used across multiple test modules:
- Configuration fixtures (test settings)
- Database fixtures (file-backed SQLite in a temp directory)
- Mock fixtures (failing upstream client)
- Sample upstream payloads (standings, roster, boxscore, play-by-play)

Example:
    def test_something(session_factory, failing_client):
        # session_factory is bound to a fresh schema
        # failing_client returns "no data" for every endpoint
        pass
"""
from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from hockey_stats.config import Settings, reset_settings


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks end-to-end backfill tests")


# =============================================================================
# Paths
# =============================================================================


@pytest.fixture
def tmp_data_dir(tmp_path: Path) -> Path:
    """Create and return temporary data directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def test_settings(
    tmp_data_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Settings, None, None]:
    """Provide test settings with temporary directories and no throttling.

    Automatically resets settings singleton after test.
    """
    monkeypatch.setenv("HOCKEY_DB_PATH", str(tmp_data_dir / "test.db"))
    monkeypatch.setenv("LOG_DIR", str(tmp_data_dir / "logs"))
    monkeypatch.setenv("DATA_DIR", str(tmp_data_dir / "exports"))
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    for name in (
        "API_DELAY",
        "PLAYER_STATS_DELAY",
        "GOALIE_STATS_DELAY",
        "TEAM_STATS_DELAY",
        "SHOT_EVENTS_DELAY",
    ):
        monkeypatch.setenv(name, "0")

    reset_settings()
    from hockey_stats.config import get_settings

    settings = get_settings()
    settings.ensure_directories()

    yield settings

    reset_settings()


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine(tmp_data_dir: Path) -> Generator[Engine, None, None]:
    """File-backed SQLite engine with every table created."""
    from hockey_stats.data.db import create_db_engine, init_db

    engine = create_db_engine(f"sqlite:///{tmp_data_dir / 'hockey.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory bound to the test engine."""
    from hockey_stats.data.db import create_session_factory

    return create_session_factory(engine)


@pytest.fixture
def seeded_teams(session_factory: sessionmaker[Session]) -> list[dict[str, Any]]:
    """Store populated with the 32 fallback teams."""
    from hockey_stats.data.fallback import FallbackDataProvider
    from hockey_stats.data.models import Team
    from hockey_stats.data.upsert import Upserter

    teams = FallbackDataProvider().teams()
    Upserter(session_factory).upsert_many(Team, teams)
    return teams


# =============================================================================
# Upstream
# =============================================================================


@pytest.fixture
def failing_client() -> MagicMock:
    """Upstream client whose every endpoint comes back empty."""
    from hockey_stats.data.api import NHLApiClient

    client = MagicMock(spec=NHLApiClient)
    client.get_standings.return_value = []
    client.get_team_roster.return_value = []
    client.get_team_schedule.return_value = []
    client.get_skater_summary.return_value = []
    client.get_goalie_summary.return_value = []
    client.get_boxscore.return_value = None
    client.get_play_by_play.return_value = None
    client.get_moneypuck_teams.return_value = []
    client.get_moneypuck_skaters.return_value = []
    return client


@pytest.fixture
def sample_standings() -> list[dict[str, Any]]:
    """Two standings records in the web API shape."""
    return [
        {
            "teamAbbrev": {"default": "WSH"},
            "teamName": {"default": "Washington Capitals"},
            "placeName": {"default": "Washington"},
            "divisionName": "Metropolitan",
            "conferenceName": "Eastern",
        },
        {
            "teamAbbrev": {"default": "NYR"},
            "teamName": {"default": "New York Rangers"},
            "placeName": {"default": "New York"},
            "divisionName": "Metropolitan",
            "conferenceName": "Eastern",
        },
    ]


@pytest.fixture
def sample_boxscore() -> dict[str, Any]:
    """Box score for WSH (home, id 15) beating NYR (away, id 3) 4-2."""
    return {
        "id": 2024020500,
        "homeTeam": {"id": 15, "abbrev": "WSH", "score": 4, "sog": 32},
        "awayTeam": {"id": 3, "abbrev": "NYR", "score": 2, "sog": 28},
        "playerByGameStats": {
            "homeTeam": {
                "forwards": [
                    {
                        "playerId": 8471214,
                        "sweaterNumber": 8,
                        "name": {"default": "A. Ovechkin"},
                        "position": "L",
                        "goals": 2,
                        "assists": 1,
                        "points": 3,
                        "plusMinus": 2,
                        "pim": 2,
                        "hits": 3,
                        "powerPlayGoals": 1,
                        "sog": 6,
                        "blockedShots": 0,
                        "shorthandedGoals": 0,
                        "toi": "19:45",
                    },
                ],
                "defense": [
                    {
                        "playerId": 8476453,
                        "sweaterNumber": 74,
                        "name": {"default": "J. Carlson"},
                        "position": "D",
                        "goals": 0,
                        "assists": 2,
                        "plusMinus": 1,
                        "pim": 0,
                        "hits": 1,
                        "powerPlayGoals": 0,
                        "sog": 2,
                        "blockedShots": 3,
                        "toi": "24:10",
                    },
                ],
                "goalies": [
                    {
                        "playerId": 8478402,
                        "sweaterNumber": 79,
                        "name": {"default": "C. Lindgren"},
                        "position": "G",
                        "shotsAgainst": 28,
                        "goalsAgainst": 2,
                        "toi": "60:00",
                        "decision": "W",
                    },
                ],
            },
            "awayTeam": {
                "forwards": [
                    {
                        "playerId": 8478550,
                        "sweaterNumber": 10,
                        "name": {"default": "A. Panarin"},
                        "position": "L",
                        "goals": 1,
                        "assists": 0,
                        "points": 1,
                        "plusMinus": -1,
                        "pim": 4,
                        "hits": 0,
                        "powerPlayGoals": 0,
                        "sog": 4,
                        "blockedShots": 1,
                        "shorthandedGoals": 0,
                        "toi": "20:02",
                    },
                ],
                "defense": [],
                "goalies": [
                    {
                        "playerId": 8478048,
                        "sweaterNumber": 31,
                        "name": {"default": "I. Shesterkin"},
                        "position": "G",
                        "shotsAgainst": 31,
                        "goalsAgainst": 3,
                        "saves": 28,
                        "toi": "58:30",
                        "decision": "L",
                    },
                ],
            },
        },
    }


@pytest.fixture
def sample_play_by_play() -> dict[str, Any]:
    """Play-by-play with one goal, one missed shot and a faceoff."""
    return {
        "id": 2024020500,
        "plays": [
            {
                "eventId": 101,
                "typeDescKey": "faceoff",
                "periodDescriptor": {"number": 1},
                "timeInPeriod": "00:00",
                "details": {"xCoord": 0, "yCoord": 0},
            },
            {
                "eventId": 102,
                "typeDescKey": "goal",
                "periodDescriptor": {"number": 1},
                "timeInPeriod": "05:30",
                "timeRemaining": "14:30",
                "details": {
                    "xCoord": 80,
                    "yCoord": 5,
                    "shotType": "wrist",
                    "scoringPlayerId": 8471214,
                    "goalieInNetId": 8478048,
                    "eventOwnerTeamId": 15,
                },
            },
            {
                "eventId": 103,
                "typeDescKey": "missed-shot",
                "periodDescriptor": {"number": 2},
                "timeInPeriod": "10:00",
                "details": {
                    "xCoord": -50,
                    "yCoord": -30,
                    "shotType": "slap",
                    "shootingPlayerId": 8478550,
                    "goalieInNetId": 8478402,
                    "eventOwnerTeamId": 3,
                },
            },
        ],
    }
