"""Integration tests for the full backfill.

These tests run every stage against a real SQLite file. The upstream is a
mocked client, either returning nothing (fallback path) or serving a small
consistent set of payloads for one game (live path).
"""
from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from hockey_stats.data.api import NHLApiClient
from hockey_stats.data.models import (
    Game,
    GoalieGameStat,
    Player,
    PlayerSeasonStat,
    Shot,
    Team,
    TeamGameStat,
    TeamSeasonStat,
)
from hockey_stats.data.pipelines import SEASON_STAGES, BackfillPipeline, PipelineStatus
from hockey_stats.data.ratelimit import NullRateLimiter
from hockey_stats.output.dashboard import DashboardFacade, StoreDataProvider

pytestmark = pytest.mark.integration

SEASON = "20242025"


def _pipeline(session_factory, client, settings) -> BackfillPipeline:
    return BackfillPipeline(
        session_factory,
        client,
        settings=settings,
        rate_limiters={stage: NullRateLimiter() for stage in SEASON_STAGES},
    )


@pytest.fixture
def live_client(sample_standings, sample_boxscore, sample_play_by_play) -> MagicMock:
    """Upstream serving one finished WSH v NYR game and its documents."""
    schedule_game: dict[str, Any] = {
        "id": 2024020500,
        "gameType": 2,
        "gameDate": "2024-12-20",
        "startTimeUTC": "2024-12-21T00:00:00Z",
        "homeTeam": {"id": 15, "score": 4},
        "awayTeam": {"id": 3, "score": 2},
        "periodDescriptor": {"number": 3},
        "gameState": "OFF",
        "venue": {"default": "Capital One Arena"},
    }
    client = MagicMock(spec=NHLApiClient)
    client.get_standings.return_value = sample_standings
    client.get_team_roster.return_value = []
    client.get_team_schedule.return_value = [schedule_game]
    client.get_skater_summary.return_value = [
        {
            "playerId": 8478550,
            "skaterFullName": "Artemi Panarin",
            "lastName": "Panarin",
            "positionCode": "L",
            "shootsCatches": "R",
            "teamAbbrevs": "NYR",
        }
    ]
    client.get_goalie_summary.return_value = []
    client.get_boxscore.return_value = sample_boxscore
    client.get_play_by_play.return_value = sample_play_by_play
    client.get_moneypuck_teams.return_value = [
        {
            "team": "WSH",
            "situation": "all",
            "corsiPercentage": "0.488",
            "fenwickPercentage": "0.49",
            "xGoalsFor": "201.5",
            "xGoalsAgainst": "215.0",
        }
    ]
    client.get_moneypuck_skaters.return_value = [
        {
            "playerId": "8471214",
            "situation": "all",
            "onIce_corsiPercentage": "0.5",
            "onIce_fenwickPercentage": "0.51",
            "I_F_xGoals": "25.3",
        }
    ]
    return client


class TestOfflineBackfill:
    """Backfill with an upstream that returns nothing."""

    def test_fallback_guarantee(self, session_factory, failing_client, test_settings) -> None:
        """Teams, roster, sample games and their team lines should still be stored."""
        season = "20232024"
        report = _pipeline(session_factory, failing_client, test_settings).run([season])

        assert report.status == PipelineStatus.COMPLETED
        assert report.row_counts["teams"] == 32
        assert report.row_counts["players"] == 10
        assert report.row_counts["games"] == 5
        with session_factory() as session:
            capitals = session.get(Team, 15)
            assert capitals.abbreviation == "WSH"
            games = session.scalars(select(Game)).all()
            assert {g.season for g in games} == {season}
            assert all(g.game_state == "Final" and g.period == 3 for g in games)

            game = session.get(Game, 2024020500)
            assert (game.home_team_id, game.away_team_id) == (15, 3)
            assert (game.home_score, game.away_score) == (4, 2)

            lines = session.scalars(
                select(TeamGameStat)
                .where(TeamGameStat.game_id == 2024020500)
                .order_by(TeamGameStat.team_id.desc())
            ).all()
            assert [(t.team_id, t.is_home, t.goals) for t in lines] == [(15, True, 4), (3, False, 2)]

    def test_rerun_identical_counts(self, session_factory, failing_client, test_settings) -> None:
        """A second offline run should leave every count unchanged."""
        pipeline = _pipeline(session_factory, failing_client, test_settings)

        first = pipeline.run([SEASON])
        second = pipeline.run([SEASON])

        assert second.row_counts == first.row_counts
        assert second.row_counts["team_game_stats"] == 2
        assert second.row_counts["team_season_stats"] == 2

    def test_dashboard_reads_backfilled_store(self, session_factory, failing_client, test_settings) -> None:
        """The store-backed façade should serve the backfilled rows."""
        _pipeline(session_factory, failing_client, test_settings).run([SEASON])

        package = DashboardFacade(StoreDataProvider(session_factory)).fetch_focus_team_package(SEASON)

        assert package["team"]["id"] == 15
        assert len(package["roster"]) == 10
        assert len(package["schedule"]) == 5
        assert package["season_stats"]["wins"] == 1


class TestLiveBackfill:
    """Backfill with an upstream serving a single consistent game."""

    def test_row_counts(self, session_factory, live_client, test_settings) -> None:
        """Every table should be filled from the live payloads."""
        report = _pipeline(session_factory, live_client, test_settings).run([SEASON])

        assert report.status == PipelineStatus.COMPLETED
        assert report.row_counts == {
            "teams": 2,
            "players": 12,
            "games": 1,
            "player_game_stats": 3,
            "player_season_stats": 3,
            "team_game_stats": 2,
            "team_season_stats": 2,
            "goalie_game_stats": 2,
            "shots": 2,
        }
        assert "teams" in report.completed
        assert f"games {SEASON}" in report.completed

    def test_standings_and_advanced_metrics(self, session_factory, live_client, test_settings) -> None:
        """Aggregates should reflect the game and carry MoneyPuck metrics."""
        _pipeline(session_factory, live_client, test_settings).run([SEASON])

        with session_factory() as session:
            capitals = session.scalars(
                select(TeamSeasonStat).where(TeamSeasonStat.team_id == 15)
            ).one()
            ovechkin = session.scalars(
                select(PlayerSeasonStat).where(PlayerSeasonStat.player_id == 8471214)
            ).one()

        assert (capitals.wins, capitals.points, capitals.goal_differential) == (1, 2, 2)
        assert capitals.expected_goals_for == 201.5
        assert (ovechkin.goals, ovechkin.points) == (2, 3)
        assert ovechkin.shooting_percentage == pytest.approx(33.33)
        assert ovechkin.expected_goals == 25.3

    def test_roster_biography_not_overwritten(self, session_factory, live_client, test_settings) -> None:
        """Box score player rows should not replace stored roster names."""
        _pipeline(session_factory, live_client, test_settings).run([SEASON])

        with session_factory() as session:
            ovechkin = session.get(Player, 8471214)
            panarin = session.get(Player, 8478550)

        assert ovechkin.first_name == "Alexander"
        assert (panarin.first_name, panarin.team_id) == ("Artemi", 3)

    def test_rerun_does_not_duplicate(self, session_factory, live_client, test_settings) -> None:
        """Re-running should not duplicate game lines or shots."""
        pipeline = _pipeline(session_factory, live_client, test_settings)

        first = pipeline.run([SEASON])
        second = pipeline.run([SEASON])

        assert second.row_counts == first.row_counts
        with session_factory() as session:
            assert len(session.scalars(select(Shot)).all()) == 2
            assert len(session.scalars(select(GoalieGameStat)).all()) == 2
