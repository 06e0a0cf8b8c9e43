"""Tests for the hardcoded fallback snapshot."""
from __future__ import annotations

from hockey_stats.data.fallback import FallbackDataProvider
from hockey_stats.data.mappings import TEAM_ABBREV_TO_ID


class TestFallbackDataProvider:
    """Tests for FallbackDataProvider."""

    def test_thirty_two_teams(self) -> None:
        """Should cover every current club with consistent ids."""
        teams = FallbackDataProvider().teams()

        assert len(teams) == 32
        for team in teams:
            assert TEAM_ABBREV_TO_ID[team["abbreviation"]] == team["id"]

    def test_capitals_roster(self) -> None:
        """The roster should be ten Capitals players."""
        roster = FallbackDataProvider().roster()

        assert len(roster) == 10
        assert {p["team_id"] for p in roster} == {15}
        assert roster[0]["last_name"] == "Ovechkin"

    def test_sample_games_stamped_with_season(self) -> None:
        """Every sample game should carry the requested season and be final."""
        games = FallbackDataProvider().sample_games("20232024")

        assert len(games) == 5
        assert {g["season"] for g in games} == {"20232024"}
        assert {g["game_state"] for g in games} == {"Final"}
        assert all(15 in (g["home_team_id"], g["away_team_id"]) for g in games)

    def test_team_game_stats_reference_sample_game(self) -> None:
        """The team box scores should belong to the first sample game."""
        provider = FallbackDataProvider()
        stats = provider.sample_team_game_stats()
        game = provider.sample_games("20242025")[0]

        assert len(stats) == 2
        assert {s["game_id"] for s in stats} == {game["id"]}
        home = next(s for s in stats if s["is_home"])
        assert (home["team_id"], home["goals"]) == (game["home_team_id"], game["home_score"])

    def test_rows_are_fresh_copies(self) -> None:
        """Mutating a returned row should not leak into the next call."""
        provider = FallbackDataProvider()
        provider.teams()[0]["name"] = "Changed"

        assert provider.teams()[0]["name"] != "Changed"
