"""Dashboard data façade over the backfilled store.

The façade assembles read-only payloads for a dashboard front end. It never
fetches upstream data itself; it reads entity rows through a
``DashboardDataProvider``, either the database or an in-memory mock built
from the fallback snapshot, so both paths return identical field names.

Payloads:
    fetch_focus_team_package(season)
        team, roster, season_stats, advanced_metrics, schedule, last_updated
    fetch_game_detail(game_id)
        game, team_stats, player_stats, goalie_stats, shots

Example:
    >>> from hockey_stats.output import DashboardFacade, StoreDataProvider
    >>> facade = DashboardFacade(StoreDataProvider(session_factory))
    >>> package = facade.fetch_focus_team_package("20242025")
    >>> package["season_stats"]["points"]
    6
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import or_, select

from hockey_stats.data.fallback import FallbackDataProvider
from hockey_stats.data.models import (
    Game,
    GoalieGameStat,
    Player,
    PlayerGameStat,
    PlayerSeasonStat,
    Shot,
    Team,
    TeamGameStat,
    TeamSeasonStat,
)
from hockey_stats.logging import get_logger
from hockey_stats.types import (
    AdvancedMetrics,
    DashboardDataProvider,
    FocusTeamPackage,
    GameDetail,
    GameId,
    HockeyStatsError,
    Row,
    SeasonId,
    TeamId,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session, sessionmaker

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_MAX_WORKERS: int = 4
GAMES_IN_SEASON: int = 82
PLAYOFF_LINE_POINTS: int = 85
PLAYOFF_POINTS_SPREAD: int = 15
TOP_SKATERS: int = 5

TEAM_ADVANCED_FIELDS: tuple[str, ...] = (
    "corsi_for_percentage",
    "fenwick_for_percentage",
    "expected_goals_for",
    "expected_goals_against",
)
PLAYER_ADVANCED_FIELDS: tuple[str, ...] = (
    "corsi_for_percentage",
    "fenwick_for_percentage",
    "expected_goals",
)


# =============================================================================
# Exceptions
# =============================================================================


class DashboardError(HockeyStatsError):
    """Base exception for dashboard payload errors."""


class UnknownTeamError(DashboardError):
    """Focus team abbreviation not present in the provider."""


# =============================================================================
# Helpers
# =============================================================================


def project_playoff_odds(
    season_stats: Row | None,
    games_in_season: int = GAMES_IN_SEASON,
) -> dict[str, float]:
    """Project a season points total and a crude playoff probability.

    The pace extrapolates points per game over a full season; probability
    ramps linearly from 0 at 85 projected points to 1 at 100.

    Args:
        season_stats: Team season row with ``games_played`` and ``points``.
        games_in_season: Regular season length.

    Returns:
        Dict with ``points_pace``, ``projected_points`` and
        ``playoff_probability``; zeros when no games were played.
    """
    games = (season_stats or {}).get("games_played") or 0
    if games <= 0:
        return {"points_pace": 0.0, "projected_points": 0.0, "playoff_probability": 0.0}

    pace = season_stats["points"] / games
    projected = pace * games_in_season
    probability = (projected - PLAYOFF_LINE_POINTS) / PLAYOFF_POINTS_SPREAD
    return {
        "points_pace": round(pace, 3),
        "projected_points": round(projected, 1),
        "playoff_probability": round(min(max(probability, 0.0), 1.0), 3),
    }


def team_record_from_games(team_id: TeamId, season: SeasonId, games: list[Row]) -> Row | None:
    """Build a team season row from finished game rows.

    Same rules as the stored aggregates: a loss after the third period is an
    overtime loss, points are two per win plus one per overtime loss.
    """
    record = {
        "team_id": team_id,
        "season": season,
        "games_played": 0,
        "wins": 0,
        "losses": 0,
        "overtime_losses": 0,
        "goals_for": 0,
        "goals_against": 0,
    }
    for game in games:
        if game["game_state"] != "Final":
            continue
        if game["home_team_id"] == team_id:
            own, opp = game["home_score"], game["away_score"]
        elif game["away_team_id"] == team_id:
            own, opp = game["away_score"], game["home_score"]
        else:
            continue
        record["games_played"] += 1
        record["goals_for"] += own
        record["goals_against"] += opp
        if own > opp:
            record["wins"] += 1
        elif game["period"] > 3:
            record["overtime_losses"] += 1
        else:
            record["losses"] += 1

    if not record["games_played"]:
        return None
    record["points"] = record["wins"] * 2 + record["overtime_losses"]
    record["goal_differential"] = record["goals_for"] - record["goals_against"]
    return record


# =============================================================================
# Providers
# =============================================================================


class StoreDataProvider:
    """Reads dashboard rows from the backfilled database.

    Every method opens its own short session, so the façade may call them
    from worker threads concurrently.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def _rows(self, stmt: Any) -> list[Row]:
        with self.session_factory() as session:
            return [row.to_dict() for row in session.scalars(stmt).all()]

    def _row(self, stmt: Any) -> Row | None:
        rows = self._rows(stmt)
        return rows[0] if rows else None

    def get_team(self, abbreviation: str) -> Row | None:
        return self._row(select(Team).where(Team.abbreviation == abbreviation.upper()))

    def get_roster(self, team_id: TeamId) -> list[Row]:
        return self._rows(
            select(Player)
            .where(Player.team_id == team_id)
            .order_by(Player.position, Player.last_name)
        )

    def get_team_season_stats(self, team_id: TeamId, season: SeasonId) -> Row | None:
        return self._row(
            select(TeamSeasonStat).where(
                TeamSeasonStat.team_id == team_id, TeamSeasonStat.season == season
            )
        )

    def get_player_season_stats(self, team_id: TeamId, season: SeasonId) -> list[Row]:
        return self._rows(
            select(PlayerSeasonStat)
            .where(PlayerSeasonStat.team_id == team_id, PlayerSeasonStat.season == season)
            .order_by(PlayerSeasonStat.points.desc(), PlayerSeasonStat.goals.desc())
        )

    def get_schedule(self, team_id: TeamId, season: SeasonId) -> list[Row]:
        return self._rows(
            select(Game)
            .where(
                Game.season == season,
                or_(Game.home_team_id == team_id, Game.away_team_id == team_id),
            )
            .order_by(Game.game_date, Game.id)
        )

    def get_game_detail(self, game_id: GameId) -> GameDetail | None:
        with self.session_factory() as session:
            game = session.get(Game, game_id)
            if game is None:
                return None

            def rows_for(model: Any) -> list[Row]:
                stmt = select(model).where(model.game_id == game_id).order_by(model.id)
                return [row.to_dict() for row in session.scalars(stmt).all()]

            return GameDetail(
                game=game.to_dict(),
                team_stats=rows_for(TeamGameStat),
                player_stats=rows_for(PlayerGameStat),
                goalie_stats=rows_for(GoalieGameStat),
                shots=rows_for(Shot),
            )


class MockDataProvider:
    """Serves the fallback snapshot with the store's field names.

    Team season stats are derived from the sample games so the mock and the
    database agree on how a record is computed. Player season stats, goalie
    lines and shots are not part of the snapshot and come back empty.
    """

    def __init__(self, fallback: FallbackDataProvider | None = None) -> None:
        self.fallback = fallback or FallbackDataProvider()
        self._teams = {row["abbreviation"]: row for row in self.fallback.teams()}

    def get_team(self, abbreviation: str) -> Row | None:
        team = self._teams.get(abbreviation.upper())
        return dict(team) if team else None

    def get_roster(self, team_id: TeamId) -> list[Row]:
        return [row for row in self.fallback.roster() if row["team_id"] == team_id]

    def get_team_season_stats(self, team_id: TeamId, season: SeasonId) -> Row | None:
        return team_record_from_games(team_id, season, self.fallback.sample_games(season))

    def get_player_season_stats(self, team_id: TeamId, season: SeasonId) -> list[Row]:
        return []

    def get_schedule(self, team_id: TeamId, season: SeasonId) -> list[Row]:
        games = [
            game
            for game in self.fallback.sample_games(season)
            if team_id in (game["home_team_id"], game["away_team_id"])
        ]
        return sorted(games, key=lambda game: (game["game_date"], game["id"]))

    def get_game_detail(self, game_id: GameId) -> GameDetail | None:
        # Sample game ids do not depend on the season label
        games = {game["id"]: game for game in self.fallback.sample_games(None)}
        game = games.get(game_id)
        if game is None:
            return None
        return GameDetail(
            game=game,
            team_stats=[
                row for row in self.fallback.sample_team_game_stats() if row["game_id"] == game_id
            ],
            player_stats=[],
            goalie_stats=[],
            shots=[],
        )


# =============================================================================
# Façade
# =============================================================================


class DashboardFacade:
    """Assembles dashboard payloads from a data provider.

    Attributes:
        provider: Row source (database or mock).
        focus_team_abbrev: Team the package is built for.
        max_workers: Width of the read fan-out.

    Example:
        >>> facade = DashboardFacade(MockDataProvider())
        >>> facade.fetch_focus_team_package("20242025")["season_stats"]["wins"]
        3
    """

    def __init__(
        self,
        provider: DashboardDataProvider,
        focus_team_abbrev: str = "WSH",
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.provider = provider
        self.focus_team_abbrev = focus_team_abbrev.upper()
        self.max_workers = max_workers

    def fetch_focus_team_package(self, season: SeasonId) -> FocusTeamPackage:
        """Fetch everything the dashboard shows for the focus team.

        Roster, team season stats, player season stats and the schedule are
        independent reads and run concurrently.

        Args:
            season: Season id, e.g. "20242025".

        Returns:
            FocusTeamPackage payload.

        Raises:
            UnknownTeamError: If the focus team is not in the provider.
        """
        team = self.provider.get_team(self.focus_team_abbrev)
        if team is None:
            raise UnknownTeamError(f"Team {self.focus_team_abbrev} not found")
        team_id = team["id"]

        logger.debug(f"Fetching package for {self.focus_team_abbrev} {season}")
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            roster = pool.submit(self.provider.get_roster, team_id)
            season_stats = pool.submit(self.provider.get_team_season_stats, team_id, season)
            player_stats = pool.submit(self.provider.get_player_season_stats, team_id, season)
            schedule = pool.submit(self.provider.get_schedule, team_id, season)

        stats = season_stats.result()
        if stats is not None:
            stats = {**stats, **project_playoff_odds(stats)}

        return FocusTeamPackage(
            team=team,
            roster=roster.result(),
            season_stats=stats,
            advanced_metrics=self._advanced_metrics(stats, player_stats.result()),
            schedule=schedule.result(),
            last_updated=datetime.now().isoformat(timespec="seconds"),
        )

    def fetch_game_detail(self, game_id: GameId) -> GameDetail | None:
        """Fetch a single game with its per-game rows, or None if unknown."""
        detail = self.provider.get_game_detail(game_id)
        if detail is None:
            logger.warning(f"Game {game_id} not found")
        return detail

    def _advanced_metrics(self, team_stats: Row | None, player_stats: list[Row]) -> AdvancedMetrics:
        team = None
        if team_stats is not None:
            team = {field: team_stats.get(field) for field in TEAM_ADVANCED_FIELDS}

        players = [
            {
                "player_id": row["player_id"],
                "points": row["points"],
                **{field: row.get(field) for field in PLAYER_ADVANCED_FIELDS},
            }
            for row in player_stats[:TOP_SKATERS]
        ]
        return AdvancedMetrics(team=team, players=players)
