"""Season aggregates derived from persisted per-game rows.

Season tables are a materialized view: every call recomputes the totals
from ``player_game_stats``/``team_game_stats``, overwrites the stored
rows and drops the season rows no game supports any more, so running it
twice (or after games arrive or move) never double counts.
Nothing here touches the network.

Example:
    >>> aggregator = SeasonAggregator(session_factory, Upserter(session_factory))
    >>> payload = aggregator.aggregate_season("20232024")
    >>> payload["standings"][0]["points"]
    6
"""
from __future__ import annotations

import logging

from sqlalchemy import and_, case, func, select
from sqlalchemy.orm import Session, sessionmaker

from hockey_stats.data.models import (
    Game,
    PlayerGameStat,
    PlayerSeasonStat,
    TeamGameStat,
    TeamSeasonStat,
)
from hockey_stats.data.upsert import Upserter
from hockey_stats.types import Row, SeasonId, SeasonPayload

logger = logging.getLogger(__name__)

REGULATION_PERIODS = 3
FINAL_STATE = "Final"


def shooting_percentage(goals: int, shots: int) -> float:
    """Goals per shot as a percentage; 0.0 when there are no shots."""
    if shots <= 0:
        return 0.0
    return round(goals / shots * 100, 2)


class SeasonAggregator:
    """Recomputes player and team season rows for one season at a time.

    Attributes:
        session_factory: Factory for read sessions.
        upserter: Writer for the aggregate rows.
    """

    def __init__(self, session_factory: sessionmaker[Session], upserter: Upserter) -> None:
        self.session_factory = session_factory
        self.upserter = upserter

    def aggregate_players(self, season: SeasonId) -> int:
        """Rebuild ``player_season_stats`` for a season.

        Groups the season's skater game lines by (player, team), so a player
        traded mid-season gets one row per club.

        Returns:
            Number of season rows written.
        """
        pgs = PlayerGameStat
        stmt = (
            select(
                pgs.player_id,
                pgs.team_id,
                func.count(pgs.id).label("games_played"),
                func.sum(pgs.goals).label("goals"),
                func.sum(pgs.assists).label("assists"),
                func.sum(pgs.points).label("points"),
                func.sum(pgs.plus_minus).label("plus_minus"),
                func.sum(pgs.penalty_minutes).label("penalty_minutes"),
                func.sum(pgs.shots).label("shots"),
                func.sum(pgs.hits).label("hits"),
                func.sum(pgs.blocks).label("blocks"),
                func.sum(pgs.time_on_ice_seconds).label("time_on_ice_seconds"),
            )
            .join(Game, Game.id == pgs.game_id)
            .where(Game.season == season)
            .group_by(pgs.player_id, pgs.team_id)
        )
        with self.session_factory() as session:
            groups = session.execute(stmt).mappings().all()

        rows: list[Row] = []
        for group in groups:
            games_played = group["games_played"]
            if games_played <= 0:
                continue
            row = {column: int(value or 0) for column, value in group.items()}
            row["season"] = season
            row["time_on_ice_avg"] = round(row["time_on_ice_seconds"] / games_played, 1)
            row["shooting_percentage"] = shooting_percentage(row["goals"], row["shots"])
            rows.append(row)

        written = self.upserter.upsert_scope(PlayerSeasonStat, {"season": season}, rows)
        logger.info(f"Aggregated {written} player season rows for {season}")
        return written

    def aggregate_teams(self, season: SeasonId) -> int:
        """Rebuild ``team_season_stats`` for a season from finished games.

        A loss after regulation (period above 3) counts as an overtime loss.

        Returns:
            Number of season rows written.
        """
        tgs = TeamGameStat
        own = case((tgs.is_home, Game.home_score), else_=Game.away_score)
        opp = case((tgs.is_home, Game.away_score), else_=Game.home_score)
        overtime = Game.period > REGULATION_PERIODS
        stmt = (
            select(
                tgs.team_id,
                func.count(tgs.id).label("games_played"),
                func.sum(case((own > opp, 1), else_=0)).label("wins"),
                func.sum(case((and_(own < opp, ~overtime), 1), else_=0)).label("losses"),
                func.sum(case((and_(own < opp, overtime), 1), else_=0)).label(
                    "overtime_losses"
                ),
                func.sum(tgs.goals).label("goals_for"),
                func.sum(opp).label("goals_against"),
            )
            .join(Game, Game.id == tgs.game_id)
            .where(Game.season == season, Game.game_state == FINAL_STATE)
            .group_by(tgs.team_id)
        )
        with self.session_factory() as session:
            groups = session.execute(stmt).mappings().all()

        rows: list[Row] = []
        for group in groups:
            if group["games_played"] <= 0:
                continue
            row = {column: int(value or 0) for column, value in group.items()}
            row["season"] = season
            row["points"] = row["wins"] * 2 + row["overtime_losses"]
            row["goal_differential"] = row["goals_for"] - row["goals_against"]
            rows.append(row)

        written = self.upserter.upsert_scope(TeamSeasonStat, {"season": season}, rows)
        logger.info(f"Aggregated {written} team season rows for {season}")
        return written

    def aggregate_season(self, season: SeasonId) -> SeasonPayload:
        """Rebuild both aggregate tables (players first) for a season."""
        self.aggregate_players(season)
        self.aggregate_teams(season)
        return self.season_payload(season)

    def season_payload(self, season: SeasonId) -> SeasonPayload:
        """Read back a season's aggregates without recomputing them.

        Returns:
            Row counts plus the standings ordered by points.
        """
        with self.session_factory() as session:
            player_rows = session.scalar(
                select(func.count(PlayerSeasonStat.id)).where(
                    PlayerSeasonStat.season == season
                )
            )
            standings = session.scalars(
                select(TeamSeasonStat)
                .where(TeamSeasonStat.season == season)
                .order_by(TeamSeasonStat.points.desc(), TeamSeasonStat.goal_differential.desc())
            ).all()
            standing_rows = [row.to_dict() for row in standings]

        return SeasonPayload(
            season=season,
            player_season_rows=player_rows or 0,
            team_season_rows=len(standing_rows),
            standings=standing_rows,
        )
