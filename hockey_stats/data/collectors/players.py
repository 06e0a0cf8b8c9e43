"""Players collector for rosters and league-wide season summaries.

The focus team's roster carries full biographical detail; the stats-API
summaries fill in every other player who appeared in the season with just
name, position, hand and last observed team.

Example:
    >>> collector = PlayersCollector(client)
    >>> roster = collector.collect_roster("WSH", "20232024", team_id=15)
    >>> league = collector.collect_league("20232024", [2], known_team_ids={15, 3})
"""
from __future__ import annotations

from collections.abc import Collection, Iterable

from hockey_stats.data.api import REGULAR_SEASON
from hockey_stats.data.collectors.base import BaseCollector
from hockey_stats.data.mappings import (
    NHL_GOALIE_SUMMARY,
    NHL_ROSTER,
    NHL_SKATER_SUMMARY,
    SourceMapping,
    last_team_abbrev,
    normalize_position,
    resolve_team_id,
    split_full_name,
)
from hockey_stats.types import FetchError, Row, SeasonId, TeamId


class PlayersCollector(BaseCollector):
    """Collects player rows."""

    stage = "players"

    def collect_roster(
        self,
        abbrev: str,
        season: SeasonId,
        team_id: TeamId | None,
    ) -> list[Row]:
        """Fetch a team's roster.

        Args:
            abbrev: Team abbreviation used in the roster URL.
            season: Eight digit season id.
            team_id: League id stamped on every row.

        Returns:
            Player rows; empty when the roster is unavailable.
        """
        records = self.api.get_team_roster(abbrev, season)
        if not records:
            self._handle_error(FetchError(f"no roster for {abbrev}"), f"roster {abbrev}")
            return []

        rows: list[Row] = []
        for record in records:
            row = self.mapper.map(NHL_ROSTER, record)
            if row["id"] is None:
                continue
            row["position"] = normalize_position(row["position"])
            row["team_id"] = team_id
            rows.append(row)

        self.logger.info(f"Mapped {len(rows)} roster players for {abbrev} {season}")
        return rows

    def collect_league(
        self,
        season: SeasonId,
        game_types: Iterable[int] = (REGULAR_SEASON,),
        known_team_ids: Collection[TeamId] | None = None,
    ) -> list[Row]:
        """Fetch skater and goalie summaries for a season.

        Args:
            season: Eight digit season id.
            game_types: Game type ids to include (2 regular, 3 playoffs).
            known_team_ids: Team ids present in the store; other teams are
                recorded as None.

        Returns:
            Player rows, one per player id.
        """
        rows: dict[int, Row] = {}
        for game_type in game_types:
            skaters = self.api.get_skater_summary(season, game_type)
            goalies = self.api.get_goalie_summary(season, game_type)
            if not skaters and not goalies:
                self._handle_error(
                    FetchError("no skater or goalie summaries"),
                    f"summary {season}/{game_type:02d}",
                )
            for row in self._map_summary(NHL_SKATER_SUMMARY, skaters, known_team_ids):
                rows[row["id"]] = row
            for row in self._map_summary(NHL_GOALIE_SUMMARY, goalies, known_team_ids):
                row["position"] = "G"
                rows[row["id"]] = row

        self.logger.info(f"Mapped {len(rows)} league players for {season}")
        return list(rows.values())

    def _map_summary(
        self,
        mapping: SourceMapping,
        records: list[Row],
        known_team_ids: Collection[TeamId] | None,
    ) -> list[Row]:
        rows = []
        for record in records:
            mapped = self.mapper.map(mapping, record)
            if mapped["id"] is None:
                continue
            first, last = split_full_name(mapped["full_name"], mapped["last_name"])
            team_id = resolve_team_id(last_team_abbrev(mapped["team_abbrevs"]))
            if known_team_ids is not None and team_id not in known_team_ids:
                team_id = None
            rows.append(
                {
                    "id": mapped["id"],
                    "team_id": team_id,
                    "first_name": first,
                    "last_name": last,
                    "position": normalize_position(mapped.get("position")),
                    "shoots_catches": mapped["shoots_catches"],
                }
            )
        return rows
