"""Box score collector for skater, goalie and team game lines.

One ``gamecenter/{id}/boxscore`` document feeds three stages. Each stage
fetches it on its own schedule and pulls out its own rows through the
methods below.

Example:
    >>> collector = BoxScoreCollector(client)
    >>> boxscore = collector.fetch(2024020500)
    >>> players, stats = collector.skater_rows(boxscore, 2024020500)
    >>> teams = collector.team_rows(boxscore, 2024020500)
"""
from __future__ import annotations

from typing import Any

from hockey_stats.data.collectors.base import BaseCollector
from hockey_stats.data.mappings import (
    NHL_BOXSCORE_GOALIE,
    NHL_BOXSCORE_PLAYER,
    NHL_BOXSCORE_SKATER,
    NHL_BOXSCORE_TEAM,
    normalize_position,
    split_full_name,
)
from hockey_stats.types import GameId, Row

SIDES = ("homeTeam", "awayTeam")
SKATER_GROUPS = ("forwards", "defense")


class BoxScoreCollector(BaseCollector):
    """Maps box score documents into per-game stat rows.

    Skater and goalie methods also return minimal player rows so the
    pipeline can make sure every referenced player exists before writing
    stats for them.
    """

    stage = "boxscores"

    def fetch(self, game_id: GameId) -> dict[str, Any] | None:
        """Fetch a box score; None when unavailable."""
        self.logger.debug(f"Fetching box score for game {game_id}")
        return self.api.get_boxscore(game_id)

    def skater_rows(self, boxscore: dict[str, Any], game_id: GameId) -> tuple[list[Row], list[Row]]:
        """Skater stat lines for both sides.

        Returns:
            Tuple of (player rows, player_game_stats rows).
        """
        players: list[Row] = []
        stats: list[Row] = []
        for team_id, record in self._player_records(boxscore, SKATER_GROUPS):
            row = self.mapper.map(NHL_BOXSCORE_SKATER, record)
            if row["player_id"] is None:
                continue
            if "points" not in record:
                row["points"] = row["goals"] + row["assists"]
            stats.append({"game_id": game_id, "team_id": team_id, **row})
            players.append(self._player_row(record, team_id))
        return players, stats

    def goalie_rows(self, boxscore: dict[str, Any], game_id: GameId) -> tuple[list[Row], list[Row]]:
        """Goalie stat lines for both sides.

        Saves are derived from shots and goals against when the document
        omits them; save percentage is 0 when no shots were faced.

        Returns:
            Tuple of (player rows, goalie_game_stats rows).
        """
        players: list[Row] = []
        stats: list[Row] = []
        for team_id, record in self._player_records(boxscore, ("goalies",)):
            row = self.mapper.map(NHL_BOXSCORE_GOALIE, record)
            if row["player_id"] is None:
                continue
            shots_against = row["shots_against"]
            goals_against = row["goals_against"]
            saves = row["saves"] if row["saves"] is not None else shots_against - goals_against
            row["saves"] = max(saves, 0)
            row["save_percentage"] = row["saves"] / shots_against if shots_against > 0 else 0.0
            row["shutout"] = goals_against == 0 and shots_against > 0
            stats.append({"game_id": game_id, "team_id": team_id, **row})
            players.append(self._player_row(record, team_id, position="G"))
        return players, stats

    def team_rows(self, boxscore: dict[str, Any], game_id: GameId) -> list[Row]:
        """Home and away team lines.

        Goals and shots come from the team header; hits, blocks, penalty
        minutes and power-play goals are summed over the side's skaters.
        """
        rows: list[Row] = []
        for side in SIDES:
            header = boxscore.get(side)
            if not isinstance(header, dict):
                continue
            row = self.mapper.map(NHL_BOXSCORE_TEAM, header)
            if row["team_id"] is None:
                continue
            totals = {"hits": 0, "blocks": 0, "penalty_minutes": 0, "powerplay_goals": 0}
            for record in self._side_records(boxscore, side, SKATER_GROUPS):
                skater = self.mapper.map(NHL_BOXSCORE_SKATER, record)
                for column in totals:
                    totals[column] += skater[column]
            rows.append(
                {
                    "game_id": game_id,
                    "team_id": row["team_id"],
                    "is_home": side == "homeTeam",
                    "goals": row["goals"],
                    "shots": row["shots"],
                    **totals,
                }
            )
        return rows

    def _player_records(
        self, boxscore: dict[str, Any], groups: tuple[str, ...]
    ) -> list[tuple[int, Row]]:
        records = []
        for side in SIDES:
            header = boxscore.get(side) or {}
            team_id = header.get("id") if isinstance(header, dict) else None
            if not isinstance(team_id, int):
                continue
            for record in self._side_records(boxscore, side, groups):
                records.append((team_id, record))
        return records

    @staticmethod
    def _side_records(boxscore: dict[str, Any], side: str, groups: tuple[str, ...]) -> list[Row]:
        by_side = (boxscore.get("playerByGameStats") or {}).get(side) or {}
        records: list[Row] = []
        for group in groups:
            records.extend(r for r in by_side.get(group) or [] if isinstance(r, dict))
        return records

    def _player_row(self, record: Row, team_id: int, position: str | None = None) -> Row:
        mapped = self.mapper.map(NHL_BOXSCORE_PLAYER, record)
        first, last = split_full_name(mapped["name"], None)
        return {
            "id": mapped["id"],
            "team_id": team_id,
            "first_name": first,
            "last_name": last,
            "position": position or normalize_position(mapped["position"]),
            "jersey_number": mapped["jersey_number"],
        }
