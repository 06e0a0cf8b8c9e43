"""Games collector built on the per-club season schedules.

Every known club's schedule is read and the union is deduplicated by game
id, so each game appears once no matter how many schedules list it.

Example:
    >>> collector = GamesCollector(client)
    >>> games = collector.collect_season("20232024", {"WSH": 15, "NYR": 3}, [2])
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping

from hockey_stats.data.api import REGULAR_SEASON
from hockey_stats.data.collectors.base import BaseCollector
from hockey_stats.data.mappings import NHL_CLUB_SCHEDULE, game_type_code, map_game_state
from hockey_stats.types import FetchError, Row, SeasonId, TeamId


class GamesCollector(BaseCollector):
    """Collects game rows for a season."""

    stage = "games"

    def collect_season(
        self,
        season: SeasonId,
        teams: Mapping[str, TeamId],
        game_types: Iterable[int] = (REGULAR_SEASON,),
    ) -> list[Row]:
        """Fetch every club schedule and map the games.

        Args:
            season: Eight digit season id.
            teams: Abbreviation to id of every team in the store. Games
                against a team outside this mapping are skipped, since
                their rows could not satisfy the team foreign keys.
            game_types: Game type ids to keep.

        Returns:
            Game rows in schedule order, one per game id.
        """
        wanted = {game_type_code(t) for t in game_types}
        known_ids = set(teams.values())
        rows: dict[int, Row] = {}

        for i, abbrev in enumerate(sorted(teams), 1):
            self._log_progress(i, len(teams), abbrev)
            records = self.api.get_team_schedule(abbrev, season)
            if not records:
                self._handle_error(FetchError("empty schedule"), f"schedule {abbrev}")
                continue
            for record in records:
                row = self._map_game(record, season)
                if row is None or row["id"] in rows or row["game_type"] not in wanted:
                    continue
                if row["home_team_id"] not in known_ids or row["away_team_id"] not in known_ids:
                    self._handle_error(
                        ValueError(
                            f"unknown team in {row['home_team_id']} v {row['away_team_id']}"
                        ),
                        str(row["id"]),
                    )
                    continue
                rows[row["id"]] = row

        self.logger.info(f"Mapped {len(rows)} games for {season}")
        return list(rows.values())

    def _map_game(self, record: Row, season: SeasonId) -> Row | None:
        row = self.mapper.map(NHL_CLUB_SCHEDULE, record)
        if row["id"] is None or row["home_team_id"] is None or row["away_team_id"] is None:
            return None
        row["season"] = season
        row["game_type"] = game_type_code(row["game_type"])
        row["game_state"] = map_game_state(row["game_state"])
        return row
