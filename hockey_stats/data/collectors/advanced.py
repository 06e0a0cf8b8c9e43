"""Advanced metrics collector for the MoneyPuck season summaries.

MoneyPuck publishes one row per team (or skater) per game situation; only
the all-situations rows are used.

Example:
    >>> collector = AdvancedMetricsCollector(client)
    >>> teams = collector.collect_teams("20232024")
    >>> teams[0].keys()
    dict_keys(['team_id', 'corsi_for_percentage', ...])
"""
from __future__ import annotations

from hockey_stats.data.collectors.base import BaseCollector
from hockey_stats.data.mappings import MONEYPUCK_SKATERS, MONEYPUCK_TEAMS, resolve_team_id
from hockey_stats.types import FetchError, Row, SeasonId

ALL_SITUATIONS = "all"

TEAM_METRICS = (
    "corsi_for_percentage",
    "fenwick_for_percentage",
    "expected_goals_for",
    "expected_goals_against",
)
SKATER_METRICS = ("corsi_for_percentage", "fenwick_for_percentage", "expected_goals")


class AdvancedMetricsCollector(BaseCollector):
    """Collects team and skater possession metrics for a season."""

    stage = "advanced-metrics"

    def collect_teams(self, season: SeasonId) -> list[Row]:
        """Team metric rows keyed by ``team_id``.

        Returns:
            One row per resolvable team; empty when the file is unavailable.
        """
        records = self.api.get_moneypuck_teams(season)
        if not records:
            self._handle_error(FetchError("no MoneyPuck team rows"), f"teams.csv {season}")
            return []

        rows = []
        for record in records:
            row = self.mapper.map(MONEYPUCK_TEAMS, record)
            if row["situation"] != ALL_SITUATIONS:
                continue
            team_id = resolve_team_id(row["team"])
            if team_id is None:
                self._handle_error(ValueError(f"unknown team {row['team']!r}"), row["team"] or "?")
                continue
            rows.append({"team_id": team_id, **{m: row[m] for m in TEAM_METRICS}})
        return rows

    def collect_skaters(self, season: SeasonId) -> list[Row]:
        """Skater metric rows keyed by ``player_id``."""
        records = self.api.get_moneypuck_skaters(season)
        if not records:
            self._handle_error(FetchError("no MoneyPuck skater rows"), f"skaters.csv {season}")
            return []

        rows = []
        for record in records:
            row = self.mapper.map(MONEYPUCK_SKATERS, record)
            if row["situation"] != ALL_SITUATIONS or row["player_id"] is None:
                continue
            rows.append({"player_id": row["player_id"], **{m: row[m] for m in SKATER_METRICS}})
        return rows
