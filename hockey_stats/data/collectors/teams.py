"""Teams collector built on the league standings feed.

Example:
    >>> collector = TeamsCollector(client)
    >>> rows = collector.collect()
    >>> rows[0]["abbreviation"]
    'WSH'
"""
from __future__ import annotations

from hockey_stats.data.collectors.base import BaseCollector
from hockey_stats.data.mappings import NHL_STANDINGS, resolve_team_id
from hockey_stats.types import FetchError, Row


class TeamsCollector(BaseCollector):
    """Collects one row per club from ``standings/now``.

    The team id is resolved from the abbreviation through the static table;
    clubs the table does not know are reported and skipped.
    """

    stage = "teams"

    def collect(self) -> list[Row]:
        """Fetch and map the standings.

        Returns:
            Team rows keyed by league id, or an empty list when the feed is
            unavailable.
        """
        records = self.api.get_standings()
        if not records:
            self._handle_error(FetchError("standings feed returned no teams"), "standings")
            return []

        rows: dict[int, Row] = {}
        for record in records:
            row = self.mapper.map(NHL_STANDINGS, record)
            team_id = resolve_team_id(row["abbreviation"])
            if team_id is None:
                self._handle_error(
                    ValueError(f"unknown team abbreviation {row['abbreviation']!r}"),
                    row["abbreviation"] or "?",
                )
                continue
            rows[team_id] = {"id": team_id, **row}

        self.logger.info(f"Mapped {len(rows)} teams from standings")
        return list(rows.values())
