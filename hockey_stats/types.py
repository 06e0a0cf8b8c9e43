"""Type definitions and protocols for the hockey stats package.

This module defines common types, protocols, and type aliases used throughout
the application. Using protocols enables duck typing with static type checking.

Example:
    >>> from hockey_stats.types import DashboardDataProvider
    >>> def render(provider: DashboardDataProvider) -> None:
    ...     team = provider.get_team("WSH")
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Protocol, TypedDict

# =============================================================================
# Type Aliases
# =============================================================================

PlayerId = int
TeamId = int
GameId = int
SeasonId = str  # 8 digits, e.g. "20232024"
Row = dict[str, Any]


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class DashboardDataProvider(Protocol):
    """Source of entity rows for the dashboard façade.

    Implemented by the database-backed provider and the in-memory mock;
    both return plain dicts keyed by the column names of the store.
    """

    def get_team(self, abbreviation: str) -> Row | None:
        """Look up a team by abbreviation."""
        ...

    def get_roster(self, team_id: TeamId) -> list[Row]:
        """Players whose last observed team is ``team_id``."""
        ...

    def get_team_season_stats(self, team_id: TeamId, season: SeasonId) -> Row | None:
        """Season aggregate row for a team."""
        ...

    def get_player_season_stats(
        self, team_id: TeamId, season: SeasonId
    ) -> list[Row]:
        """Season aggregate rows for a team's players."""
        ...

    def get_schedule(self, team_id: TeamId, season: SeasonId) -> list[Row]:
        """Games involving a team in a season, oldest first."""
        ...

    def get_game_detail(self, game_id: GameId) -> GameDetail | None:
        """Game row plus its per-game stats and shots."""
        ...


# =============================================================================
# TypedDicts for Structured Data
# =============================================================================


class SeasonPayload(TypedDict):
    """Aggregate summary handed to the season-complete callback."""

    season: SeasonId
    player_season_rows: int
    team_season_rows: int
    standings: list[Row]


class AdvancedMetrics(TypedDict):
    """Possession metrics for the focus team and its leading skaters."""

    team: Row | None
    players: list[Row]


class FocusTeamPackage(TypedDict):
    """Everything the dashboard needs for the focus team in one payload."""

    team: Row | None
    roster: list[Row]
    season_stats: Row | None
    advanced_metrics: AdvancedMetrics
    schedule: list[Row]
    last_updated: str


class GameDetail(TypedDict):
    """Single game with its per-game rows."""

    game: Row
    team_stats: list[Row]
    player_stats: list[Row]
    goalie_stats: list[Row]
    shots: list[Row]


# =============================================================================
# Dataclasses
# =============================================================================


@dataclass(frozen=True)
class StageError:
    """Structured error recorded by a backfill stage.

    Attributes:
        stage: Stage label, e.g. ``"player-game-stats"``.
        entity_key: Key of the item that failed (game id, season, table),
            or None when the whole stage failed.
        cause: Human-readable cause, usually ``"<ExceptionType>: <message>"``.
    """

    stage: str
    entity_key: str | None
    cause: str

    def to_dict(self) -> dict[str, str | None]:
        return asdict(self)

    def __str__(self) -> str:
        if self.entity_key is None:
            return f"{self.stage}: {self.cause}"
        return f"{self.stage} [{self.entity_key}]: {self.cause}"


# =============================================================================
# Exceptions
# =============================================================================


class HockeyStatsError(Exception):
    """Base exception for hockey stats errors."""


class FetchError(HockeyStatsError):
    """Upstream request failed (network, status code or body)."""


class PersistenceError(HockeyStatsError):
    """A write to the store failed.

    Attributes:
        table: Target table name.
        key: Natural key values of the failing row, if known.
    """

    def __init__(self, table: str, key: Any, cause: Exception) -> None:
        self.table = table
        self.key = key
        self.cause = cause
        super().__init__(f"{table} {key}: {type(cause).__name__}: {cause}")


class BackfillError(HockeyStatsError):
    """Error raised by the backfill pipeline itself."""


class BackfillAlreadyRunningError(BackfillError):
    """A second backfill was started while one is active."""


class FatalStageError(BackfillError):
    """A foundational stage failed and the run was aborted.

    Attributes:
        stage: Label of the failing stage.
        report: Final report generated before aborting.
    """

    def __init__(self, stage: str, message: str, report: Any = None) -> None:
        self.stage = stage
        self.report = report
        super().__init__(f"{stage}: {message}")


class InvalidSeasonError(BackfillError, ValueError):
    """Season list is empty or contains a malformed season id."""
