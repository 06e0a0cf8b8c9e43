"""Read-side output for the hockey stats store.

Submodules:
    dashboard: Dashboard data façade with database and mock providers

Example:
    >>> from hockey_stats.output import DashboardFacade, MockDataProvider
    >>> facade = DashboardFacade(MockDataProvider())
    >>> package = facade.fetch_focus_team_package("20242025")
"""

from __future__ import annotations

from hockey_stats.output.dashboard import (
    DashboardError,
    DashboardFacade,
    MockDataProvider,
    StoreDataProvider,
    UnknownTeamError,
    project_playoff_odds,
    team_record_from_games,
)

__all__: list[str] = [
    "DashboardError",
    "DashboardFacade",
    "MockDataProvider",
    "StoreDataProvider",
    "UnknownTeamError",
    "project_playoff_odds",
    "team_record_from_games",
]
