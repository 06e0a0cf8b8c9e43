"""Data collectors for the hockey stats backfill.

This module contains individual collectors for different data types:
- TeamsCollector: Clubs from the league standings
- PlayersCollector: Focus-team roster and league player summaries
- GamesCollector: Club season schedules
- BoxScoreCollector: Skater, goalie and team game lines
- ShotsCollector: Shot attempts from play-by-play
- AdvancedMetricsCollector: MoneyPuck possession metrics

Collectors only fetch and map; the pipeline persists their rows.

Example:
    >>> from hockey_stats.data.collectors import TeamsCollector
    >>> from hockey_stats.data.api import NHLApiClient
    >>> rows = TeamsCollector(NHLApiClient()).collect()
"""
from __future__ import annotations

from hockey_stats.data.collectors.advanced import AdvancedMetricsCollector
from hockey_stats.data.collectors.base import BaseCollector
from hockey_stats.data.collectors.boxscores import BoxScoreCollector
from hockey_stats.data.collectors.games import GamesCollector
from hockey_stats.data.collectors.players import PlayersCollector
from hockey_stats.data.collectors.shots import (
    SHOT_EVENT_TYPES,
    ShotsCollector,
    danger_tier,
    shot_geometry,
)
from hockey_stats.data.collectors.teams import TeamsCollector

__all__ = [
    "AdvancedMetricsCollector",
    "BaseCollector",
    "BoxScoreCollector",
    "GamesCollector",
    "PlayersCollector",
    "SHOT_EVENT_TYPES",
    "ShotsCollector",
    "TeamsCollector",
    "danger_tier",
    "shot_geometry",
]
