"""Hockey stats backfill.

A Python CLI application that fills a relational store with NHL teams,
players, games, per-game statistics, shot events and season aggregates,
stage by stage and resumably, and serves dashboard payloads from it.

Example:
    >>> from hockey_stats.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.db_path)
"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Hockey Stats Team"

# Public API exports
from hockey_stats.config import Settings, get_settings

__all__ = [
    "Settings",
    "__author__",
    "__version__",
    "get_settings",
]
