"""Data layer for the hockey stats backfill.

This module provides data collection, storage, and aggregation functionality
including database engine/session management, SQLAlchemy ORM models,
the NHL/MoneyPuck API client, row mapping, collectors, and the staged
backfill pipeline.

Submodules:
    db: Database engine and session management
    schema: SQLAlchemy base class and mixins
    models: SQLAlchemy ORM model definitions (nine tables)
    api: Upstream JSON/CSV client with a fixed-interval gate and retries
    ratelimit: Swappable fixed-interval rate limiters
    mappings: Versioned per-source field mappings and the row mapper
    collectors: Individual data collectors
    upsert: Idempotent natural-key writes
    aggregation: Season aggregates from per-game rows
    fallback: Static snapshot used when live fetches come back empty
    pipelines: Backfill orchestration

Example:
    >>> from hockey_stats.data import BackfillPipeline, NHLApiClient
    >>> from hockey_stats.data import create_db_engine, create_session_factory, init_db
    >>> engine = create_db_engine("sqlite:///data/hockey.db")
    >>> init_db(engine)
    >>> pipeline = BackfillPipeline(create_session_factory(engine), NHLApiClient())
    >>> report = pipeline.run(["20232024"])
"""
from __future__ import annotations

from hockey_stats.data.aggregation import SeasonAggregator, shooting_percentage
from hockey_stats.data.api import PLAYOFFS, REGULAR_SEASON, NHLApiClient, parse_csv
from hockey_stats.data.collectors import (
    AdvancedMetricsCollector,
    BaseCollector,
    BoxScoreCollector,
    GamesCollector,
    PlayersCollector,
    ShotsCollector,
    TeamsCollector,
)
from hockey_stats.data.db import (
    create_db_engine,
    create_session_factory,
    get_engine,
    get_session,
    init_db,
    missing_tables,
    reset_engine,
    session_scope,
    verify_foreign_keys_enabled,
)
from hockey_stats.data.fallback import SNAPSHOT_VERSION, FallbackDataProvider
from hockey_stats.data.mappings import (
    ALL_MAPPINGS,
    TEAM_ABBREV_TO_ID,
    FieldSpec,
    RowMapper,
    SourceMapping,
)
from hockey_stats.data.models import (
    ALL_MODELS,
    Game,
    GoalieGameStat,
    Player,
    PlayerGameStat,
    PlayerSeasonStat,
    Shot,
    Team,
    TeamGameStat,
    TeamSeasonStat,
)
from hockey_stats.data.pipelines import (
    BackfillPipeline,
    BackfillReport,
    PipelineStatus,
    Progress,
    validate_seasons,
)
from hockey_stats.data.ratelimit import (
    FixedIntervalRateLimiter,
    NullRateLimiter,
    RateLimiter,
)
from hockey_stats.data.schema import Base, TimestampMixin
from hockey_stats.data.upsert import Upserter

__all__ = [
    # API client
    "NHLApiClient",
    "PLAYOFFS",
    "REGULAR_SEASON",
    "parse_csv",
    # Rate limiting
    "FixedIntervalRateLimiter",
    "NullRateLimiter",
    "RateLimiter",
    # Mapping
    "ALL_MAPPINGS",
    "FieldSpec",
    "RowMapper",
    "SourceMapping",
    "TEAM_ABBREV_TO_ID",
    # Collectors
    "AdvancedMetricsCollector",
    "BaseCollector",
    "BoxScoreCollector",
    "GamesCollector",
    "PlayersCollector",
    "ShotsCollector",
    "TeamsCollector",
    # Writes and aggregates
    "Upserter",
    "SeasonAggregator",
    "shooting_percentage",
    # Fallback
    "FallbackDataProvider",
    "SNAPSHOT_VERSION",
    # Pipelines
    "BackfillPipeline",
    "BackfillReport",
    "PipelineStatus",
    "Progress",
    "validate_seasons",
    # Database utilities
    "create_db_engine",
    "create_session_factory",
    "get_engine",
    "get_session",
    "init_db",
    "missing_tables",
    "reset_engine",
    "session_scope",
    "verify_foreign_keys_enabled",
    # Base and mixins
    "Base",
    "TimestampMixin",
    # Models
    "ALL_MODELS",
    "Team",
    "Player",
    "Game",
    "PlayerGameStat",
    "GoalieGameStat",
    "TeamGameStat",
    "PlayerSeasonStat",
    "TeamSeasonStat",
    "Shot",
]
