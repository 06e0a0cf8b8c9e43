"""Backfill pipeline orchestration.

This module provides the BackfillPipeline class, which fills the store
stage by stage: teams once, then for every season players, games, skater,
goalie and team game lines, focus-team shot events, season aggregates and
advanced metrics.

A stage that raises is recorded and the run moves on; partial completion is
expected and a re-run fills the gaps, since every write is an upsert. Only
the teams stage is fatal, because every later row references a team.

Example:
    >>> from hockey_stats.data import NHLApiClient, create_db_engine, create_session_factory
    >>> engine = create_db_engine("sqlite:///data/hockey.db")
    >>> pipeline = BackfillPipeline(create_session_factory(engine), NHLApiClient())
    >>> report = pipeline.run(["20232024"], include_playoffs=False)
    >>> report.row_counts["teams"]
    32
"""
from __future__ import annotations

import logging
import re
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, or_, select

from hockey_stats.config import Settings, get_settings
from hockey_stats.data.aggregation import SeasonAggregator
from hockey_stats.data.api import PLAYOFFS, REGULAR_SEASON
from hockey_stats.data.collectors import (
    AdvancedMetricsCollector,
    BoxScoreCollector,
    GamesCollector,
    PlayersCollector,
    ShotsCollector,
    TeamsCollector,
)
from hockey_stats.data.fallback import FallbackDataProvider
from hockey_stats.data.mappings import RowMapper
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
from hockey_stats.data.ratelimit import FixedIntervalRateLimiter, RateLimiter
from hockey_stats.data.upsert import Upserter
from hockey_stats.logging import WARN, stage_tag
from hockey_stats.types import (
    BackfillAlreadyRunningError,
    FatalStageError,
    InvalidSeasonError,
    PersistenceError,
    Row,
    SeasonId,
    SeasonPayload,
    StageError,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session, sessionmaker

    from hockey_stats.data.api import NHLApiClient

logger = logging.getLogger(__name__)

TEAMS = "teams"
PLAYERS = "players"
GAMES = "games"
PLAYER_GAME_STATS = "player-game-stats"
GOALIE_GAME_STATS = "goalie-game-stats"
TEAM_GAME_STATS = "team-game-stats"
SHOT_EVENTS = "shot-events"
SEASON_AGGREGATES = "season-aggregates"
ADVANCED_METRICS = "advanced-metrics"

SEASON_STAGES: tuple[str, ...] = (
    PLAYERS,
    GAMES,
    PLAYER_GAME_STATS,
    GOALIE_GAME_STATS,
    TEAM_GAME_STATS,
    SHOT_EVENTS,
    SEASON_AGGREGATES,
    ADVANCED_METRICS,
)

STAGE_TITLES: dict[str, str] = {
    TEAMS: "Populating teams",
    PLAYERS: "Populating players",
    GAMES: "Populating games",
    PLAYER_GAME_STATS: "Populating player game stats",
    GOALIE_GAME_STATS: "Populating goalie game stats",
    TEAM_GAME_STATS: "Populating team game stats",
    SHOT_EVENTS: "Populating shot events",
    SEASON_AGGREGATES: "Calculating season aggregates",
    ADVANCED_METRICS: "Importing advanced metrics",
}

STOPPED_STEP = "Stopped by user"

_SEASON_PATTERN = re.compile(r"^\d{8}$")


class PipelineStatus(Enum):
    """Status of a backfill run."""

    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass
class Progress:
    """Transient progress of the current run.

    Attributes:
        current_step: Label of the stage being run.
        progress: Stages finished so far (successful or not).
        total_steps: Stages the run will execute.
        completed: Labels of stages that finished without raising.
        errors: Structured errors recorded so far.
        start_time: Wall-clock start of the run.
        estimated_time_remaining: Seconds, extrapolated from the average
            stage duration; None before the first stage finishes.
    """

    current_step: str = "Ready"
    progress: int = 0
    total_steps: int = 0
    completed: list[str] = field(default_factory=list)
    errors: list[StageError] = field(default_factory=list)
    start_time: datetime | None = None
    estimated_time_remaining: float | None = None

    @property
    def percent(self) -> float:
        return self.progress / self.total_steps * 100 if self.total_steps else 0.0

    def snapshot(self) -> Progress:
        """Copy safe to hand to callbacks."""
        return replace(self, completed=list(self.completed), errors=list(self.errors))


@dataclass
class StageOutcome:
    """What a stage function reports back to the orchestrator."""

    rows: int = 0
    fallback: bool = False
    errors: list[StageError] = field(default_factory=list)


@dataclass
class BackfillReport:
    """Final report of a backfill run.

    Attributes:
        status: Terminal status.
        seasons: Seasons requested.
        include_playoffs: Whether playoff games were requested.
        row_counts: Final row count per table, in schema order.
        completed: Labels of stages that finished.
        errors: Every error recorded during the run.
        mapping_gaps: Upstream fields that were absent or unusable.
        started_at: Wall-clock start.
        duration_seconds: Total run time.
    """

    status: PipelineStatus
    seasons: list[SeasonId] = field(default_factory=list)
    include_playoffs: bool = False
    row_counts: dict[str, int] = field(default_factory=dict)
    completed: list[str] = field(default_factory=list)
    errors: list[StageError] = field(default_factory=list)
    mapping_gaps: dict[str, int] = field(default_factory=dict)
    started_at: datetime | None = None
    duration_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation."""
        return {
            "status": self.status.value,
            "seasons": list(self.seasons),
            "include_playoffs": self.include_playoffs,
            "row_counts": dict(self.row_counts),
            "completed": list(self.completed),
            "errors": [e.to_dict() for e in self.errors],
            "mapping_gaps": dict(self.mapping_gaps),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "duration_seconds": round(self.duration_seconds, 3),
        }


ProgressCallback = Callable[[Progress], None]
SeasonCallback = Callable[[SeasonId, SeasonPayload], None]


def validate_seasons(seasons: Sequence[str]) -> list[SeasonId]:
    """Check season ids before a run starts.

    Raises:
        InvalidSeasonError: If the list is empty or an id is not eight
            digits spanning consecutive years ("20232024").
    """
    if isinstance(seasons, str) or not seasons:
        raise InvalidSeasonError("At least one season is required")
    checked = []
    for season in seasons:
        if not isinstance(season, str) or not _SEASON_PATTERN.match(season):
            raise InvalidSeasonError(f"Malformed season {season!r}, expected e.g. '20232024'")
        if int(season[4:]) != int(season[:4]) + 1:
            raise InvalidSeasonError(f"Season {season!r} does not span consecutive years")
        if season not in checked:
            checked.append(season)
    return checked


class BackfillPipeline:
    """Orchestrates the staged backfill.

    One instance runs one backfill at a time; a second ``run`` while one is
    active raises immediately. Stages run strictly in order on the calling
    thread.

    Attributes:
        status: Status of the current or last run.
        progress: Progress of the current or last run.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        api_client: NHLApiClient,
        settings: Settings | None = None,
        fallback: FallbackDataProvider | None = None,
        rate_limiters: dict[str, RateLimiter] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize pipeline.

        Args:
            session_factory: Factory for short-lived database sessions.
            api_client: Upstream client shared by all collectors.
            settings: Throttles, caps and focus team (default: settings).
            fallback: Snapshot used when live fetches come back empty.
            rate_limiters: Per-stage limiters for per-game loops, keyed by
                stage label; missing stages get a fixed-interval limiter
                from settings.
            clock: Monotonic clock used for duration and ETA.
        """
        self.session_factory = session_factory
        self.api = api_client
        self.settings = settings or get_settings()
        self.fallback = fallback or FallbackDataProvider()
        self.mapper = RowMapper()
        self.upserter = Upserter(session_factory)
        self.aggregator = SeasonAggregator(session_factory, self.upserter)
        self.clock = clock
        self.logger = logging.getLogger(self.__class__.__name__)

        self.teams_collector = TeamsCollector(api_client, self.mapper)
        self.players_collector = PlayersCollector(api_client, self.mapper)
        self.games_collector = GamesCollector(api_client, self.mapper)
        self.boxscore_collector = BoxScoreCollector(api_client, self.mapper)
        self.shots_collector = ShotsCollector(api_client, self.mapper)
        self.advanced_collector = AdvancedMetricsCollector(api_client, self.mapper)

        delays = {
            PLAYER_GAME_STATS: self.settings.player_stats_delay,
            GOALIE_GAME_STATS: self.settings.goalie_stats_delay,
            TEAM_GAME_STATS: self.settings.team_stats_delay,
            SHOT_EVENTS: self.settings.shot_events_delay,
        }
        self.rate_limiters: dict[str, RateLimiter] = {
            stage: FixedIntervalRateLimiter(delay) for stage, delay in delays.items()
        }
        self.rate_limiters.update(rate_limiters or {})

        self.status = PipelineStatus.READY
        self.progress = Progress()
        self._run_lock = threading.Lock()
        self._stop_requested = False
        self._started = 0.0

    # -------------------------------------------------------------------------
    # Control
    # -------------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def request_stop(self) -> None:
        """Stop after the stage in flight finishes."""
        if self.is_running:
            self.logger.info("Stop requested; finishing current stage")
            self._stop_requested = True

    def run(
        self,
        seasons: Sequence[str],
        include_playoffs: bool = False,
        on_progress: ProgressCallback | None = None,
        on_season_complete: SeasonCallback | None = None,
    ) -> BackfillReport:
        """Run the full backfill.

        Args:
            seasons: Eight digit season ids, processed in the given order.
            include_playoffs: Also collect playoff games and summaries.
            on_progress: Called with a Progress snapshot after every stage.
            on_season_complete: Called with the season's aggregate payload
                after the last stage of every season.

        Returns:
            Final report; status COMPLETED or STOPPED.

        Raises:
            InvalidSeasonError: If ``seasons`` is empty or malformed.
            BackfillAlreadyRunningError: If a run is already in progress.
            FatalStageError: If teams could not be populated even from the
                fallback snapshot; ``error.report`` holds the final report.
        """
        checked = validate_seasons(seasons)
        if not self._run_lock.acquire(blocking=False):
            raise BackfillAlreadyRunningError("Backfill already in progress")
        try:
            return self._run(checked, include_playoffs, on_progress, on_season_complete)
        finally:
            self._run_lock.release()

    def _run(
        self,
        seasons: list[SeasonId],
        include_playoffs: bool,
        on_progress: ProgressCallback | None,
        on_season_complete: SeasonCallback | None,
    ) -> BackfillReport:
        self._stop_requested = False
        self.mapper.reset()
        self.status = PipelineStatus.RUNNING
        self._started = self.clock()
        self.progress = Progress(
            current_step="Starting",
            total_steps=1 + len(SEASON_STAGES) * len(seasons),
            start_time=datetime.now(),
        )
        game_types = [REGULAR_SEASON, PLAYOFFS] if include_playoffs else [REGULAR_SEASON]
        self.logger.info(
            f"Starting backfill for {', '.join(seasons)} "
            f"({'with' if include_playoffs else 'without'} playoffs)"
        )

        try:
            self._run_stage(TEAMS, None, self._stage_teams, on_progress, fatal=True)
        except FatalStageError as e:
            self.status = PipelineStatus.FAILED
            e.report = self._build_report(seasons, include_playoffs)
            self.logger.error(f"Backfill aborted: {e}")
            raise

        for season in seasons:
            stages: dict[str, Callable[[], StageOutcome]] = {
                PLAYERS: lambda s=season: self._stage_players(s, game_types),
                GAMES: lambda s=season: self._stage_games(s, game_types),
                PLAYER_GAME_STATS: lambda s=season: self._stage_player_game_stats(s),
                GOALIE_GAME_STATS: lambda s=season: self._stage_goalie_game_stats(s),
                TEAM_GAME_STATS: lambda s=season: self._stage_team_game_stats(s),
                SHOT_EVENTS: lambda s=season: self._stage_shot_events(s),
                SEASON_AGGREGATES: lambda s=season: self._stage_season_aggregates(s),
                ADVANCED_METRICS: lambda s=season: self._stage_advanced_metrics(s),
            }
            for stage in SEASON_STAGES:
                if self._stop_requested:
                    break
                self._run_stage(stage, season, stages[stage], on_progress)
            if self._stop_requested:
                break
            if on_season_complete is not None:
                self._notify(
                    "season-callback",
                    season,
                    on_season_complete,
                    season,
                    self.aggregator.season_payload(season),
                )

        if self._stop_requested:
            self.status = PipelineStatus.STOPPED
            self.progress.current_step = STOPPED_STEP
            self.logger.warning(f"{WARN} Backfill stopped after {self.progress.progress} stages")
        else:
            self.status = PipelineStatus.COMPLETED
            self.progress.current_step = "Completed"

        report = self._build_report(seasons, include_playoffs)
        self.logger.info(
            f"Backfill {report.status.value} in {report.duration_seconds:.1f}s "
            f"with {len(report.errors)} errors"
        )
        return report

    # -------------------------------------------------------------------------
    # Stage plumbing
    # -------------------------------------------------------------------------

    def _run_stage(
        self,
        stage: str,
        season: SeasonId | None,
        fn: Callable[[], StageOutcome],
        on_progress: ProgressCallback | None,
        fatal: bool = False,
    ) -> None:
        label = stage if season is None else f"{stage} {season}"
        title = STAGE_TITLES[stage]
        self.progress.current_step = title if season is None else f"{title} ({season})"
        self.logger.info(f"Starting {label}")

        try:
            outcome = fn()
        except Exception as e:
            error = StageError(stage, season, f"{type(e).__name__}: {e}")
            self.progress.errors.append(error)
            self.logger.error(f"{stage_tag(False)} {label}: {error.cause}")
            self._advance(on_progress)
            if fatal:
                raise FatalStageError(stage, error.cause) from e
            return

        self.progress.errors.extend(outcome.errors)
        self.progress.completed.append(f"{label} (fallback)" if outcome.fallback else label)
        degraded = outcome.fallback or bool(outcome.errors)
        suffix = f", {len(outcome.errors)} item errors" if outcome.errors else ""
        suffix += ", fallback data" if outcome.fallback else ""
        self.logger.info(f"{stage_tag(True, degraded)} {label}: {outcome.rows} rows{suffix}")
        self._advance(on_progress)

    def _advance(self, on_progress: ProgressCallback | None) -> None:
        progress = self.progress
        progress.progress += 1
        elapsed = self.clock() - self._started
        remaining = progress.total_steps - progress.progress
        progress.estimated_time_remaining = elapsed / progress.progress * remaining
        if on_progress is not None:
            self._notify("progress-callback", None, on_progress, progress.snapshot())

    def _notify(
        self, name: str, key: str | None, callback: Callable[..., None], *args: Any
    ) -> None:
        try:
            callback(*args)
        except Exception as e:
            self.logger.warning(f"{name} raised {type(e).__name__}: {e}")
            self.progress.errors.append(StageError(name, key, f"{type(e).__name__}: {e}"))

    def _outcome(
        self,
        rows: int,
        *collectors: Any,
        fallback: bool = False,
        errors: list[StageError] | None = None,
    ) -> StageOutcome:
        collected = list(errors or [])
        for collector in collectors:
            collected.extend(collector.drain_errors())
        return StageOutcome(rows=rows, fallback=fallback, errors=collected)

    def _write_rows(self, model: type, rows: list[Row]) -> int:
        for row in rows:
            self.upserter.upsert(model, row)
        return len(rows)

    def _known_teams(self) -> dict[str, int]:
        with self.session_factory() as session:
            return dict(session.execute(select(Team.abbreviation, Team.id)).all())

    def _final_games(
        self,
        season: SeasonId,
        limit: int,
        team_id: int | None = None,
        newest_first: bool = False,
    ) -> list[int]:
        stmt = select(Game.id).where(Game.season == season, Game.game_state == "Final")
        if team_id is not None:
            stmt = stmt.where(or_(Game.home_team_id == team_id, Game.away_team_id == team_id))
        order = Game.game_date.desc() if newest_first else Game.game_date.asc()
        stmt = stmt.order_by(order, Game.id).limit(limit)
        with self.session_factory() as session:
            return list(session.scalars(stmt).all())

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _stage_teams(self) -> StageOutcome:
        rows = self.teams_collector.collect()
        errors = self.teams_collector.drain_errors()
        if rows:
            try:
                return self._outcome(self._write_rows(Team, rows), errors=errors)
            except PersistenceError as e:
                errors.append(StageError(TEAMS, e.table, str(e)))
                self.logger.warning(f"{WARN} Live teams could not be written, using fallback")
        else:
            self.logger.warning(
                f"{WARN} No usable teams from standings, "
                f"using fallback snapshot {self.fallback.version}"
            )
        written = self._write_rows(Team, self.fallback.teams())
        return self._outcome(written, fallback=True, errors=errors)

    def _stage_players(self, season: SeasonId, game_types: list[int]) -> StageOutcome:
        teams = self._known_teams()
        known_ids = set(teams.values())
        focus = self.settings.focus_team_abbrev

        roster = self.players_collector.collect_roster(focus, season, teams.get(focus))
        fallback = not roster
        if fallback:
            self.logger.warning(f"{WARN} No roster for {focus}, using fallback roster")
            roster = self.fallback.roster()
        for row in roster:
            if row["team_id"] not in known_ids:
                row["team_id"] = None
        written = self._write_rows(Player, roster)

        # Roster rows carry biography; summaries must not overwrite them
        roster_ids = {row["id"] for row in roster}
        league = self.players_collector.collect_league(season, game_types, known_ids)
        written += self._write_rows(Player, [r for r in league if r["id"] not in roster_ids])
        return self._outcome(written, self.players_collector, fallback=fallback)

    def _stage_games(self, season: SeasonId, game_types: list[int]) -> StageOutcome:
        teams = self._known_teams()
        rows = self.games_collector.collect_season(season, teams, game_types)
        fallback = not rows
        if fallback:
            self.logger.warning(f"{WARN} No games for {season}, using fallback sample games")
            known_ids = set(teams.values())
            # A sample game stored under another season keeps that season
            with self.session_factory() as session:
                claimed = set(session.scalars(select(Game.id).where(Game.season != season)))
            rows = [
                row
                for row in self.fallback.sample_games(season)
                if row["home_team_id"] in known_ids
                and row["away_team_id"] in known_ids
                and row["id"] not in claimed
            ]
        return self._outcome(
            self._write_rows(Game, rows), self.games_collector, fallback=fallback
        )

    def _for_each_game(
        self,
        stage: str,
        game_ids: list[int],
        write_game: Callable[[int], int | None],
    ) -> tuple[int, list[StageError]]:
        """Throttle and process games one by one.

        ``write_game`` returns rows written, or None when the upstream had
        nothing for that game. A failed write is recorded and skipped.
        """
        limiter = self.rate_limiters[stage]
        errors: list[StageError] = []
        written = 0
        for i, game_id in enumerate(game_ids, 1):
            limiter.wait()
            try:
                count = write_game(game_id)
            except PersistenceError as e:
                errors.append(StageError(stage, str(game_id), str(e)))
                continue
            if count is None:
                errors.append(StageError(stage, str(game_id), "no upstream data"))
                continue
            written += count
            if i % 25 == 0 or i == len(game_ids):
                self.logger.info(f"{stage}: {i}/{len(game_ids)} games")
        return written, errors

    def _stage_player_game_stats(self, season: SeasonId) -> StageOutcome:
        game_ids = self._final_games(season, self.settings.max_games_player_stats)

        def write_game(game_id: int) -> int | None:
            boxscore = self.boxscore_collector.fetch(game_id)
            if boxscore is None:
                return None
            players, stats = self.boxscore_collector.skater_rows(boxscore, game_id)
            for player in players:
                self.upserter.ensure(Player, player)
            return self.upserter.upsert_many(PlayerGameStat, stats)

        written, errors = self._for_each_game(PLAYER_GAME_STATS, game_ids, write_game)
        return self._outcome(written, self.boxscore_collector, errors=errors)

    def _stage_goalie_game_stats(self, season: SeasonId) -> StageOutcome:
        game_ids = self._final_games(season, self.settings.max_games_goalie_stats)

        def write_game(game_id: int) -> int | None:
            boxscore = self.boxscore_collector.fetch(game_id)
            if boxscore is None:
                return None
            players, stats = self.boxscore_collector.goalie_rows(boxscore, game_id)
            for player in players:
                self.upserter.ensure(Player, player)
            return self.upserter.upsert_many(GoalieGameStat, stats)

        written, errors = self._for_each_game(GOALIE_GAME_STATS, game_ids, write_game)
        return self._outcome(written, self.boxscore_collector, errors=errors)

    def _stage_team_game_stats(self, season: SeasonId) -> StageOutcome:
        game_ids = self._final_games(season, self.settings.max_games_team_stats)

        def write_game(game_id: int) -> int | None:
            boxscore = self.boxscore_collector.fetch(game_id)
            if boxscore is None:
                return None
            rows = self.boxscore_collector.team_rows(boxscore, game_id)
            return self.upserter.upsert_many(TeamGameStat, rows)

        written, errors = self._for_each_game(TEAM_GAME_STATS, game_ids, write_game)
        if written:
            return self._outcome(written, self.boxscore_collector, errors=errors)

        with self.session_factory() as session:
            season_games = set(session.scalars(select(Game.id).where(Game.season == season)))
        rows = [
            row for row in self.fallback.sample_team_game_stats() if row["game_id"] in season_games
        ]
        if rows:
            self.logger.warning(f"{WARN} No team box scores for {season}, using fallback")
        written = self.upserter.upsert_many(TeamGameStat, rows)
        return self._outcome(
            written, self.boxscore_collector, fallback=bool(rows), errors=errors
        )

    def _stage_shot_events(self, season: SeasonId) -> StageOutcome:
        focus = self.settings.focus_team_abbrev
        focus_id = self._known_teams().get(focus)
        if focus_id is None:
            error = StageError(SHOT_EVENTS, focus, "focus team not in store")
            return self._outcome(0, errors=[error])

        game_ids = self._final_games(
            season, self.settings.max_games_shot_events, team_id=focus_id, newest_first=True
        )

        def write_game(game_id: int) -> int | None:
            shots = self.shots_collector.collect_game(game_id)
            if shots is None:
                return None
            return self.upserter.replace(Shot, {"game_id": game_id}, shots)

        written, errors = self._for_each_game(SHOT_EVENTS, game_ids, write_game)
        return self._outcome(written, self.shots_collector, errors=errors)

    def _stage_season_aggregates(self, season: SeasonId) -> StageOutcome:
        players = self.aggregator.aggregate_players(season)
        teams = self.aggregator.aggregate_teams(season)
        return self._outcome(players + teams)

    def _stage_advanced_metrics(self, season: SeasonId) -> StageOutcome:
        updated = 0
        for row in self.advanced_collector.collect_teams(season):
            team_id = row.pop("team_id")
            updated += self.upserter.update_where(
                TeamSeasonStat, {"team_id": team_id, "season": season}, row
            )
        for row in self.advanced_collector.collect_skaters(season):
            player_id = row.pop("player_id")
            updated += self.upserter.update_where(
                PlayerSeasonStat, {"player_id": player_id, "season": season}, row
            )
        return self._outcome(updated, self.advanced_collector)

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def row_counts(self) -> dict[str, int]:
        """Current row count of every table, in schema order."""
        with self.session_factory() as session:
            return {
                model.__tablename__: session.scalar(select(func.count()).select_from(model)) or 0
                for model in ALL_MODELS
            }

    def _build_report(self, seasons: list[SeasonId], include_playoffs: bool) -> BackfillReport:
        try:
            counts = self.row_counts()
        except Exception as e:
            self.logger.error(f"Could not count rows for report: {e}")
            self.progress.errors.append(StageError("report", None, f"{type(e).__name__}: {e}"))
            counts = {}
        return BackfillReport(
            status=self.status,
            seasons=list(seasons),
            include_playoffs=include_playoffs,
            row_counts=counts,
            completed=list(self.progress.completed),
            errors=list(self.progress.errors),
            mapping_gaps=self.mapper.gap_report(),
            started_at=self.progress.start_time,
            duration_seconds=self.clock() - self._started,
        )
