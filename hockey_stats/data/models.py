"""SQLAlchemy ORM models for hockey statistics.

This module defines the nine tables the backfill pipeline fills.

Models are organized into categories:
- Core Reference: Team, Player
- Game Data: Game, PlayerGameStat, GoalieGameStat, TeamGameStat
- Play-by-Play: Shot
- Season Aggregates: PlayerSeasonStat, TeamSeasonStat

Every model declares ``__natural_key__``, the columns the upsert executor
resolves conflicts on. Team, Player and Game use league-assigned ids as
primary keys; per-game and per-season rows carry a surrogate id plus a
unique constraint on their natural key.

Example:
    >>> from hockey_stats.data.models import Game, Team
    >>> with session_factory() as session:
    ...     game = session.get(Game, 2024020500)
    ...     print(game.home_team.name)
"""
from __future__ import annotations

from datetime import date

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hockey_stats.data.schema import Base, TimestampMixin

# =============================================================================
# Core Reference Models
# =============================================================================


class Team(Base):
    """League team reference table.

    Attributes:
        id: League-assigned team id (primary key, not generated).
        name: Full team name, e.g. "Washington Capitals".
        abbreviation: Two to four letter code, unique (e.g. "WSH").
        city: Home city or place name.
        division: Division name.
        conference: Conference name.
    """

    __tablename__ = "teams"
    __natural_key__ = ("id",)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    abbreviation: Mapped[str] = mapped_column(String(4), unique=True, nullable=False)
    city: Mapped[str] = mapped_column(String(50), nullable=False)
    division: Mapped[str | None] = mapped_column(String(30), nullable=True)
    conference: Mapped[str | None] = mapped_column(String(30), nullable=True)

    players: Mapped[list[Player]] = relationship(back_populates="team")

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, abbreviation={self.abbreviation!r})>"


class Player(Base):
    """League player reference table.

    ``team_id`` is the most recently observed team; season-accurate team
    history lives only in ``player_season_stats``.

    Attributes:
        id: League-assigned player id (primary key).
        team_id: Foreign key to teams, or None when the team is unknown.
        first_name: Given name.
        last_name: Family name.
        position: One of C, LW, RW, D, G (F when upstream is vague).
        jersey_number: Sweater number, not unique.
        birth_date: Date of birth.
        birth_city: City of birth.
        birth_country: Country code of birth.
        height_inches: Height in inches.
        weight_pounds: Weight in pounds.
        shoots_catches: Shooting or catching hand (L/R).
    """

    __tablename__ = "players"
    __natural_key__ = ("id",)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    team_id: Mapped[int | None] = mapped_column(
        ForeignKey("teams.id"), nullable=True, index=True
    )
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    position: Mapped[str] = mapped_column(String(2), nullable=False, default="F")
    jersey_number: Mapped[int | None] = mapped_column(nullable=True)
    birth_date: Mapped[date | None] = mapped_column(nullable=True)
    birth_city: Mapped[str | None] = mapped_column(String(60), nullable=True)
    birth_country: Mapped[str | None] = mapped_column(String(3), nullable=True)
    height_inches: Mapped[int | None] = mapped_column(nullable=True)
    weight_pounds: Mapped[int | None] = mapped_column(nullable=True)
    shoots_catches: Mapped[str | None] = mapped_column(String(1), nullable=True)

    team: Mapped[Team | None] = relationship(back_populates="players")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<Player(id={self.id}, name={self.full_name!r})>"


# =============================================================================
# Game Data Models
# =============================================================================


class Game(Base):
    """Game record.

    Attributes:
        id: League game id; encodes season, game type and sequence.
        season: Eight digit season id, e.g. "20232024".
        game_type: "02" regular season, "03" playoffs.
        game_date: Local date of the game.
        start_time_utc: ISO-8601 puck drop time, as delivered upstream.
        home_team_id: Foreign key to teams.
        away_team_id: Foreign key to teams.
        home_score: Home goals (0 until played).
        away_score: Away goals (0 until played).
        period: Last period reached; above 3 means overtime or shootout.
        game_state: Scheduled, Live, Final or Unknown.
        venue: Arena name.
    """

    __tablename__ = "games"
    __natural_key__ = ("id",)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    season: Mapped[str] = mapped_column(String(8), nullable=False)
    game_type: Mapped[str] = mapped_column(String(2), nullable=False)
    game_date: Mapped[date | None] = mapped_column(nullable=True)
    start_time_utc: Mapped[str | None] = mapped_column(String(25), nullable=True)
    home_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    away_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    home_score: Mapped[int] = mapped_column(default=0, nullable=False)
    away_score: Mapped[int] = mapped_column(default=0, nullable=False)
    period: Mapped[int] = mapped_column(default=0, nullable=False)
    game_state: Mapped[str] = mapped_column(String(10), nullable=False)
    venue: Mapped[str | None] = mapped_column(String(100), nullable=True)

    home_team: Mapped[Team] = relationship(foreign_keys=[home_team_id])
    away_team: Mapped[Team] = relationship(foreign_keys=[away_team_id])

    __table_args__ = (
        Index("idx_games_season", "season"),
        Index("idx_games_date", "game_date"),
        Index("idx_games_home_team", "home_team_id"),
        Index("idx_games_away_team", "away_team_id"),
    )

    def __repr__(self) -> str:
        return f"<Game(id={self.id}, season={self.season!r}, state={self.game_state!r})>"


class PlayerGameStat(TimestampMixin, Base):
    """Skater box score line for one game.

    Counts default to zero; possession metrics stay None unless a source
    provides them.
    """

    __tablename__ = "player_game_stats"
    __natural_key__ = ("game_id", "player_id")

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    goals: Mapped[int] = mapped_column(default=0, nullable=False)
    assists: Mapped[int] = mapped_column(default=0, nullable=False)
    points: Mapped[int] = mapped_column(default=0, nullable=False)
    plus_minus: Mapped[int] = mapped_column(default=0, nullable=False)
    penalty_minutes: Mapped[int] = mapped_column(default=0, nullable=False)
    shots: Mapped[int] = mapped_column(default=0, nullable=False)
    hits: Mapped[int] = mapped_column(default=0, nullable=False)
    blocks: Mapped[int] = mapped_column(default=0, nullable=False)
    powerplay_goals: Mapped[int] = mapped_column(default=0, nullable=False)
    shorthanded_goals: Mapped[int] = mapped_column(default=0, nullable=False)
    time_on_ice_seconds: Mapped[int] = mapped_column(default=0, nullable=False)
    corsi_for: Mapped[float | None] = mapped_column(nullable=True)
    corsi_against: Mapped[float | None] = mapped_column(nullable=True)
    fenwick_for: Mapped[float | None] = mapped_column(nullable=True)
    fenwick_against: Mapped[float | None] = mapped_column(nullable=True)
    expected_goals: Mapped[float | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("game_id", "player_id", name="uq_player_game_stats"),
        Index("idx_pgs_player", "player_id"),
    )

    def __repr__(self) -> str:
        return f"<PlayerGameStat(game_id={self.game_id}, player_id={self.player_id})>"


class GoalieGameStat(TimestampMixin, Base):
    """Goaltender box score line for one game."""

    __tablename__ = "goalie_game_stats"
    __natural_key__ = ("game_id", "player_id")

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    shots_against: Mapped[int] = mapped_column(default=0, nullable=False)
    goals_against: Mapped[int] = mapped_column(default=0, nullable=False)
    saves: Mapped[int] = mapped_column(default=0, nullable=False)
    save_percentage: Mapped[float] = mapped_column(default=0.0, nullable=False)
    time_on_ice_seconds: Mapped[int] = mapped_column(default=0, nullable=False)
    decision: Mapped[str | None] = mapped_column(String(2), nullable=True)
    shutout: Mapped[bool] = mapped_column(default=False, nullable=False)
    expected_goals_against: Mapped[float | None] = mapped_column(nullable=True)
    goals_saved_above_expected: Mapped[float | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("game_id", "player_id", name="uq_goalie_game_stats"),
        Index("idx_ggs_player", "player_id"),
    )

    def __repr__(self) -> str:
        return f"<GoalieGameStat(game_id={self.game_id}, player_id={self.player_id})>"


class TeamGameStat(TimestampMixin, Base):
    """Team box score for one side of one game."""

    __tablename__ = "team_game_stats"
    __natural_key__ = ("game_id", "team_id")

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    is_home: Mapped[bool] = mapped_column(nullable=False)
    goals: Mapped[int] = mapped_column(default=0, nullable=False)
    shots: Mapped[int] = mapped_column(default=0, nullable=False)
    hits: Mapped[int] = mapped_column(default=0, nullable=False)
    blocks: Mapped[int] = mapped_column(default=0, nullable=False)
    penalty_minutes: Mapped[int] = mapped_column(default=0, nullable=False)
    powerplay_goals: Mapped[int] = mapped_column(default=0, nullable=False)
    powerplay_opportunities: Mapped[int] = mapped_column(default=0, nullable=False)
    faceoff_wins: Mapped[int] = mapped_column(default=0, nullable=False)
    faceoff_attempts: Mapped[int] = mapped_column(default=0, nullable=False)
    corsi_for: Mapped[float | None] = mapped_column(nullable=True)
    corsi_against: Mapped[float | None] = mapped_column(nullable=True)
    fenwick_for: Mapped[float | None] = mapped_column(nullable=True)
    fenwick_against: Mapped[float | None] = mapped_column(nullable=True)
    expected_goals_for: Mapped[float | None] = mapped_column(nullable=True)
    expected_goals_against: Mapped[float | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("game_id", "team_id", name="uq_team_game_stats"),
        Index("idx_tgs_team", "team_id"),
    )

    def __repr__(self) -> str:
        return f"<TeamGameStat(game_id={self.game_id}, team_id={self.team_id})>"


# =============================================================================
# Play-by-Play Models
# =============================================================================


class Shot(Base):
    """Shot attempt from play-by-play.

    No natural key is enforced; a game's shots are replaced as a whole
    whenever its play-by-play is ingested again.

    Attributes:
        event_type: shot-on-goal, goal, missed-shot or blocked-shot.
        time_remaining_seconds: Seconds left in the period.
        x_coord: Rink x coordinate in feet (-100 to 100), None if missing.
        y_coord: Rink y coordinate in feet (-42.5 to 42.5), None if missing.
        distance: Feet to the attacked goal line centre.
        angle: Degrees off the goal's centre line.
        danger: high, medium, low or unknown.
    """

    __tablename__ = "shots"
    __natural_key__ = ("id",)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False)
    event_id: Mapped[int | None] = mapped_column(nullable=True)
    shooter_id: Mapped[int | None] = mapped_column(nullable=True)
    goalie_id: Mapped[int | None] = mapped_column(nullable=True)
    team_id: Mapped[int | None] = mapped_column(nullable=True)
    period: Mapped[int] = mapped_column(default=0, nullable=False)
    time_remaining_seconds: Mapped[int] = mapped_column(default=0, nullable=False)
    x_coord: Mapped[float | None] = mapped_column(nullable=True)
    y_coord: Mapped[float | None] = mapped_column(nullable=True)
    shot_type: Mapped[str] = mapped_column(String(20), nullable=False, default="unknown")
    event_type: Mapped[str] = mapped_column(String(20), nullable=False)
    is_goal: Mapped[bool] = mapped_column(default=False, nullable=False)
    distance: Mapped[float | None] = mapped_column(nullable=True)
    angle: Mapped[float | None] = mapped_column(nullable=True)
    danger: Mapped[str] = mapped_column(String(10), nullable=False, default="unknown")

    __table_args__ = (
        Index("idx_shots_game", "game_id"),
        Index("idx_shots_shooter", "shooter_id"),
    )

    def __repr__(self) -> str:
        return f"<Shot(id={self.id}, game_id={self.game_id}, event={self.event_type!r})>"


# =============================================================================
# Season Aggregate Models
# =============================================================================


class PlayerSeasonStat(TimestampMixin, Base):
    """Skater season totals for one (player, season, team).

    Re-derivable from player_game_stats; the advanced columns are filled
    afterwards from MoneyPuck and are never touched by the aggregator.
    """

    __tablename__ = "player_season_stats"
    __natural_key__ = ("player_id", "season", "team_id")

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    season: Mapped[str] = mapped_column(String(8), nullable=False)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    games_played: Mapped[int] = mapped_column(default=0, nullable=False)
    goals: Mapped[int] = mapped_column(default=0, nullable=False)
    assists: Mapped[int] = mapped_column(default=0, nullable=False)
    points: Mapped[int] = mapped_column(default=0, nullable=False)
    plus_minus: Mapped[int] = mapped_column(default=0, nullable=False)
    penalty_minutes: Mapped[int] = mapped_column(default=0, nullable=False)
    shots: Mapped[int] = mapped_column(default=0, nullable=False)
    hits: Mapped[int] = mapped_column(default=0, nullable=False)
    blocks: Mapped[int] = mapped_column(default=0, nullable=False)
    time_on_ice_seconds: Mapped[int] = mapped_column(default=0, nullable=False)
    time_on_ice_avg: Mapped[float] = mapped_column(default=0.0, nullable=False)
    shooting_percentage: Mapped[float] = mapped_column(default=0.0, nullable=False)
    corsi_for_percentage: Mapped[float | None] = mapped_column(nullable=True)
    fenwick_for_percentage: Mapped[float | None] = mapped_column(nullable=True)
    expected_goals: Mapped[float | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "player_id", "season", "team_id", name="uq_player_season_stats"
        ),
        Index("idx_pss_season", "season"),
    )

    def __repr__(self) -> str:
        return (
            f"<PlayerSeasonStat(player_id={self.player_id}, "
            f"season={self.season!r}, team_id={self.team_id})>"
        )


class TeamSeasonStat(TimestampMixin, Base):
    """Team standings line for one season."""

    __tablename__ = "team_season_stats"
    __natural_key__ = ("team_id", "season")

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    season: Mapped[str] = mapped_column(String(8), nullable=False)
    games_played: Mapped[int] = mapped_column(default=0, nullable=False)
    wins: Mapped[int] = mapped_column(default=0, nullable=False)
    losses: Mapped[int] = mapped_column(default=0, nullable=False)
    overtime_losses: Mapped[int] = mapped_column(default=0, nullable=False)
    points: Mapped[int] = mapped_column(default=0, nullable=False)
    goals_for: Mapped[int] = mapped_column(default=0, nullable=False)
    goals_against: Mapped[int] = mapped_column(default=0, nullable=False)
    goal_differential: Mapped[int] = mapped_column(default=0, nullable=False)
    corsi_for_percentage: Mapped[float | None] = mapped_column(nullable=True)
    fenwick_for_percentage: Mapped[float | None] = mapped_column(nullable=True)
    expected_goals_for: Mapped[float | None] = mapped_column(nullable=True)
    expected_goals_against: Mapped[float | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("team_id", "season", name="uq_team_season_stats"),
    )

    def __repr__(self) -> str:
        return f"<TeamSeasonStat(team_id={self.team_id}, season={self.season!r})>"


# Report order; also the set of tables `data validate` requires
ALL_MODELS: tuple[type[Base], ...] = (
    Team,
    Player,
    Game,
    PlayerGameStat,
    PlayerSeasonStat,
    TeamGameStat,
    TeamSeasonStat,
    GoalieGameStat,
    Shot,
)
