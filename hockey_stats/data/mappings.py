"""Versioned field-mapping tables for every upstream record shape.

Each upstream source gets one :class:`SourceMapping` naming, for every
persisted column, the exact source path it is read from and how the value is
coerced. A path that is absent from a record (or holds an unusable value) is
a *mapping gap*: the column falls back to its kind's default and the gap is
counted on the :class:`RowMapper`, so a renamed upstream field shows up in
the backfill report instead of silently zeroing a column.

Defaulting policy: counts become 0, optional numeric and biographical
fields become None. NaN and infinities are never produced.

Example:
    >>> mapper = RowMapper()
    >>> row = mapper.map(NHL_ROSTER, {"id": 8471214, "firstName": {"default": "Alex"}})
    >>> row["position"]
    'F'
    >>> mapper.gap_report()["nhl-roster@v1:last_name"]
    1
"""
from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Literal

from hockey_stats.types import Row

logger = logging.getLogger(__name__)

FieldKind = Literal[
    "count",
    "decimal",
    "optional_int",
    "optional_float",
    "text",
    "optional_text",
    "toi",
    "date",
]

_MISSING = object()


@dataclass(frozen=True)
class FieldSpec:
    """How one persisted column is read from an upstream record.

    Attributes:
        path: Dotted path into the record (``"teamAbbrev.default"``).
        kind: Coercion applied to the raw value.
        default: Value for ``text`` fields when the source has none.
        expected: Whether absence counts as a mapping gap. Fields that are
            legitimately absent (scores of unplayed games) set this False.
    """

    path: str
    kind: FieldKind = "count"
    default: Any = None
    expected: bool = True


@dataclass(frozen=True)
class SourceMapping:
    """Mapping table for one upstream record shape at one version."""

    source: str
    version: int
    fields: dict[str, FieldSpec] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return f"{self.source}@v{self.version}"


# =============================================================================
# Team identity
# =============================================================================

# Upstream sources disagree on how a team is identified; the league id is
# authoritative and resolved from the abbreviation through this table.
TEAM_ABBREV_TO_ID: dict[str, int] = {
    "NJD": 1, "NYI": 2, "NYR": 3, "PHI": 4, "PIT": 5, "BOS": 6, "BUF": 7,
    "MTL": 8, "OTT": 9, "TOR": 10, "CAR": 12, "FLA": 13, "TBL": 14, "WSH": 15,
    "CHI": 16, "DET": 17, "NSH": 18, "STL": 19, "CGY": 20, "COL": 21,
    "EDM": 22, "VAN": 23, "ANA": 24, "DAL": 25, "LAK": 26, "SJS": 27,
    "CBJ": 28, "MIN": 29, "WPG": 30, "ARI": 53, "VGK": 54, "SEA": 55,
    "UTA": 59,
}

# MoneyPuck spells four clubs with dotted codes
MONEYPUCK_ABBREV_ALIASES: dict[str, str] = {
    "T.B": "TBL",
    "N.J": "NJD",
    "L.A": "LAK",
    "S.J": "SJS",
}


def resolve_team_id(abbreviation: str | None) -> int | None:
    """League team id for an abbreviation (MoneyPuck spellings included)."""
    if not abbreviation:
        return None
    abbrev = abbreviation.strip().upper()
    abbrev = MONEYPUCK_ABBREV_ALIASES.get(abbrev, abbrev)
    return TEAM_ABBREV_TO_ID.get(abbrev)


def last_team_abbrev(team_abbrevs: str | None) -> str | None:
    """Most recent club from a stats-API ``teamAbbrevs`` value ("TOR,WSH")."""
    if not team_abbrevs:
        return None
    parts = [p.strip() for p in team_abbrevs.split(",") if p.strip()]
    return parts[-1] if parts else None


# =============================================================================
# Value helpers
# =============================================================================


def parse_time_on_ice(value: Any) -> int | None:
    """Convert "MM:SS" (or plain seconds) to seconds; None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    text = str(value).strip()
    if not text:
        return None
    if ":" in text:
        minutes, _, seconds = text.partition(":")
        try:
            return int(minutes) * 60 + int(seconds)
        except ValueError:
            return None
    try:
        return int(float(text))
    except ValueError:
        return None


def map_game_state(raw: Any) -> str:
    """Normalize an upstream game state to Scheduled/Live/Final/Unknown."""
    if raw in (3, "3"):
        return "Final"
    if raw in (1, "1"):
        return "Scheduled"
    if raw in (2, "2"):
        return "Live"
    text = str(raw or "").strip().upper()
    if text in {"FINAL", "OFF"}:
        return "Final"
    if text in {"FUT", "PRE", "SCHEDULED"}:
        return "Scheduled"
    if text in {"LIVE", "CRIT"}:
        return "Live"
    return "Unknown"


_POSITION_CODES = {"L": "LW", "R": "RW", "C": "C", "D": "D", "G": "G", "LW": "LW", "RW": "RW"}


def normalize_position(raw: str | None) -> str:
    """Map upstream position codes to C/LW/RW/D/G; anything else is F."""
    return _POSITION_CODES.get((raw or "").strip().upper(), "F")


def game_type_code(raw: Any) -> str | None:
    """Two character game type code (2 -> "02"); None if not numeric."""
    try:
        return f"{int(raw):02d}"
    except (TypeError, ValueError):
        return None


def split_full_name(full_name: str | None, last_name: str | None) -> tuple[str, str]:
    """Split a display name into (first, last) using the known last name."""
    full = (full_name or "").strip()
    last = (last_name or "").strip()
    if last and full.endswith(last):
        first = full[: -len(last)].strip()
    elif " " in full:
        first, _, last_guess = full.partition(" ")
        last = last or last_guess
    else:
        first = ""
    return first or "Unknown", last or "Unknown"


def _to_float(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _coerce(spec: FieldSpec, raw: Any) -> tuple[Any, bool]:
    """Coerce ``raw`` per ``spec``; the flag is False for unusable values."""
    kind = spec.kind
    if kind in ("text", "optional_text"):
        text = str(raw).strip() if raw is not None else ""
        if text:
            return text, True
        return (spec.default if kind == "text" else None), raw is None or raw == ""

    if kind == "date":
        if raw in (None, ""):
            return None, True
        try:
            return date.fromisoformat(str(raw)[:10]), True
        except ValueError:
            return None, False

    if kind == "toi":
        seconds = parse_time_on_ice(raw)
        return (seconds if seconds is not None else 0), seconds is not None or raw in (None, "")

    number = _to_float(raw)
    usable = number is not None or raw in (None, "")
    if kind == "count":
        return (int(number) if number is not None else 0), usable
    if kind == "decimal":
        return (number if number is not None else 0.0), usable
    if kind == "optional_int":
        return (int(number) if number is not None else None), usable
    return number, usable


def _lookup(record: dict[str, Any], path: str) -> Any:
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


# =============================================================================
# Row Mapper
# =============================================================================


class RowMapper:
    """Applies :class:`SourceMapping` tables and tallies mapping gaps.

    Attributes:
        gaps: Count of gaps per (mapping label, column).
    """

    def __init__(self) -> None:
        self.gaps: Counter[tuple[str, str]] = Counter()

    def map(self, mapping: SourceMapping, record: dict[str, Any]) -> Row:
        """Translate one upstream record into a row dict.

        Args:
            mapping: Table for the record's source.
            record: Upstream record (JSON object or CSV row).

        Returns:
            Dict with exactly the mapping's target columns.
        """
        row: Row = {}
        for target, spec in mapping.fields.items():
            raw = _lookup(record, spec.path)
            if raw is _MISSING:
                if spec.expected:
                    self._record_gap(mapping, target, "missing")
                raw = None
            value, usable = _coerce(spec, raw)
            if not usable:
                self._record_gap(mapping, target, f"unusable value {raw!r}")
            row[target] = value
        return row

    def _record_gap(self, mapping: SourceMapping, target: str, reason: str) -> None:
        key = (mapping.label, target)
        if key not in self.gaps:
            logger.debug(f"Mapping gap {mapping.label}:{target} ({reason})")
        self.gaps[key] += 1

    def gap_report(self) -> dict[str, int]:
        """Gaps keyed ``"<source>@v<version>:<column>"``."""
        return {f"{label}:{target}": n for (label, target), n in sorted(self.gaps.items())}

    def reset(self) -> None:
        self.gaps.clear()


# =============================================================================
# Mapping tables
# =============================================================================

NHL_STANDINGS = SourceMapping(
    source="nhl-standings",
    version=1,
    fields={
        "abbreviation": FieldSpec("teamAbbrev.default", "text", default=""),
        "name": FieldSpec("teamName.default", "text", default="Unknown"),
        "city": FieldSpec("placeName.default", "text", default="Unknown"),
        "division": FieldSpec("divisionName", "optional_text"),
        "conference": FieldSpec("conferenceName", "optional_text"),
    },
)

NHL_ROSTER = SourceMapping(
    source="nhl-roster",
    version=1,
    fields={
        "id": FieldSpec("id", "optional_int"),
        "first_name": FieldSpec("firstName.default", "text", default="Unknown"),
        "last_name": FieldSpec("lastName.default", "text", default="Unknown"),
        "position": FieldSpec("positionCode", "text", default="F"),
        "jersey_number": FieldSpec("sweaterNumber", "optional_int"),
        "shoots_catches": FieldSpec("shootsCatches", "optional_text"),
        "height_inches": FieldSpec("heightInInches", "optional_int"),
        "weight_pounds": FieldSpec("weightInPounds", "optional_int"),
        "birth_date": FieldSpec("birthDate", "date"),
        "birth_city": FieldSpec("birthCity.default", "optional_text"),
        "birth_country": FieldSpec("birthCountry", "optional_text"),
    },
)

NHL_SKATER_SUMMARY = SourceMapping(
    source="nhl-skater-summary",
    version=1,
    fields={
        "id": FieldSpec("playerId", "optional_int"),
        "full_name": FieldSpec("skaterFullName", "optional_text"),
        "last_name": FieldSpec("lastName", "optional_text"),
        "position": FieldSpec("positionCode", "text", default="F"),
        "shoots_catches": FieldSpec("shootsCatches", "optional_text"),
        "team_abbrevs": FieldSpec("teamAbbrevs", "optional_text"),
    },
)

NHL_GOALIE_SUMMARY = SourceMapping(
    source="nhl-goalie-summary",
    version=1,
    fields={
        "id": FieldSpec("playerId", "optional_int"),
        "full_name": FieldSpec("goalieFullName", "optional_text"),
        "last_name": FieldSpec("lastName", "optional_text"),
        "shoots_catches": FieldSpec("shootsCatches", "optional_text"),
        "team_abbrevs": FieldSpec("teamAbbrevs", "optional_text"),
    },
)

NHL_CLUB_SCHEDULE = SourceMapping(
    source="nhl-club-schedule",
    version=1,
    fields={
        "id": FieldSpec("id", "optional_int"),
        "game_type": FieldSpec("gameType", "optional_int"),
        "game_date": FieldSpec("gameDate", "date"),
        "start_time_utc": FieldSpec("startTimeUTC", "optional_text"),
        "home_team_id": FieldSpec("homeTeam.id", "optional_int"),
        "away_team_id": FieldSpec("awayTeam.id", "optional_int"),
        "home_score": FieldSpec("homeTeam.score", expected=False),
        "away_score": FieldSpec("awayTeam.score", expected=False),
        "period": FieldSpec("periodDescriptor.number", expected=False),
        "game_state": FieldSpec("gameState", "optional_text"),
        "venue": FieldSpec("venue.default", "optional_text", expected=False),
    },
)

NHL_BOXSCORE_PLAYER = SourceMapping(
    source="nhl-boxscore-player",
    version=1,
    fields={
        "id": FieldSpec("playerId", "optional_int"),
        "name": FieldSpec("name.default", "optional_text"),
        "position": FieldSpec("position", "text", default="F"),
        "jersey_number": FieldSpec("sweaterNumber", "optional_int"),
    },
)

NHL_BOXSCORE_SKATER = SourceMapping(
    source="nhl-boxscore-skater",
    version=1,
    fields={
        "player_id": FieldSpec("playerId", "optional_int"),
        "goals": FieldSpec("goals"),
        "assists": FieldSpec("assists"),
        "points": FieldSpec("points"),
        "plus_minus": FieldSpec("plusMinus"),
        "penalty_minutes": FieldSpec("pim"),
        "shots": FieldSpec("sog"),
        "hits": FieldSpec("hits"),
        "blocks": FieldSpec("blockedShots"),
        "powerplay_goals": FieldSpec("powerPlayGoals"),
        "shorthanded_goals": FieldSpec("shorthandedGoals", expected=False),
        "time_on_ice_seconds": FieldSpec("toi", "toi"),
    },
)

NHL_BOXSCORE_GOALIE = SourceMapping(
    source="nhl-boxscore-goalie",
    version=1,
    fields={
        "player_id": FieldSpec("playerId", "optional_int"),
        "shots_against": FieldSpec("shotsAgainst"),
        "goals_against": FieldSpec("goalsAgainst"),
        "saves": FieldSpec("saves", "optional_int", expected=False),
        "time_on_ice_seconds": FieldSpec("toi", "toi"),
        "decision": FieldSpec("decision", "optional_text", expected=False),
    },
)

NHL_BOXSCORE_TEAM = SourceMapping(
    source="nhl-boxscore-team",
    version=1,
    fields={
        "team_id": FieldSpec("id", "optional_int"),
        "goals": FieldSpec("score"),
        "shots": FieldSpec("sog"),
    },
)

NHL_PBP_SHOT = SourceMapping(
    source="nhl-pbp-shot",
    version=1,
    fields={
        "event_id": FieldSpec("eventId", "optional_int"),
        "event_type": FieldSpec("typeDescKey", "text", default="unknown"),
        "period": FieldSpec("periodDescriptor.number"),
        "time_remaining": FieldSpec("timeRemaining", "optional_text", expected=False),
        "time_in_period": FieldSpec("timeInPeriod", "optional_text"),
        "shooter_id": FieldSpec("details.shootingPlayerId", "optional_int", expected=False),
        "scorer_id": FieldSpec("details.scoringPlayerId", "optional_int", expected=False),
        "goalie_id": FieldSpec("details.goalieInNetId", "optional_int", expected=False),
        "team_id": FieldSpec("details.eventOwnerTeamId", "optional_int"),
        "x_coord": FieldSpec("details.xCoord", "optional_float"),
        "y_coord": FieldSpec("details.yCoord", "optional_float"),
        "shot_type": FieldSpec("details.shotType", "text", default="unknown", expected=False),
    },
)

MONEYPUCK_TEAMS = SourceMapping(
    source="moneypuck-teams",
    version=1,
    fields={
        "team": FieldSpec("team", "optional_text"),
        "situation": FieldSpec("situation", "optional_text"),
        "corsi_for_percentage": FieldSpec("corsiPercentage", "optional_float"),
        "fenwick_for_percentage": FieldSpec("fenwickPercentage", "optional_float"),
        "expected_goals_for": FieldSpec("xGoalsFor", "optional_float"),
        "expected_goals_against": FieldSpec("xGoalsAgainst", "optional_float"),
    },
)

MONEYPUCK_SKATERS = SourceMapping(
    source="moneypuck-skaters",
    version=1,
    fields={
        "player_id": FieldSpec("playerId", "optional_int"),
        "situation": FieldSpec("situation", "optional_text"),
        "corsi_for_percentage": FieldSpec("onIce_corsiPercentage", "optional_float"),
        "fenwick_for_percentage": FieldSpec("onIce_fenwickPercentage", "optional_float"),
        "expected_goals": FieldSpec("I_F_xGoals", "optional_float"),
    },
)

ALL_MAPPINGS: tuple[SourceMapping, ...] = (
    NHL_STANDINGS,
    NHL_ROSTER,
    NHL_SKATER_SUMMARY,
    NHL_GOALIE_SUMMARY,
    NHL_CLUB_SCHEDULE,
    NHL_BOXSCORE_PLAYER,
    NHL_BOXSCORE_SKATER,
    NHL_BOXSCORE_GOALIE,
    NHL_BOXSCORE_TEAM,
    NHL_PBP_SHOT,
    MONEYPUCK_TEAMS,
    MONEYPUCK_SKATERS,
)
