"""Shot events collector built on the play-by-play feed.

Coordinates are in feet with centre ice at the origin and the goal lines at
x = ±89. Shots are measured against the goal on the shooter's side of the
x axis, so the geometry does not depend on which end a team attacks in a
given period.

Example:
    >>> collector = ShotsCollector(client)
    >>> shots = collector.collect_game(2024020500)
    >>> shots[0]["danger"]
    'high'
"""
from __future__ import annotations

import math

from hockey_stats.data.collectors.base import BaseCollector
from hockey_stats.data.mappings import NHL_PBP_SHOT, parse_time_on_ice
from hockey_stats.types import GameId, Row

SHOT_EVENT_TYPES = frozenset({"shot-on-goal", "goal", "missed-shot", "blocked-shot"})

GOAL_LINE_X = 89.0
PERIOD_SECONDS = 20 * 60

HIGH_DANGER_DISTANCE = 20.0
HIGH_DANGER_WIDTH = 10.0
MEDIUM_DANGER_DISTANCE = 35.0


def shot_geometry(x: float | None, y: float | None) -> tuple[float | None, float | None]:
    """Distance (feet) and angle (degrees) from the nearer goal.

    The angle is taken off the line from the goal toward centre ice, so
    shots from behind the net exceed 90 degrees.

    Returns:
        (distance, angle), both None when a coordinate is missing.
    """
    if x is None or y is None:
        return None, None
    dx = GOAL_LINE_X - abs(x)
    distance = math.hypot(dx, y)
    angle = math.degrees(math.atan2(abs(y), dx))
    return round(distance, 2), round(angle, 2)


def danger_tier(distance: float | None, y: float | None) -> str:
    """Classify a shot as high, medium or low danger.

    High danger is the slot: within 20 feet and 10 feet of the centre
    line. Unknown when the shot has no coordinates.
    """
    if distance is None or y is None:
        return "unknown"
    if distance < HIGH_DANGER_DISTANCE and abs(y) < HIGH_DANGER_WIDTH:
        return "high"
    if distance < MEDIUM_DANGER_DISTANCE:
        return "medium"
    return "low"


class ShotsCollector(BaseCollector):
    """Extracts shot attempts from a game's play-by-play."""

    stage = "shot-events"

    def collect_game(self, game_id: GameId) -> list[Row] | None:
        """Fetch and map every shot attempt of a game.

        Args:
            game_id: League game id.

        Returns:
            Shot rows in event order, or None when play-by-play is
            unavailable (an empty list means a game without shots).
        """
        pbp = self.api.get_play_by_play(game_id)
        if pbp is None:
            return None

        rows = [
            self._map_shot(play, game_id)
            for play in pbp.get("plays") or []
            if isinstance(play, dict) and play.get("typeDescKey") in SHOT_EVENT_TYPES
        ]
        self.logger.debug(f"Mapped {len(rows)} shots for game {game_id}")
        return rows

    def _map_shot(self, play: Row, game_id: GameId) -> Row:
        row = self.mapper.map(NHL_PBP_SHOT, play)
        distance, angle = shot_geometry(row["x_coord"], row["y_coord"])
        return {
            "game_id": game_id,
            "event_id": row["event_id"],
            "shooter_id": row["shooter_id"] or row["scorer_id"],
            "goalie_id": row["goalie_id"],
            "team_id": row["team_id"],
            "period": row["period"],
            "time_remaining_seconds": self._time_remaining(row),
            "x_coord": row["x_coord"],
            "y_coord": row["y_coord"],
            "shot_type": row["shot_type"],
            "event_type": row["event_type"],
            "is_goal": row["event_type"] == "goal",
            "distance": distance,
            "angle": angle,
            "danger": danger_tier(distance, row["y_coord"]),
        }

    @staticmethod
    def _time_remaining(row: Row) -> int:
        remaining = parse_time_on_ice(row["time_remaining"])
        if remaining is not None:
            return remaining
        elapsed = parse_time_on_ice(row["time_in_period"])
        if elapsed is None:
            return 0
        return max(PERIOD_SECONDS - elapsed, 0)
