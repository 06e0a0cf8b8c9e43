"""Tests for ShotsCollector and shot geometry."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from hockey_stats.data.collectors.shots import ShotsCollector, danger_tier, shot_geometry

GAME_ID = 2024020500


class TestShotGeometry:
    """Tests for shot_geometry."""

    def test_distance_and_angle(self) -> None:
        """Should measure from the nearer goal line."""
        distance, angle = shot_geometry(80, 5)

        assert distance == pytest.approx(10.3, abs=0.01)
        assert angle == pytest.approx(29.05, abs=0.01)

    def test_symmetric_ends(self) -> None:
        """A mirrored shot at the other end should measure the same."""
        assert shot_geometry(-80, -5) == shot_geometry(80, 5)

    def test_straight_on(self) -> None:
        """A shot on the centre line has zero angle."""
        assert shot_geometry(69, 0) == (20.0, 0.0)

    def test_behind_the_net(self) -> None:
        """A shot from behind the goal line should have an obtuse angle."""
        distance, angle = shot_geometry(95, 5)

        assert distance == pytest.approx(7.81, abs=0.01)
        assert angle == pytest.approx(140.19, abs=0.01)
        assert shot_geometry(95, 5) != shot_geometry(83, 5)

    def test_missing_coordinates(self) -> None:
        """Missing coordinates give no geometry."""
        assert shot_geometry(None, 5) == (None, None)


class TestDangerTier:
    """Tests for danger_tier."""

    @pytest.mark.parametrize(
        ("distance", "y", "expected"),
        [
            (10.0, 5.0, "high"),
            (15.0, 12.0, "medium"),
            (30.0, 0.0, "medium"),
            (50.0, 0.0, "low"),
            (None, 0.0, "unknown"),
        ],
    )
    def test_tiers(self, distance, y, expected) -> None:
        """Should classify by distance and lateral position."""
        assert danger_tier(distance, y) == expected


class TestCollectGame:
    """Tests for ShotsCollector.collect_game."""

    def test_maps_shot_events(self, sample_play_by_play) -> None:
        """Only shot attempts should be kept, in event order."""
        api = MagicMock()
        api.get_play_by_play.return_value = sample_play_by_play

        rows = ShotsCollector(api).collect_game(GAME_ID)

        assert [r["event_id"] for r in rows] == [102, 103]

    def test_goal_row(self, sample_play_by_play) -> None:
        """A goal should credit the scorer and carry geometry."""
        api = MagicMock()
        api.get_play_by_play.return_value = sample_play_by_play

        goal = ShotsCollector(api).collect_game(GAME_ID)[0]

        assert goal["is_goal"] is True
        assert goal["shooter_id"] == 8471214
        assert goal["goalie_id"] == 8478048
        assert goal["team_id"] == 15
        assert goal["time_remaining_seconds"] == 870
        assert goal["shot_type"] == "wrist"
        assert goal["danger"] == "high"

    def test_remaining_time_from_elapsed(self, sample_play_by_play) -> None:
        """Without timeRemaining the clock is derived from timeInPeriod."""
        api = MagicMock()
        api.get_play_by_play.return_value = sample_play_by_play

        miss = ShotsCollector(api).collect_game(GAME_ID)[1]

        assert miss["is_goal"] is False
        assert miss["shooter_id"] == 8478550
        assert miss["period"] == 2
        assert miss["time_remaining_seconds"] == 600
        assert miss["danger"] == "low"

    def test_no_play_by_play(self) -> None:
        """Unavailable play-by-play is None, not an empty game."""
        api = MagicMock()
        api.get_play_by_play.return_value = None

        assert ShotsCollector(api).collect_game(GAME_ID) is None

    def test_game_without_shots(self) -> None:
        """A feed with no shot events gives an empty list."""
        api = MagicMock()
        api.get_play_by_play.return_value = {"plays": [{"typeDescKey": "faceoff"}]}

        assert ShotsCollector(api).collect_game(GAME_ID) == []
