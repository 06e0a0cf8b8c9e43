"""Tests for shared types and exceptions."""
from __future__ import annotations

import pytest

from hockey_stats.types import (
    BackfillAlreadyRunningError,
    BackfillError,
    FatalStageError,
    HockeyStatsError,
    InvalidSeasonError,
    PersistenceError,
    StageError,
)


class TestStageError:
    """Tests for StageError dataclass."""

    def test_to_dict(self) -> None:
        """Should render as a flat dict for JSON reports."""
        error = StageError("games", "2024020500", "ValueError: bad")

        assert error.to_dict() == {
            "stage": "games",
            "entity_key": "2024020500",
            "cause": "ValueError: bad",
        }

    def test_str_with_key(self) -> None:
        """Should include the entity key in brackets."""
        assert str(StageError("shot-events", "2024020500", "no data")) == (
            "shot-events [2024020500]: no data"
        )

    def test_str_without_key(self) -> None:
        """Should omit the brackets when no key is known."""
        assert str(StageError("teams", None, "boom")) == "teams: boom"

    def test_is_immutable(self) -> None:
        """Should be frozen."""
        error = StageError("teams", None, "boom")
        with pytest.raises(AttributeError):
            error.stage = "games"  # type: ignore[misc]


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self) -> None:
        """Backfill errors should share the package base class."""
        assert issubclass(BackfillError, HockeyStatsError)
        assert issubclass(BackfillAlreadyRunningError, BackfillError)
        assert issubclass(FatalStageError, BackfillError)
        assert issubclass(InvalidSeasonError, ValueError)

    def test_persistence_error_message(self) -> None:
        """Should name the table, key and cause."""
        error = PersistenceError("teams", {"id": 15}, RuntimeError("locked"))

        assert error.table == "teams"
        assert error.key == {"id": 15}
        assert "RuntimeError: locked" in str(error)

    def test_fatal_stage_error_carries_report(self) -> None:
        """Should keep the stage label and an optional report."""
        error = FatalStageError("teams", "nothing persisted", report={"status": "failed"})

        assert error.stage == "teams"
        assert error.report == {"status": "failed"}
        assert str(error) == "teams: nothing persisted"
