"""Tests for versioned field mappings and the row mapper."""
from __future__ import annotations

from datetime import date

import pytest

from hockey_stats.data.mappings import (
    ALL_MAPPINGS,
    NHL_BOXSCORE_SKATER,
    NHL_CLUB_SCHEDULE,
    NHL_ROSTER,
    TEAM_ABBREV_TO_ID,
    FieldSpec,
    RowMapper,
    SourceMapping,
    game_type_code,
    last_team_abbrev,
    map_game_state,
    normalize_position,
    parse_time_on_ice,
    resolve_team_id,
    split_full_name,
)


class TestTeamIdentity:
    """Tests for the static team table and its helpers."""

    def test_thirty_three_ids(self) -> None:
        """Should know the 32 current clubs plus Utah."""
        assert len(TEAM_ABBREV_TO_ID) == 33
        assert TEAM_ABBREV_TO_ID["WSH"] == 15
        assert TEAM_ABBREV_TO_ID["UTA"] == 59

    @pytest.mark.parametrize(
        ("abbrev", "expected"),
        [("WSH", 15), ("wsh", 15), ("T.B", 14), ("N.J", 1), ("L.A", 26), ("S.J", 27), ("XXX", None), (None, None)],
    )
    def test_resolve_team_id(self, abbrev, expected) -> None:
        """Should resolve league and MoneyPuck spellings."""
        assert resolve_team_id(abbrev) == expected

    def test_last_team_abbrev(self) -> None:
        """Should take the most recent club of a traded player."""
        assert last_team_abbrev("TOR,WSH") == "WSH"
        assert last_team_abbrev("") is None


class TestValueHelpers:
    """Tests for the value helper functions."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("19:45", 1185), ("0:30", 30), (600, 600), ("abc", None), (None, None), ("", None)],
    )
    def test_parse_time_on_ice(self, raw, expected) -> None:
        """Should convert MM:SS and plain seconds."""
        assert parse_time_on_ice(raw) == expected

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("OFF", "Final"),
            ("FINAL", "Final"),
            (3, "Final"),
            ("FUT", "Scheduled"),
            ("PRE", "Scheduled"),
            (1, "Scheduled"),
            ("LIVE", "Live"),
            ("CRIT", "Live"),
            ("PPD", "Unknown"),
            (None, "Unknown"),
        ],
    )
    def test_map_game_state(self, raw, expected) -> None:
        """Should normalise upstream game states."""
        assert map_game_state(raw) == expected

    def test_normalize_position(self) -> None:
        """Should expand wing codes and default vague codes to F."""
        assert normalize_position("L") == "LW"
        assert normalize_position("R") == "RW"
        assert normalize_position("D") == "D"
        assert normalize_position("W") == "F"
        assert normalize_position(None) == "F"

    def test_game_type_code(self) -> None:
        """Should zero-pad numeric game types."""
        assert game_type_code(2) == "02"
        assert game_type_code("3") == "03"
        assert game_type_code(None) is None

    def test_split_full_name(self) -> None:
        """Should use the known last name to split compound names."""
        assert split_full_name("Pierre-Luc Dubois", "Dubois") == ("Pierre-Luc", "Dubois")
        assert split_full_name("Jakob Chychrun", None) == ("Jakob", "Chychrun")
        assert split_full_name(None, None) == ("Unknown", "Unknown")


class TestRowMapper:
    """Tests for RowMapper."""

    def test_maps_nested_paths(self) -> None:
        """Should read dotted paths and coerce values."""
        mapper = RowMapper()
        row = mapper.map(
            NHL_ROSTER,
            {
                "id": 8471214,
                "firstName": {"default": "Alex"},
                "lastName": {"default": "Ovechkin"},
                "positionCode": "L",
                "sweaterNumber": 8,
                "shootsCatches": "R",
                "heightInInches": 75,
                "weightInPounds": 238,
                "birthDate": "1985-09-17",
                "birthCity": {"default": "Moscow"},
                "birthCountry": "RUS",
            },
        )

        assert row["id"] == 8471214
        assert row["first_name"] == "Alex"
        assert row["birth_date"] == date(1985, 9, 17)
        assert mapper.gap_report() == {}

    def test_missing_field_is_a_gap(self) -> None:
        """Absent expected fields should default and be counted."""
        mapper = RowMapper()
        row = mapper.map(NHL_ROSTER, {"id": 1, "firstName": {"default": "A"}})

        assert row["last_name"] == "Unknown"
        assert row["jersey_number"] is None
        assert mapper.gap_report()["nhl-roster@v1:last_name"] == 1

    def test_unexpected_fields_are_not_gaps(self) -> None:
        """Optional fields absent by design should not be counted."""
        mapper = RowMapper()
        mapper.map(
            NHL_CLUB_SCHEDULE,
            {
                "id": 2024020500,
                "gameType": 2,
                "gameDate": "2024-12-20",
                "startTimeUTC": "2024-12-21T00:00:00Z",
                "homeTeam": {"id": 15},
                "awayTeam": {"id": 3},
                "gameState": "FUT",
            },
        )

        assert mapper.gap_report() == {}

    @pytest.mark.parametrize("bad", ["n/a", float("nan"), float("inf")])
    def test_unusable_counts_default_to_zero(self, bad) -> None:
        """Non-numeric and non-finite counts should become 0, never NaN."""
        mapper = RowMapper()
        row = mapper.map(NHL_BOXSCORE_SKATER, {"playerId": 1, "goals": bad})

        assert row["goals"] == 0
        assert mapper.gaps[("nhl-boxscore-skater@v1", "goals")] == 1

    def test_gap_counts_accumulate_and_reset(self) -> None:
        """Repeated gaps should accumulate until reset."""
        mapping = SourceMapping("test-source", 2, {"value": FieldSpec("v")})
        mapper = RowMapper()
        mapper.map(mapping, {})
        mapper.map(mapping, {})

        assert mapper.gap_report() == {"test-source@v2:value": 2}
        mapper.reset()
        assert mapper.gap_report() == {}

    def test_every_mapping_is_versioned(self) -> None:
        """All mappings should carry a distinct label."""
        labels = [m.label for m in ALL_MAPPINGS]

        assert len(labels) == len(set(labels))
        assert all("@v" in label for label in labels)
