"""Hardcoded snapshot used when live fetches return nothing.

The snapshot covers the league's 32 clubs, the Capitals roster, five
recent Capitals games and the team box scores of one of them. Rows are
handed out as fresh dicts in exactly the shape the row mapper produces, so
downstream stages cannot tell fallback data from live data.

Example:
    >>> provider = FallbackDataProvider()
    >>> len(provider.teams())
    32
    >>> provider.roster()[0]["last_name"]
    'Ovechkin'
"""
from __future__ import annotations

from datetime import date

from hockey_stats.types import Row, SeasonId

SNAPSHOT_VERSION = "2024-12"

CAPITALS_TEAM_ID = 15

# =============================================================================
# Teams
# =============================================================================

TEAM_DATA: dict[int, dict[str, str]] = {
    1: {"name": "New Jersey Devils", "abbreviation": "NJD", "city": "New Jersey", "division": "Metropolitan", "conference": "Eastern"},
    2: {"name": "New York Islanders", "abbreviation": "NYI", "city": "New York", "division": "Metropolitan", "conference": "Eastern"},
    3: {"name": "New York Rangers", "abbreviation": "NYR", "city": "New York", "division": "Metropolitan", "conference": "Eastern"},
    4: {"name": "Philadelphia Flyers", "abbreviation": "PHI", "city": "Philadelphia", "division": "Metropolitan", "conference": "Eastern"},
    5: {"name": "Pittsburgh Penguins", "abbreviation": "PIT", "city": "Pittsburgh", "division": "Metropolitan", "conference": "Eastern"},
    6: {"name": "Boston Bruins", "abbreviation": "BOS", "city": "Boston", "division": "Atlantic", "conference": "Eastern"},
    7: {"name": "Buffalo Sabres", "abbreviation": "BUF", "city": "Buffalo", "division": "Atlantic", "conference": "Eastern"},
    8: {"name": "Montreal Canadiens", "abbreviation": "MTL", "city": "Montreal", "division": "Atlantic", "conference": "Eastern"},
    9: {"name": "Ottawa Senators", "abbreviation": "OTT", "city": "Ottawa", "division": "Atlantic", "conference": "Eastern"},
    10: {"name": "Toronto Maple Leafs", "abbreviation": "TOR", "city": "Toronto", "division": "Atlantic", "conference": "Eastern"},
    12: {"name": "Carolina Hurricanes", "abbreviation": "CAR", "city": "Carolina", "division": "Metropolitan", "conference": "Eastern"},
    13: {"name": "Florida Panthers", "abbreviation": "FLA", "city": "Florida", "division": "Atlantic", "conference": "Eastern"},
    14: {"name": "Tampa Bay Lightning", "abbreviation": "TBL", "city": "Tampa Bay", "division": "Atlantic", "conference": "Eastern"},
    15: {"name": "Washington Capitals", "abbreviation": "WSH", "city": "Washington", "division": "Metropolitan", "conference": "Eastern"},
    16: {"name": "Chicago Blackhawks", "abbreviation": "CHI", "city": "Chicago", "division": "Central", "conference": "Western"},
    17: {"name": "Detroit Red Wings", "abbreviation": "DET", "city": "Detroit", "division": "Atlantic", "conference": "Eastern"},
    18: {"name": "Nashville Predators", "abbreviation": "NSH", "city": "Nashville", "division": "Central", "conference": "Western"},
    19: {"name": "St. Louis Blues", "abbreviation": "STL", "city": "St. Louis", "division": "Central", "conference": "Western"},
    20: {"name": "Calgary Flames", "abbreviation": "CGY", "city": "Calgary", "division": "Pacific", "conference": "Western"},
    21: {"name": "Colorado Avalanche", "abbreviation": "COL", "city": "Colorado", "division": "Central", "conference": "Western"},
    22: {"name": "Edmonton Oilers", "abbreviation": "EDM", "city": "Edmonton", "division": "Pacific", "conference": "Western"},
    23: {"name": "Vancouver Canucks", "abbreviation": "VAN", "city": "Vancouver", "division": "Pacific", "conference": "Western"},
    24: {"name": "Anaheim Ducks", "abbreviation": "ANA", "city": "Anaheim", "division": "Pacific", "conference": "Western"},
    25: {"name": "Dallas Stars", "abbreviation": "DAL", "city": "Dallas", "division": "Central", "conference": "Western"},
    26: {"name": "Los Angeles Kings", "abbreviation": "LAK", "city": "Los Angeles", "division": "Pacific", "conference": "Western"},
    27: {"name": "San Jose Sharks", "abbreviation": "SJS", "city": "San Jose", "division": "Pacific", "conference": "Western"},
    28: {"name": "Columbus Blue Jackets", "abbreviation": "CBJ", "city": "Columbus", "division": "Metropolitan", "conference": "Eastern"},
    29: {"name": "Minnesota Wild", "abbreviation": "MIN", "city": "Minnesota", "division": "Central", "conference": "Western"},
    30: {"name": "Winnipeg Jets", "abbreviation": "WPG", "city": "Winnipeg", "division": "Central", "conference": "Western"},
    53: {"name": "Arizona Coyotes", "abbreviation": "ARI", "city": "Arizona", "division": "Central", "conference": "Western"},
    54: {"name": "Vegas Golden Knights", "abbreviation": "VGK", "city": "Las Vegas", "division": "Pacific", "conference": "Western"},
    55: {"name": "Seattle Kraken", "abbreviation": "SEA", "city": "Seattle", "division": "Pacific", "conference": "Western"},
}

# =============================================================================
# Capitals roster
# =============================================================================

# (id, first, last, position, jersey)
CAPITALS_ROSTER: list[tuple[int, str, str, str, int]] = [
    (8471214, "Alexander", "Ovechkin", "LW", 8),
    (8470638, "Nicklas", "Backstrom", "C", 19),
    (8476453, "John", "Carlson", "D", 74),
    (8476872, "T.J.", "Oshie", "RW", 77),
    (8477493, "Evgeny", "Kuznetsov", "C", 92),
    (8477998, "Tom", "Wilson", "RW", 43),
    (8478402, "Charlie", "Lindgren", "G", 79),
    (8480817, "Dylan", "Strome", "C", 17),
    (8481522, "Anthony", "Mantha", "RW", 39),
    (8482073, "Connor", "McMichael", "C", 24),
]

# =============================================================================
# Sample games
# =============================================================================

# (id, home, away, home score, away score, date, venue)
SAMPLE_GAMES: list[tuple[int, int, int, int, int, date, str]] = [
    (2024020500, 15, 3, 4, 2, date(2024, 12, 20), "Capital One Arena"),
    (2024020501, 6, 15, 3, 1, date(2024, 12, 18), "TD Garden"),
    (2024020502, 15, 5, 2, 3, date(2024, 12, 15), "Capital One Arena"),
    (2024020503, 13, 15, 1, 4, date(2024, 12, 12), "FLA Live Arena"),
    (2024020504, 15, 14, 5, 2, date(2024, 12, 10), "Capital One Arena"),
]

# (game id, team id, is_home, goals, shots, hits)
SAMPLE_TEAM_GAME_STATS: list[tuple[int, int, bool, int, int, int]] = [
    (2024020500, 15, True, 4, 32, 18),
    (2024020500, 3, False, 2, 28, 22),
]


class FallbackDataProvider:
    """Serves the snapshot as row dicts.

    Attributes:
        version: Snapshot version label, recorded in reports.
        focus_team_id: Team whose roster is part of the snapshot.
    """

    version = SNAPSHOT_VERSION
    focus_team_id = CAPITALS_TEAM_ID

    def teams(self) -> list[Row]:
        return [{"id": team_id, **data} for team_id, data in TEAM_DATA.items()]

    def team_ids(self) -> set[int]:
        return set(TEAM_DATA)

    def roster(self) -> list[Row]:
        return [
            {
                "id": player_id,
                "team_id": self.focus_team_id,
                "first_name": first,
                "last_name": last,
                "position": position,
                "jersey_number": jersey,
            }
            for player_id, first, last, position, jersey in CAPITALS_ROSTER
        ]

    def sample_games(self, season: SeasonId) -> list[Row]:
        """Sample games labelled with the requested season.

        Args:
            season: Season the run is populating; the snapshot is stamped
                with it so season-scoped stages can find the games.
        """
        return [
            {
                "id": game_id,
                "season": season,
                "game_type": "02",
                "game_date": game_date,
                "start_time_utc": None,
                "home_team_id": home,
                "away_team_id": away,
                "home_score": home_score,
                "away_score": away_score,
                "period": 3,
                "game_state": "Final",
                "venue": venue,
            }
            for game_id, home, away, home_score, away_score, game_date, venue in SAMPLE_GAMES
        ]

    def sample_team_game_stats(self) -> list[Row]:
        return [
            {
                "game_id": game_id,
                "team_id": team_id,
                "is_home": is_home,
                "goals": goals,
                "shots": shots,
                "hits": hits,
            }
            for game_id, team_id, is_home, goals, shots, hits in SAMPLE_TEAM_GAME_STATS
        ]
