"""HTTP client for the NHL web/stats APIs and MoneyPuck CSV files.

Every public getter treats failure as "no data": network errors, timeouts,
non-2xx responses and malformed bodies are logged and turned into ``None``
(JSON objects) or an empty list (collections, CSV rows). Callers decide
whether no data means fallback, a recorded stage error, or nothing at all.

Example:
    >>> from hockey_stats.data.api import NHLApiClient
    >>> client = NHLApiClient(delay=0.05)
    >>> standings = client.get_standings()
    >>> boxscore = client.get_boxscore(2024020500)
"""
from __future__ import annotations

import io
import logging
from typing import Any

import pandas as pd
import requests
from requests.exceptions import RequestException, Timeout

from hockey_stats.config import get_settings
from hockey_stats.data.ratelimit import FixedIntervalRateLimiter, RateLimiter
from hockey_stats.types import FetchError, GameId, SeasonId

logger = logging.getLogger(__name__)


# =============================================================================
# Status Code Constants
# =============================================================================

RETRIABLE_STATUS_CODES = {429, 500, 502, 503, 504}

USER_AGENT = "hockey-stats-backfill/0.1"

REGULAR_SEASON = 2
PLAYOFFS = 3


# =============================================================================
# CSV Parsing
# =============================================================================


def parse_csv(text: str | None) -> list[dict[str, str | None]]:
    """Parse CSV text into row dicts of raw strings.

    Every cell is kept as text (numeric coercion belongs to the row mapper),
    blank cells become None, header names lose stray quotes and whitespace,
    and lines with too many fields are skipped rather than failing the file.

    Args:
        text: Raw CSV body.

    Returns:
        One dict per data row, or an empty list when nothing parses.
    """
    if not text or not text.strip():
        return []
    try:
        frame = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            na_values=[""],
            skipinitialspace=True,
            skip_blank_lines=True,
            on_bad_lines="skip",
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        logger.warning(f"Unparsable CSV body: {e}")
        return []

    frame.columns = [str(c).strip().strip('"') for c in frame.columns]
    frame = frame.astype(object).where(frame.notna(), None)
    return frame.to_dict(orient="records")


def season_start_year(season: SeasonId) -> int:
    """First calendar year of an eight digit season id ("20232024" -> 2023)."""
    return int(season[:4])


# =============================================================================
# NHL API Client
# =============================================================================


class NHLApiClient:
    """Client for the public NHL endpoints and MoneyPuck downloads.

    Provides:
    - Fixed-interval rate limiting before every request
    - Bounded retries for 429/5xx and timeouts (same fixed interval)
    - "No data" results instead of exceptions

    Attributes:
        nhl_api_base: NHL web API base URL.
        stats_api_base: NHL stats REST API base URL.
        moneypuck_base: MoneyPuck CSV base URL.
        timeout: Request timeout in seconds.
        max_retries: Extra attempts for retriable failures.
    """

    def __init__(
        self,
        delay: float | None = None,
        max_retries: int | None = None,
        timeout: float | None = None,
        nhl_api_base: str | None = None,
        stats_api_base: str | None = None,
        moneypuck_base: str | None = None,
        rate_limiter: RateLimiter | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize API client.

        Args:
            delay: Seconds between requests (default from settings); ignored
                when ``rate_limiter`` is given.
            max_retries: Retry attempts (default from settings).
            timeout: Request timeout in seconds (default from settings).
            nhl_api_base: Override for the NHL web API base URL.
            stats_api_base: Override for the NHL stats API base URL.
            moneypuck_base: Override for the MoneyPuck base URL.
            rate_limiter: Gate applied before each request.
            session: requests session to reuse (a new one by default).
        """
        settings = get_settings()
        self.nhl_api_base = (nhl_api_base or settings.nhl_api_base).rstrip("/")
        self.stats_api_base = (
            stats_api_base or settings.nhl_stats_api_base
        ).rstrip("/")
        self.moneypuck_base = (moneypuck_base or settings.moneypuck_base).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.api_timeout
        self.max_retries = (
            max_retries if max_retries is not None else settings.api_max_retries
        )
        self.rate_limiter = rate_limiter or FixedIntervalRateLimiter(
            delay if delay is not None else settings.api_delay
        )
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)

        logger.debug(
            f"NHLApiClient initialized: max_retries={self.max_retries}, "
            f"timeout={self.timeout}s"
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> NHLApiClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _request(self, url: str, params: dict[str, Any] | None = None) -> requests.Response:
        """GET ``url`` with rate limiting and bounded retries.

        Raises:
            FetchError: On any failure once retries are exhausted.
        """
        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            self.rate_limiter.wait()
            try:
                response = self.session.get(url, params=params, timeout=self.timeout)
            except Timeout as e:
                last_error = e
                logger.warning(
                    f"Request timeout for {url} "
                    f"(attempt {attempt + 1}/{self.max_retries + 1})"
                )
                continue
            except RequestException as e:
                raise FetchError(f"{url}: {e}") from e

            if response.status_code in RETRIABLE_STATUS_CODES:
                last_error = FetchError(f"{url}: HTTP {response.status_code}")
                logger.warning(
                    f"HTTP {response.status_code} for {url} "
                    f"(attempt {attempt + 1}/{self.max_retries + 1})"
                )
                continue
            if not response.ok:
                raise FetchError(f"{url}: HTTP {response.status_code}")
            return response

        raise FetchError(f"{url}: retries exhausted ({last_error})")

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        """Fetch a JSON object.

        Args:
            url: Absolute URL.
            params: Optional query parameters.

        Returns:
            Decoded object, or None on any failure or non-object body.
        """
        try:
            body = self._request(url, params).json()
        except FetchError as e:
            logger.warning(f"Fetch failed: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Malformed JSON from {url}: {e}")
            return None

        if not isinstance(body, dict):
            logger.warning(f"Unexpected JSON body type from {url}: {type(body).__name__}")
            return None
        return body

    def get_csv(self, url: str) -> list[dict[str, str | None]]:
        """Fetch and parse a CSV file.

        Returns:
            Row dicts, or an empty list on any failure.
        """
        try:
            text = self._request(url).text
        except FetchError as e:
            logger.warning(f"Fetch failed: {e}")
            return []
        return parse_csv(text)

    def _get_list(self, url: str, *keys: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        body = self.get_json(url, params)
        if body is None:
            return []
        items: list[dict[str, Any]] = []
        for key in keys:
            value = body.get(key)
            if isinstance(value, list):
                items.extend(v for v in value if isinstance(v, dict))
        return items

    # -------------------------------------------------------------------------
    # NHL web API
    # -------------------------------------------------------------------------

    def get_standings(self) -> list[dict[str, Any]]:
        """Current league standings, one record per team."""
        return self._get_list(f"{self.nhl_api_base}/standings/now", "standings")

    def get_team_roster(self, abbrev: str, season: SeasonId) -> list[dict[str, Any]]:
        """Forwards, defensemen and goalies of a team for a season."""
        return self._get_list(
            f"{self.nhl_api_base}/roster/{abbrev}/{season}",
            "forwards",
            "defensemen",
            "goalies",
        )

    def get_team_schedule(self, abbrev: str, season: SeasonId) -> list[dict[str, Any]]:
        """All games of a team's season schedule (every game type)."""
        return self._get_list(
            f"{self.nhl_api_base}/club-schedule-season/{abbrev}/{season}", "games"
        )

    def get_boxscore(self, game_id: GameId) -> dict[str, Any] | None:
        return self.get_json(f"{self.nhl_api_base}/gamecenter/{game_id}/boxscore")

    def get_play_by_play(self, game_id: GameId) -> dict[str, Any] | None:
        return self.get_json(f"{self.nhl_api_base}/gamecenter/{game_id}/play-by-play")

    # -------------------------------------------------------------------------
    # NHL stats API
    # -------------------------------------------------------------------------

    def _summary(self, kind: str, season: SeasonId, game_type: int, limit: int) -> list[dict[str, Any]]:
        return self._get_list(
            f"{self.stats_api_base}/{kind}/summary",
            "data",
            params={
                "limit": limit,
                "cayenneExp": f"seasonId={season} and gameTypeId={game_type}",
            },
        )

    def get_skater_summary(
        self, season: SeasonId, game_type: int = REGULAR_SEASON
    ) -> list[dict[str, Any]]:
        """League-wide skater season summaries."""
        return self._summary("skater", season, game_type, limit=1000)

    def get_goalie_summary(
        self, season: SeasonId, game_type: int = REGULAR_SEASON
    ) -> list[dict[str, Any]]:
        """League-wide goalie season summaries."""
        return self._summary("goalie", season, game_type, limit=200)

    # -------------------------------------------------------------------------
    # MoneyPuck
    # -------------------------------------------------------------------------

    def get_moneypuck_teams(self, season: SeasonId) -> list[dict[str, str | None]]:
        """Regular season team summary rows (all situations)."""
        year = season_start_year(season)
        return self.get_csv(f"{self.moneypuck_base}/seasonSummary/{year}/regular/teams.csv")

    def get_moneypuck_skaters(self, season: SeasonId) -> list[dict[str, str | None]]:
        """Regular season skater summary rows (all situations)."""
        year = season_start_year(season)
        return self.get_csv(
            f"{self.moneypuck_base}/seasonSummary/{year}/regular/skaters.csv"
        )
