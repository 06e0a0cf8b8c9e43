"""Fixed-interval rate limiting for upstream requests.

The backfill throttles every per-item fetch with a constant interval; the
limiter is a component so the policy can be swapped and so tests can run
with a fake clock instead of real sleeps.

Example:
    >>> limiter = FixedIntervalRateLimiter(0.3)
    >>> for game_id in game_ids:
    ...     limiter.wait()
    ...     client.get_play_by_play(game_id)
"""
from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class RateLimiter(Protocol):
    """Anything that can gate a request."""

    def wait(self) -> float:
        """Block until the next request may go out; return seconds slept."""
        ...


class FixedIntervalRateLimiter:
    """Gate that keeps at least ``interval`` seconds between calls.

    Only the remainder of the interval is slept, so time spent on the
    request itself counts toward the gap.

    Attributes:
        interval: Minimum seconds between two ``wait()`` returns.
    """

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None

    def wait(self) -> float:
        slept = 0.0
        now = self._clock()
        if self._last is not None:
            remaining = self.interval - (now - self._last)
            if remaining > 0:
                logger.debug(f"Rate limiting: sleeping {remaining:.3f}s")
                self._sleep(remaining)
                slept = remaining
                now = self._clock()
        self._last = now
        return slept

    def reset(self) -> None:
        """Forget the previous call so the next ``wait()`` is immediate."""
        self._last = None


class NullRateLimiter:
    """Limiter that never sleeps."""

    def wait(self) -> float:
        return 0.0
