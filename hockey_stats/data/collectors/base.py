"""Base collector class for upstream data collection.

Collectors fetch through the API client and translate records with the row
mapper; they never write. The pipeline decides what to persist and how.

Example:
    >>> class MyCollector(BaseCollector):
    ...     stage = "my-stage"
    ...     def collect(self, season: str) -> list[Row]:
    ...         ...
"""
from __future__ import annotations

import logging
from abc import ABC
from typing import TYPE_CHECKING, ClassVar

from hockey_stats.data.mappings import RowMapper
from hockey_stats.types import StageError

if TYPE_CHECKING:
    from hockey_stats.data.api import NHLApiClient


class BaseCollector(ABC):
    """Base class for all data collectors.

    Provides common functionality:
    - API client and row mapper injection
    - Progress logging
    - Per-item error recording

    Attributes:
        stage: Stage label used on recorded errors.
        api: NHL API client instance.
        mapper: Row mapper shared with the rest of the run.
        logger: Logger instance for this collector.
        errors: Item-level errors recorded since the last ``drain_errors``.
    """

    stage: ClassVar[str] = "collect"

    def __init__(
        self,
        api_client: NHLApiClient,
        mapper: RowMapper | None = None,
    ) -> None:
        """Initialize collector.

        Args:
            api_client: NHL API client instance.
            mapper: Row mapper; a private one is created if omitted.
        """
        self.api = api_client
        self.mapper = mapper if mapper is not None else RowMapper()
        self.logger = logging.getLogger(self.__class__.__name__)
        self.errors: list[StageError] = []

    def drain_errors(self) -> list[StageError]:
        """Return and clear the recorded item errors."""
        errors, self.errors = self.errors, []
        return errors

    def _log_progress(
        self,
        current: int,
        total: int,
        item_id: str,
    ) -> None:
        """Log collection progress every 25 items and at the end.

        Args:
            current: Current item number (1-indexed).
            total: Total number of items.
            item_id: ID of current item being processed.
        """
        if current % 25 and current != total:
            return
        pct = (current / total * 100) if total > 0 else 0
        self.logger.info(f"Progress: {current}/{total} ({pct:.1f}%) - {item_id}")

    def _handle_error(self, error: Exception, item_id: str) -> None:
        """Log an item error and record it as a StageError.

        Args:
            error: The exception that occurred.
            item_id: Key of the item that failed.
        """
        self.logger.warning(f"{self.stage} {item_id}: {error}")
        self.errors.append(
            StageError(self.stage, item_id, f"{type(error).__name__}: {error}")
        )
