"""In-process snapshot cache for the pending-case collection."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable

from app.schemas.aml_case import AMLCase

logger = logging.getLogger(__name__)

CASE_CACHE_TTL_SECONDS = 30 * 60
CASE_CACHE_REFRESH_THRESHOLD_SECONDS = 20 * 60


class CaseCache:
    """Holds the single cached snapshot of pending cases.

    The snapshot is replaced wholesale on every successful fetch and pruned
    one case at a time when a resolution is accepted. No method awaits, so
    under asyncio a reader never observes a half-installed snapshot.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = CASE_CACHE_TTL_SECONDS,
        refresh_threshold_seconds: float = CASE_CACHE_REFRESH_THRESHOLD_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.refresh_threshold_seconds = refresh_threshold_seconds
        self._clock = clock
        self._wall_clock = wall_clock
        self._data: tuple[AMLCase, ...] | None = None
        # Age is measured on ``clock``; ``_fetched_wall`` is only for display.
        self._fetched_at: float | None = None
        self._fetched_wall: float | None = None

    # ── Staleness ─────────────────────────────────────────────────────────

    @property
    def has_snapshot(self) -> bool:
        return self._data is not None

    def _elapsed(self) -> float:
        if self._fetched_at is None:
            return 0.0
        return self._clock() - self._fetched_at

    def is_valid(self) -> bool:
        """Whether the snapshot may be served without touching the warehouse."""
        return self.has_snapshot and self._elapsed() < self.ttl_seconds

    def is_stale(self) -> bool:
        """Whether a still-servable snapshot is due for a background refresh."""
        return self.has_snapshot and self._elapsed() > self.refresh_threshold_seconds

    def age(self) -> int:
        """Seconds since the last full fetch, 0 when nothing has been fetched."""
        return int(self._elapsed())

    @property
    def fetched_at(self) -> datetime | None:
        if self._fetched_wall is None:
            return None
        return datetime.fromtimestamp(self._fetched_wall, tz=timezone.utc)

    # ── Contents ──────────────────────────────────────────────────────────

    def snapshot(self) -> list[AMLCase] | None:
        if self._data is None:
            return None
        return list(self._data)

    def replace(self, cases: list[AMLCase]) -> None:
        self._data = tuple(cases)
        self._fetched_at = self._clock()
        self._fetched_wall = self._wall_clock()

    def remove(self, user_id: int) -> bool:
        """Drop one case from the snapshot. ``fetched_at`` is left untouched."""
        if self._data is None:
            return False
        remaining = tuple(c for c in self._data if c.user_id != user_id)
        removed = len(remaining) < len(self._data)
        if removed:
            self._data = remaining
            logger.info("Case %s removed from cache. Remaining: %d cases", user_id, len(remaining))
        return removed

    def lookup(self, user_id: int) -> AMLCase | None:
        if self._data is None:
            return None
        for case in self._data:
            if case.user_id == user_id:
                return case
        return None
