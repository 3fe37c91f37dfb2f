"""Fetches the pending-case collection and keeps the cache populated."""

from __future__ import annotations

import asyncio
import logging
import time

from pydantic import ValidationError

from app.db import queries
from app.db.connection import WarehouseClient, WarehouseError
from app.schemas.aml_case import AMLCase
from app.services.case_cache import CaseCache
from app.services.mappers import row_to_case

logger = logging.getLogger(__name__)


class FetchCoordinator:
    """Runs the expensive pending-cases query and installs its result.

    Background refreshes go through a single task slot: while one refresh
    is in flight any further trigger is dropped, not queued.
    """

    def __init__(self, cache: CaseCache, warehouse: WarehouseClient) -> None:
        self.cache = cache
        self.warehouse = warehouse
        self._refresh_task: asyncio.Task | None = None

    @property
    def refreshing(self) -> bool:
        return self._refresh_task is not None

    async def fetch_and_install(self) -> list[AMLCase]:
        logger.info("Fetching cases from warehouse...")
        started = time.perf_counter()

        rows = await queries.fetch_pending_cases(self.warehouse)
        try:
            cases = [row_to_case(row) for row in rows]
        except (KeyError, ValidationError) as exc:
            raise WarehouseError(f"Malformed pending-case row: {exc}") from exc

        duration_ms = (time.perf_counter() - started) * 1000
        logger.info("Query completed in %.0fms - %d cases", duration_ms, len(cases))

        self.cache.replace(cases)
        return cases

    def trigger_background_refresh(self) -> asyncio.Task | None:
        """Start a refresh without waiting for it; no-op if one is running."""
        if self._refresh_task is not None:
            return None
        logger.info("Starting background refresh...")
        self._refresh_task = asyncio.create_task(self._background_refresh())
        return self._refresh_task

    async def _background_refresh(self) -> None:
        try:
            await self.fetch_and_install()
            logger.info("Background refresh completed")
        except Exception:
            logger.error("Background refresh failed", exc_info=True)
        finally:
            self._refresh_task = None

    def preload(self) -> asyncio.Task | None:
        logger.info("Preloading cases cache...")
        return self.trigger_background_refresh()

    async def aclose(self) -> None:
        task = self._refresh_task
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        finally:
            self._refresh_task = None

    # ── Read path ─────────────────────────────────────────────────────────

    async def read_cases(self, *, force_refresh: bool = False) -> tuple[list[AMLCase], bool]:
        """Return ``(cases, from_cache)`` for a collection read.

        A valid snapshot is served as-is; if it is also stale a background
        refresh is kicked off first. Anything else blocks on a fetch, and a
        failure of that fetch propagates to the caller.
        """
        if not force_refresh and self.cache.is_valid():
            cases = self.cache.snapshot() or []
            logger.info("Returning %d cached cases (age: %ds)", len(cases), self.cache.age())
            if self.cache.is_stale():
                self.trigger_background_refresh()
            return cases, True
        return await self.fetch_and_install(), False

    async def read_case(self, user_id: int) -> tuple[AMLCase | None, bool]:
        """Return ``(case, from_cache)``; ``case`` is ``None`` when not found.

        A miss runs a query scoped to ``user_id`` and leaves the cached
        collection untouched.
        """
        if self.cache.is_valid():
            cached = self.cache.lookup(user_id)
            if cached is not None:
                logger.info("Returning cached case %s", user_id)
                return cached, True

        row = await queries.fetch_case_by_user_id(self.warehouse, user_id)
        if row is None:
            return None, False
        return row_to_case(row), False
