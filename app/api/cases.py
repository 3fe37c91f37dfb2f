"""Cases API router — /api/cases."""

from __future__ import annotations

import logging
import math
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_case_cache, get_fetch_coordinator, get_warehouse
from app.db import queries
from app.db.connection import WarehouseClient, WarehouseError
from app.schemas import (
    AMLCase,
    CaseDetailResponse,
    CaseListResponse,
    CaseRefreshResponse,
    CaseStats,
    CaseStatsResponse,
    OffenseHistoryResponse,
    UserInfoResponse,
)
from app.services.case_cache import CaseCache
from app.services.fetch_coordinator import FetchCoordinator
from app.services.mappers import row_to_offense_entry, row_to_user_info

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cases", tags=["cases"])


def _fetch_failed(error: str, exc: Exception) -> HTTPException:
    return HTTPException(
        status_code=500,
        detail={"success": False, "error": error, "message": str(exc)},
    )


def compute_stats(cases: list[AMLCase]) -> CaseStats:
    total = len(cases)
    avg_days = 0
    if total:
        # Half-up rounding; ages are never negative.
        avg_days = math.floor(sum(c.days_since_creation for c in cases) / total + 0.5)
    return CaseStats(
        total=total,
        pending=total,
        in_review=0,
        resolved=0,
        high_value_count=sum(1 for c in cases if c.high_value == "yes"),
        avg_days_pending=avg_days,
    )


# ── Collection ─────────────────────────────────────────────────────────────────

@router.get("", response_model=CaseListResponse)
async def list_cases(
    refresh: bool = False,
    coordinator: FetchCoordinator = Depends(get_fetch_coordinator),
    cache: CaseCache = Depends(get_case_cache),
):
    try:
        cases, from_cache = await coordinator.read_cases(force_refresh=refresh)
    except WarehouseError as exc:
        logger.error("Error fetching cases: %s", exc)
        raise _fetch_failed("Failed to fetch cases", exc) from exc

    return CaseListResponse(
        data=cases,
        count=len(cases),
        cached=from_cache,
        cache_age=cache.age(),
        cached_at=cache.fetched_at,
    )


@router.post("/refresh", response_model=CaseRefreshResponse)
async def refresh_cases(coordinator: FetchCoordinator = Depends(get_fetch_coordinator)):
    try:
        cases = await coordinator.fetch_and_install()
    except WarehouseError as exc:
        logger.error("Error refreshing cases: %s", exc)
        raise _fetch_failed("Failed to refresh cases", exc) from exc

    return CaseRefreshResponse(
        data=cases,
        count=len(cases),
        refreshed_at=datetime.now(timezone.utc),
    )


@router.get("/stats", response_model=CaseStatsResponse)
async def case_stats(
    refresh: bool = False,
    coordinator: FetchCoordinator = Depends(get_fetch_coordinator),
    cache: CaseCache = Depends(get_case_cache),
):
    try:
        cases, _ = await coordinator.read_cases(force_refresh=refresh)
    except WarehouseError as exc:
        logger.error("Error fetching stats: %s", exc)
        raise _fetch_failed("Failed to fetch stats", exc) from exc

    return CaseStatsResponse(
        data=compute_stats(cases),
        cached=cache.is_valid(),
        cache_age=cache.age(),
    )


# ── Single case ────────────────────────────────────────────────────────────────

@router.get("/{user_id}", response_model=CaseDetailResponse)
async def get_case(
    user_id: int,
    coordinator: FetchCoordinator = Depends(get_fetch_coordinator),
):
    try:
        case, from_cache = await coordinator.read_case(user_id)
    except WarehouseError as exc:
        logger.error("Error fetching case %s: %s", user_id, exc)
        raise _fetch_failed("Failed to fetch case", exc) from exc

    if case is None:
        raise HTTPException(status_code=404, detail={"success": False, "error": "Case not found"})
    return CaseDetailResponse(data=case, cached=from_cache)


@router.get("/{user_id}/user-info", response_model=UserInfoResponse)
async def get_user_info(
    user_id: int,
    warehouse: WarehouseClient = Depends(get_warehouse),
):
    logger.info("Fetching user info for %s...", user_id)
    started = time.perf_counter()
    try:
        row = await queries.fetch_user_info(warehouse, user_id)
    except WarehouseError as exc:
        logger.error("Error fetching user info: %s", exc)
        raise _fetch_failed("Failed to fetch user info", exc) from exc
    logger.info("User info query completed in %.0fms", (time.perf_counter() - started) * 1000)

    if row is None:
        raise HTTPException(status_code=404, detail={"success": False, "error": "User not found"})
    return UserInfoResponse(data=row_to_user_info(row))


@router.get("/{user_id}/offense-history", response_model=OffenseHistoryResponse)
async def get_offense_history(
    user_id: int,
    warehouse: WarehouseClient = Depends(get_warehouse),
):
    logger.info("Fetching offense history for %s...", user_id)
    started = time.perf_counter()
    try:
        rows = await queries.fetch_offense_history(warehouse, user_id)
    except WarehouseError as exc:
        logger.error("Error fetching offense history: %s", exc)
        raise _fetch_failed("Failed to fetch offense history", exc) from exc
    logger.info(
        "Offense history query completed in %.0fms - %d records",
        (time.perf_counter() - started) * 1000,
        len(rows),
    )

    history = [row_to_offense_entry(r) for r in rows]
    return OffenseHistoryResponse(data=history, count=len(history))
