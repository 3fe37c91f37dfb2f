"""Shared test fixtures."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.cases import router as cases_router
from app.api.resolution import router as resolution_router
from app.services.case_cache import CaseCache
from app.services.fetch_coordinator import FetchCoordinator


class FakeClock:
    """Manually advanced stand-in for ``time.monotonic`` or ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def make_clock():
    return FakeClock


@pytest.fixture()
def pending_rows() -> list[dict]:
    """Pending-case rows as the warehouse driver returns them, newest first."""
    return [
        {
            "user_id": 101,
            "created_at": datetime(2024, 5, 20, 14, 30, tzinfo=timezone.utc),
            "analyst": "Maria Silva",
            "days_since_creation": 12,
            "status": "active",
            "high_value": "yes",
        },
        {
            "user_id": 202,
            "created_at": {"value": "2024-05-10T09:00:00"},
            "analyst": "Joao Souza",
            "days_since_creation": 22,
            "status": "blocked",
            "high_value": "no",
        },
        {
            "user_id": 303,
            "created_at": "2024-05-01T08:15:00",
            "analyst": "Maria Silva",
            "days_since_creation": 31,
            "status": "active",
            "high_value": "no",
        },
    ]


@pytest.fixture()
def mock_warehouse(pending_rows):
    warehouse = AsyncMock()
    warehouse.run_query = AsyncMock(return_value=pending_rows)
    return warehouse


@pytest.fixture()
def case_cache(clock) -> CaseCache:
    return CaseCache(ttl_seconds=1800, refresh_threshold_seconds=1200, clock=clock)


@pytest.fixture()
def coordinator(case_cache, mock_warehouse) -> FetchCoordinator:
    return FetchCoordinator(case_cache, mock_warehouse)


@pytest.fixture()
def mock_risk():
    risk = AsyncMock()
    risk.submit = AsyncMock(return_value={"id": 9001, "status": "created"})
    return risk


@pytest.fixture()
def client(case_cache, coordinator, mock_warehouse, mock_risk) -> TestClient:
    @asynccontextmanager
    async def noop_lifespan(app: FastAPI):
        yield

    test_app = FastAPI(lifespan=noop_lifespan)
    test_app.include_router(cases_router)
    test_app.include_router(resolution_router)
    test_app.state.warehouse = mock_warehouse
    test_app.state.case_cache = case_cache
    test_app.state.fetch_coordinator = coordinator
    test_app.state.risk_client = mock_risk

    with TestClient(test_app, raise_server_exceptions=True) as c:
        yield c
