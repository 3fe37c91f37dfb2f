"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from app.db.connection import WarehouseClient
from app.services.case_cache import CaseCache
from app.services.fetch_coordinator import FetchCoordinator
from app.services.risk_service import RiskServiceClient


async def get_warehouse(request: Request) -> WarehouseClient:
    return request.app.state.warehouse


async def get_case_cache(request: Request) -> CaseCache:
    return request.app.state.case_cache


async def get_fetch_coordinator(request: Request) -> FetchCoordinator:
    return request.app.state.fetch_coordinator


async def get_risk_client(request: Request) -> RiskServiceClient:
    return request.app.state.risk_client
