"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.cases import router as cases_router
from app.api.resolution import router as resolution_router
from app.config import settings
from app.db.connection import WarehouseClient
from app.services.case_cache import CaseCache
from app.services.fetch_coordinator import FetchCoordinator
from app.services.risk_service import RiskServiceClient, TokenProvider

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    warehouse = WarehouseClient(
        settings.WAREHOUSE_DSN,
        min_size=settings.WAREHOUSE_POOL_MIN_SIZE,
        max_size=settings.WAREHOUSE_POOL_MAX_SIZE,
        command_timeout=settings.WAREHOUSE_COMMAND_TIMEOUT,
    )
    cache = CaseCache(
        ttl_seconds=settings.CASE_CACHE_TTL_SECONDS,
        refresh_threshold_seconds=settings.CASE_CACHE_REFRESH_THRESHOLD_SECONDS,
    )
    coordinator = FetchCoordinator(cache, warehouse)
    risk_client = RiskServiceClient(
        settings.RISK_API_URL,
        httpx.AsyncClient(timeout=settings.RISK_API_TIMEOUT),
        TokenProvider(settings.RISK_API_TOKEN, settings.GCLOUD_BIN),
    )

    app.state.warehouse = warehouse
    app.state.case_cache = cache
    app.state.fetch_coordinator = coordinator
    app.state.risk_client = risk_client

    coordinator.preload()
    yield
    # Shutdown
    await coordinator.aclose()
    await risk_client.aclose()
    await warehouse.close()


app = FastAPI(
    title="AML Case Review",
    description="Review queue for accounts flagged as suspicious/low priority",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cases_router)
app.include_router(resolution_router)


@app.get("/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
