"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    WAREHOUSE_DSN: str = os.getenv("WAREHOUSE_DSN", "postgresql://localhost:5432/warehouse")
    WAREHOUSE_POOL_MIN_SIZE: int = int(os.getenv("WAREHOUSE_POOL_MIN_SIZE", "1"))
    WAREHOUSE_POOL_MAX_SIZE: int = int(os.getenv("WAREHOUSE_POOL_MAX_SIZE", "5"))
    WAREHOUSE_COMMAND_TIMEOUT: float = float(os.getenv("WAREHOUSE_COMMAND_TIMEOUT", "300"))

    CASE_CACHE_TTL_SECONDS: int = int(os.getenv("CASE_CACHE_TTL_SECONDS", "1800"))  # 30 minutes
    CASE_CACHE_REFRESH_THRESHOLD_SECONDS: int = int(
        os.getenv("CASE_CACHE_REFRESH_THRESHOLD_SECONDS", "1200")
    )  # 20 minutes

    RISK_API_URL: str = os.getenv(
        "RISK_API_URL", "https://risk-api.internal/monitoring/offense_analysis"
    )
    RISK_API_TOKEN: str = os.getenv("RISK_API_TOKEN", "")
    RISK_API_TIMEOUT: float = float(os.getenv("RISK_API_TIMEOUT", "30"))
    GCLOUD_BIN: str = os.getenv("GCLOUD_BIN", "gcloud")

    CORS_ORIGINS: list[str] = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:8501").split(",") if o.strip()
    ]
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
