"""Pydantic models for flagged AML cases and their supporting detail."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict


# ── Enums ──────────────────────────────────────────────────────────────────────

class Conclusion(str, Enum):
    NORMAL = "normal"
    SUSPICIOUS = "suspicious"


class Priority(str, Enum):
    LOW = "low"
    MID = "mid"
    HIGH = "high"


HighValue = Literal["yes", "no"]


# ── Case ───────────────────────────────────────────────────────────────────────

class AMLCase(BaseModel):
    """One flagged account pending analyst resolution.

    ``days_since_creation`` is computed by the warehouse when the row is
    fetched and is not recomputed while the row sits in the cache.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    created_at: str
    analyst: str | None = None
    days_since_creation: int
    status: str | None = None
    high_value: HighValue
    resolution_status: Literal["pending"] = "pending"


class CaseStats(BaseModel):
    total: int
    pending: int
    in_review: int = 0
    resolved: int = 0
    high_value_count: int
    avg_days_pending: int


# ── Detail ─────────────────────────────────────────────────────────────────────

class UserInfo(BaseModel):
    user_id: int
    name: str | None = None
    merchant_name: str | None = None
    email: str | None = None
    age: int | None = None
    status: str | None = None
    status_reason: str | None = None
    role_type: str | None = None
    business_category: str | None = None
    document_number: str | None = None
    cardholder_created_at: str | None = None
    merchant_created_at: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None


class OffenseHistoryEntry(BaseModel):
    offense_date: str
    conclusion: str | None = None
    priority: str | None = None
    description: str | None = None
    analyst: str | None = None
    offense_name: str | None = None
