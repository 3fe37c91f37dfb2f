"""API request and response models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from app.schemas.aml_case import AMLCase, CaseStats, Conclusion, OffenseHistoryEntry, Priority, UserInfo


class _Envelope(BaseModel):
    """Response wrapper; cache metadata is serialized in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True


# ── Case responses ───────────────────────────────────────────────────────────


class CaseListResponse(_Envelope):
    data: list[AMLCase]
    count: int
    cached: bool
    cache_age: int
    cached_at: datetime | None = None


class CaseRefreshResponse(_Envelope):
    data: list[AMLCase]
    count: int
    refreshed_at: datetime


class CaseStatsResponse(_Envelope):
    data: CaseStats
    cached: bool
    cache_age: int


class CaseDetailResponse(_Envelope):
    data: AMLCase
    cached: bool


class UserInfoResponse(_Envelope):
    data: UserInfo


class OffenseHistoryResponse(_Envelope):
    data: list[OffenseHistoryEntry]
    count: int


# ── Resolution models ────────────────────────────────────────────────────────


class ResolutionRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    conclusion: Conclusion
    priority: Priority
    description: str = ""

    @model_validator(mode="after")
    def _suspicious_needs_priority(self) -> ResolutionRequest:
        if self.conclusion is Conclusion.SUSPICIOUS and self.priority is Priority.LOW:
            raise ValueError("suspicious conclusion cannot have low priority")
        return self


class OffenseAnalysisPayload(BaseModel):
    """Body posted to the risk service for a manual analysis."""

    user_id: int
    description: str
    analysis_type: Literal["manual"] = "manual"
    conclusion: Conclusion
    priority: Priority
    automatic_pipeline: bool = True
    offense_group: Literal["illegal_activity"] = "illegal_activity"
    offense_name: Literal["money_laundering"] = "money_laundering"
    related_analyses: list[Any] = Field(default_factory=list)


class ResolutionResponse(_Envelope):
    message: str
    data: Any = None
    removed_from_cache: bool
