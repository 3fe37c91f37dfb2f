"""Schema re-exports for convenient imports."""

from app.schemas.aml_case import (
    AMLCase,
    CaseStats,
    Conclusion,
    OffenseHistoryEntry,
    Priority,
    UserInfo,
)
from app.schemas.api_models import (
    CaseDetailResponse,
    CaseListResponse,
    CaseRefreshResponse,
    CaseStatsResponse,
    OffenseAnalysisPayload,
    OffenseHistoryResponse,
    ResolutionRequest,
    ResolutionResponse,
    UserInfoResponse,
)

__all__ = [
    "AMLCase",
    "CaseDetailResponse",
    "CaseListResponse",
    "CaseRefreshResponse",
    "CaseStats",
    "CaseStatsResponse",
    "Conclusion",
    "OffenseAnalysisPayload",
    "OffenseHistoryEntry",
    "OffenseHistoryResponse",
    "Priority",
    "ResolutionRequest",
    "ResolutionResponse",
    "UserInfo",
    "UserInfoResponse",
]
