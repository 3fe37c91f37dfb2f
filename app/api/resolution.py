"""Resolution API router — /api/resolution."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_case_cache, get_risk_client
from app.schemas import OffenseAnalysisPayload, ResolutionRequest, ResolutionResponse
from app.services.case_cache import CaseCache
from app.services.risk_service import RiskServiceClient, SubmissionError, TokenError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resolution", tags=["resolution"])


@router.post("", response_model=ResolutionResponse)
async def send_resolution(
    body: ResolutionRequest,
    risk: RiskServiceClient = Depends(get_risk_client),
    cache: CaseCache = Depends(get_case_cache),
):
    """Record the analyst's resolution with the risk service.

    The case leaves the cached list only once the risk service accepts it.
    """
    logger.info(
        "Sending resolution for user %s: %s (priority: %s)",
        body.user_id,
        body.conclusion.value,
        body.priority.value,
    )
    payload = OffenseAnalysisPayload(
        user_id=body.user_id,
        description=body.description,
        conclusion=body.conclusion,
        priority=body.priority,
    )

    try:
        result = await risk.submit(payload)
    except TokenError as exc:
        raise HTTPException(
            status_code=500,
            detail={"success": False, "error": "Failed to send resolution", "message": str(exc)},
        ) from exc
    except SubmissionError as exc:
        raise HTTPException(
            status_code=exc.status_code,
            detail={
                "success": False,
                "error": "Failed to send resolution to Risk API",
                "details": exc.body,
            },
        ) from exc

    logger.info("Resolution sent successfully for user %s", body.user_id)
    removed = cache.remove(body.user_id)

    return ResolutionResponse(
        message="Resolution sent successfully",
        data=result,
        removed_from_cache=removed,
    )
