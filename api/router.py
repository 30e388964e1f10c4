"""
FastAPI Router for Content Risk Endpoints.

Provides the REST surface of the assessment core:
- Submit a draft for analysis
- Re-analyze edited content
- Analyzer health and recent incidents

Provider failures never surface as HTTP errors; they show up in
the result's status and confidence. Only malformed submissions
are rejected (422).
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from api.schemas import (
    AnalysisRequest,
    AssessmentResponse,
    HealthResponse,
    ReanalysisRequest,
)
from core.exceptions import ValidationError
from orchestrator.core import ContentRiskService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["Content Risk"])


# =============================================================
# HELPER: Get service instance
# =============================================================

def get_service(request: Request) -> ContentRiskService:
    return request.app.state.service


def _reject(error: ValidationError) -> HTTPException:
    logger.info(f"Rejected submission: {error.to_log_format()}")
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=error.to_dict(),
    )


# =============================================================
# ANALYSIS ENDPOINTS
# =============================================================

@router.post("", response_model=AssessmentResponse, status_code=status.HTTP_201_CREATED)
async def submit_analysis(
    body: AnalysisRequest,
    service: ContentRiskService = Depends(get_service),
):
    """
    Assess a draft before publication.

    Always returns a complete assessment; check `status` and
    `assessment.confidence_level` for degraded results.
    """
    try:
        result = await service.submit_for_analysis(body.to_job())
    except ValidationError as e:
        raise _reject(e)
    return AssessmentResponse.from_result(result)


@router.post(
    "/{job_id}/reanalyze",
    response_model=AssessmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def reanalyze(
    job_id: str,
    body: ReanalysisRequest,
    service: ContentRiskService = Depends(get_service),
):
    """
    Re-assess edited content.

    Runs exactly the same pipeline as a first submission; the
    previous job id is only echoed back as parent_job_id.
    """
    try:
        result = await service.reanalyze(
            body.text,
            job_id,
            platforms=body.platforms,
            audience_profile=body.audience_profile.to_profile() if body.audience_profile else None,
            content_type=body.content_type,
        )
    except ValidationError as e:
        raise _reject(e)
    return AssessmentResponse.from_result(result)


# =============================================================
# DIAGNOSTICS ENDPOINTS
# =============================================================

@router.get("/health", response_model=HealthResponse)
async def health(service: ContentRiskService = Depends(get_service)):
    """Health of every registered analyzer."""
    return await service.health_check()


@router.get("/incidents")
def incidents(
    limit: int = Query(20, ge=1, le=100),
    analyzer: Optional[str] = Query(None, description="Filter by analyzer name"),
    service: ContentRiskService = Depends(get_service),
) -> List[Dict[str, Any]]:
    """Recent analyzer failures and timeouts."""
    return service.orchestrator.get_incidents(limit=limit, analyzer_name=analyzer)
