"""
Report API endpoints

Handles:
- Interview report retrieval for the talent and for recruiters
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from talentpool.api.dependencies import (
    CurrentUser,
    get_current_user,
    get_lifecycle,
    http_error,
)
from talentpool.core.errors import TalentPoolError
from talentpool.core.lifecycle import TalentLifecycle
from talentpool.models.profile import UserRole
from talentpool.models.report import ErrorReport, parse_report_payload

router = APIRouter()


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class CategoryScoreResponse(BaseModel):
    category: str
    score: int
    comment: str


class ReportResponse(BaseModel):
    """
    Interview report.

    Error reports carry `is_error = true` and the error message only; they
    have no score breakdown.
    """
    talent_id: str
    talent_status: str
    talent_tier: str | None = None
    talent_tier_display: str | None = None
    next_interview_eligible_date: datetime | None = None
    is_error: bool = False
    error: str | None = None

    weighted_total_score: int | None = None
    category_scores: list[CategoryScoreResponse] = []
    strengths: list[str] = []
    areas_for_improvement: list[str] = []
    final_assessment: str | None = None


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/{talent_id}", response_model=ReportResponse)
async def get_report(
    talent_id: str,
    user: CurrentUser = Depends(get_current_user),
    lifecycle: TalentLifecycle = Depends(get_lifecycle),
) -> ReportResponse:
    """Get a talent's interview report. Talents may read only their own."""
    if user.role != UserRole.RECRUITER and user.uid != talent_id:
        raise HTTPException(status_code=403, detail="Not allowed to view this report")

    try:
        profile = await lifecycle.get_talent(talent_id)
    except TalentPoolError as e:
        raise http_error(e)

    report = parse_report_payload(profile.interview_report_summary)
    if report is None:
        status_value = profile.talent_status.value if profile.talent_status else "new"
        raise HTTPException(status_code=404, detail=f"Report not available (status: {status_value})")

    response = ReportResponse(
        talent_id=profile.uid,
        talent_status=profile.talent_status.value,
        talent_tier=profile.talent_tier.value if profile.talent_tier else None,
        talent_tier_display=profile.talent_tier.display_text if profile.talent_tier else None,
        next_interview_eligible_date=profile.next_interview_eligible_date,
    )

    if isinstance(report, ErrorReport):
        response.is_error = True
        response.error = report.error
        return response

    response.weighted_total_score = profile.weighted_total_score
    response.category_scores = [
        CategoryScoreResponse(category=cs.category, score=cs.score, comment=cs.comment)
        for cs in report.category_scores
    ]
    response.strengths = report.strengths
    response.areas_for_improvement = report.areas_for_improvement
    response.final_assessment = report.final_assessment
    return response
