"""
Talent API endpoints

Handles the candidate-facing lifecycle commands:
- Signup profile creation
- Profile submission and summary suggestions
- Interview preparation and retakes
- Full profile completion
"""

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from talentpool.api.dependencies import (
    CurrentUser,
    get_current_talent,
    get_current_user,
    get_lifecycle,
    http_error,
)
from talentpool.core.errors import TalentPoolError
from talentpool.core.lifecycle import TalentLifecycle
from talentpool.models.profile import (
    CandidateProfile,
    FullProfileCompletion,
    ProfileSubmission,
)

router = APIRouter()

# Internal scoring bookkeeping never leaves the service
PROFILE_RESPONSE_EXCLUDE = {"pending_scoring", "processing_started_at"}


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class CreateProfileRequest(BaseModel):
    """Request model for signup profile creation."""
    email: str | None = None
    full_name: str = ""


class SummarySuggestionsRequest(BaseModel):
    headline: str = Field(..., min_length=1)


class SummarySuggestionsResponse(BaseModel):
    suggestions: list[str]


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post(
    "",
    response_model=CandidateProfile,
    response_model_exclude=PROFILE_RESPONSE_EXCLUDE,
    status_code=status.HTTP_201_CREATED,
)
async def create_profile(
    request: CreateProfileRequest,
    user: CurrentUser = Depends(get_current_user),
    lifecycle: TalentLifecycle = Depends(get_lifecycle),
) -> CandidateProfile:
    """Create the caller's user document. Talents start in `new`."""
    try:
        return await lifecycle.create_profile(
            uid=user.uid,
            email=request.email,
            role=user.role,
            full_name=request.full_name,
        )
    except TalentPoolError as e:
        raise http_error(e)


@router.get("/me", response_model=CandidateProfile, response_model_exclude=PROFILE_RESPONSE_EXCLUDE)
async def get_my_profile(
    user: CurrentUser = Depends(get_current_user),
    lifecycle: TalentLifecycle = Depends(get_lifecycle),
) -> CandidateProfile:
    try:
        return await lifecycle.get_profile(user.uid)
    except TalentPoolError as e:
        raise http_error(e)


@router.post("/profile", response_model=CandidateProfile, response_model_exclude=PROFILE_RESPONSE_EXCLUDE)
async def submit_profile(
    submission: ProfileSubmission,
    user: CurrentUser = Depends(get_current_talent),
    lifecycle: TalentLifecycle = Depends(get_lifecycle),
) -> CandidateProfile:
    """
    Save the talent profile.

    CV text, when supplied, is analyzed before the profile is saved; an
    analysis failure leaves the stored profile unchanged.
    """
    try:
        return await lifecycle.submit_profile(user.uid, submission)
    except TalentPoolError as e:
        raise http_error(e)


@router.post("/summary-suggestions", response_model=SummarySuggestionsResponse)
async def suggest_summaries(
    request: SummarySuggestionsRequest,
    user: CurrentUser = Depends(get_current_talent),
    lifecycle: TalentLifecycle = Depends(get_lifecycle),
) -> SummarySuggestionsResponse:
    try:
        suggestions = await lifecycle.suggest_summaries(request.headline)
    except TalentPoolError as e:
        raise http_error(e)
    return SummarySuggestionsResponse(suggestions=suggestions)


@router.post(
    "/interview/prepare",
    response_model=CandidateProfile,
    response_model_exclude=PROFILE_RESPONSE_EXCLUDE,
)
async def prepare_interview(
    user: CurrentUser = Depends(get_current_talent),
    lifecycle: TalentLifecycle = Depends(get_lifecycle),
) -> CandidateProfile:
    """Generate interview questions and invite the talent to interview."""
    try:
        return await lifecycle.prepare_interview(user.uid)
    except TalentPoolError as e:
        raise http_error(e)


@router.post(
    "/interview/retake",
    response_model=CandidateProfile,
    response_model_exclude=PROFILE_RESPONSE_EXCLUDE,
)
async def retake_interview(
    user: CurrentUser = Depends(get_current_talent),
    lifecycle: TalentLifecycle = Depends(get_lifecycle),
) -> CandidateProfile:
    """Start a new interview cycle once the retake cooldown has passed."""
    try:
        return await lifecycle.request_retake(user.uid)
    except TalentPoolError as e:
        raise http_error(e)


@router.post(
    "/profile/complete",
    response_model=CandidateProfile,
    response_model_exclude=PROFILE_RESPONSE_EXCLUDE,
)
async def complete_profile(
    completion: FullProfileCompletion,
    user: CurrentUser = Depends(get_current_talent),
    lifecycle: TalentLifecycle = Depends(get_lifecycle),
) -> CandidateProfile:
    try:
        return await lifecycle.complete_full_profile(user.uid, completion)
    except TalentPoolError as e:
        raise http_error(e)
