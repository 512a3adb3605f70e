"""
Marketplace API endpoints

Handles the recruiter-side talent listing with keyword, location,
experience, rate and availability filters.
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from talentpool.api.dependencies import (
    CurrentUser,
    get_current_recruiter,
    get_lifecycle,
)
from talentpool.core.lifecycle import TalentLifecycle
from talentpool.core.listing import filter_talents
from talentpool.models.listing import TalentFilter
from talentpool.models.profile import CandidateProfile, UserRole

router = APIRouter()


class TalentCard(BaseModel):
    """Listing entry for one talent."""
    uid: str
    full_name: str
    headline: str | None = None
    country: str | None = None
    years_of_experience: float | None = None
    expected_monthly_rate_gbp: float | None = None
    availability: str | None = None
    skills: list[str] = []
    talent_tier: str | None = None
    weighted_total_score: int | None = None

    @classmethod
    def from_profile(cls, profile: CandidateProfile) -> "TalentCard":
        return cls(
            uid=profile.uid,
            full_name=profile.full_name,
            headline=profile.headline,
            country=profile.country,
            years_of_experience=profile.years_of_experience,
            expected_monthly_rate_gbp=profile.expected_monthly_rate_gbp,
            availability=profile.availability,
            skills=profile.skills(),
            talent_tier=profile.talent_tier.value if profile.talent_tier else None,
            weighted_total_score=profile.weighted_total_score,
        )


@router.get("/talents", response_model=list[TalentCard])
async def list_talents(
    keyword: str = Query(default=""),
    location: str = Query(default=""),
    min_experience: float | None = Query(default=None, ge=0),
    max_rate: float | None = Query(default=None, ge=0),
    availability: str = Query(default=""),
    user: CurrentUser = Depends(get_current_recruiter),
    lifecycle: TalentLifecycle = Depends(get_lifecycle),
) -> list[TalentCard]:
    filt = TalentFilter(
        keyword=keyword,
        location=location,
        min_experience=min_experience,
        max_rate=max_rate,
        availability=availability,
    )
    documents = await lifecycle.store.list_profiles(role=UserRole.TALENT.value)
    profiles = [CandidateProfile.from_document(d) for d in documents]
    return [TalentCard.from_profile(p) for p in filter_talents(profiles, filt)]
