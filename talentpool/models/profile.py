"""
Candidate profile models for TalentPool.

Defines the persisted talent document and the lifecycle enums that
govern it.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from talentpool.models.question import InterviewQuestions
from talentpool.models.report import CategoryScore, TalentTier
from talentpool.models.transcript import InterviewSnapshot


class UserRole(str, Enum):
    """User roles issued by the identity provider."""

    TALENT = "talent"
    RECRUITER = "recruiter"


class TalentStatus(str, Enum):
    """Talent lifecycle states."""

    NEW = "new"
    PROFILE_SUBMITTED = "profile_submitted"
    INTERVIEW_INVITED = "interview_invited"
    INTERVIEW_COMPLETED_PROCESSING_SUMMARY = "interview_completed_processing_summary"
    REPORT_READY = "report_ready"
    PROFILE_FULLY_COMPLETED = "profile_fully_completed"


class ContractType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract/Freelance"


class WeeklyAvailability(str, Enum):
    UNDER_10 = "<10hrs"
    FROM_10_TO_20 = "10-20hrs"
    FROM_20_TO_30 = "20-30hrs"
    FROM_30_TO_40 = "30-40hrs"
    OVER_40 = "40+hrs"


class CVExperience(BaseModel):
    """A work experience entry extracted from a CV."""

    title: str = ""
    company: str = ""
    dates: str = ""
    description: str = ""


class CVEducation(BaseModel):
    """An education entry extracted from a CV."""

    degree: str = ""
    institution: str = ""
    dates: str = ""
    description: str = ""


class PortfolioLinks(BaseModel):
    behance: str | None = None
    dribbble: str | None = None
    personal_site: str | None = None
    other: str | None = None


class CandidateProfile(BaseModel):
    """
    Persisted user document.

    Lifecycle fields (status, questions, scores, tier, report) are written
    only by the TalentLifecycle service.
    """

    # Identity
    uid: str
    email: str | None = None
    role: UserRole = UserRole.TALENT
    full_name: str = ""

    # Profile
    headline: str | None = None
    professional_summary: str | None = None
    country: str | None = None
    timezone: str | None = None
    years_of_experience: float | None = None
    tech_stack: str | None = None
    linkedin: str | None = None
    github: str | None = None
    expected_monthly_rate_gbp: float | None = None
    availability: str | None = None

    # CV analysis
    cv_file_name: str | None = None
    cv_analysis_summary: str | None = None
    cv_skills: list[str] = Field(default_factory=list)
    cv_experience: list[CVExperience] = Field(default_factory=list)
    cv_education: list[CVEducation] = Field(default_factory=list)

    # Lifecycle
    talent_status: TalentStatus | None = None
    interview_questions: InterviewQuestions | None = None
    interview_report_summary: str | None = None
    category_scores: list[CategoryScore] | None = None
    weighted_total_score: int | None = None
    talent_tier: TalentTier | None = None
    next_interview_eligible_date: datetime | None = None

    # Background scoring bookkeeping
    pending_scoring: InterviewSnapshot | None = None
    processing_started_at: datetime | None = None

    # Full profile completion
    profile_photo_url: str | None = None
    short_bio: str | None = None
    preferred_contract_type: ContractType | None = None
    weekly_availability: WeeklyAvailability | None = None
    portfolio_links: PortfolioLinks | None = None

    # Recruiter
    company_name: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "CandidateProfile":
        return cls.model_validate(document)

    def skills(self) -> list[str]:
        """CV skills followed by tech stack entries."""
        stack = [s.strip() for s in (self.tech_stack or "").split(",") if s.strip()]
        return [*self.cv_skills, *stack]

    def experience_summary(self) -> str:
        if self.cv_experience:
            return "\n".join(
                f"{e.title} at {e.company}: {e.description}" for e in self.cv_experience
            )
        return self.cv_analysis_summary or ""

    def display_name(self) -> str:
        return self.full_name or "Candidate"


class ProfileSubmission(BaseModel):
    """Talent-supplied profile fields, plus optional CV text to analyze."""

    full_name: str = Field(..., min_length=1)
    headline: str = ""
    professional_summary: str = ""
    country: str | None = None
    timezone: str | None = None
    years_of_experience: float | None = Field(default=None, ge=0)
    tech_stack: str | None = None
    linkedin: str | None = None
    github: str | None = None
    expected_monthly_rate_gbp: float | None = Field(default=None, ge=0)
    availability: str | None = None
    cv_file_name: str | None = None
    cv_text: str | None = Field(
        default=None,
        description="Extracted CV text; analyzed on submit when present"
    )


class FullProfileCompletion(BaseModel):
    """Extended fields supplied after the interview report is ready."""

    short_bio: str = Field(..., min_length=1)
    preferred_contract_type: ContractType
    weekly_availability: WeeklyAvailability
    profile_photo_url: str | None = None
    portfolio_links: PortfolioLinks | None = None
