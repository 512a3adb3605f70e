"""
Report models for TalentPool

Defines the interview report payload (success and error shapes), the
talent tier, and the scoring outcome written back to a profile.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


CANONICAL_CATEGORIES: tuple[str, ...] = (
    "Communication & English Proficiency",
    "Technical Knowledge & Role Fit",
    "Problem Solving & Thinking",
    "Culture & Work Ethic Alignment",
)


class TalentTier(str, Enum):
    """Outcome bucket derived from the weighted interview score."""

    PRIORITY = "priority"                            # 90+
    VERIFIED = "verified"                            # 85-89
    MANUAL_REVIEW = "manual_review"                  # 80-84
    RE_INTERVIEW_ELIGIBLE = "re_interview_eligible"  # < 80

    @property
    def display_text(self) -> str:
        """Human-readable tier."""
        texts = {
            "priority": "Priority",
            "verified": "Verified",
            "manual_review": "Manual Review",
            "re_interview_eligible": "Re-interview Eligible",
        }
        return texts.get(self.value, self.value)


class CategoryScore(BaseModel):
    """Score and comment for one of the four fixed categories."""

    model_config = ConfigDict(populate_by_name=True)

    category: str = Field(..., alias="name")
    score: int = Field(..., description="Integer score as supplied by the summary generator, not clamped")
    comment: str = ""


class InterviewReport(BaseModel):
    """Success-shaped report payload."""

    model_config = ConfigDict(populate_by_name=True)

    category_scores: list[CategoryScore] = Field(..., alias="categoryScores")
    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(
        default_factory=list, alias="areasForImprovement"
    )
    final_assessment: str = Field(default="", alias="finalAssessment")

    def to_payload(self) -> str:
        return json.dumps(self.model_dump(by_alias=True))


class ErrorReport(BaseModel):
    """Error-shaped report payload. Never rendered as a score breakdown."""

    error: str

    def to_payload(self) -> str:
        return json.dumps({"error": self.error})


def parse_report_payload(payload: str | None) -> InterviewReport | ErrorReport | None:
    """
    Parse a persisted report payload.

    The error shape is checked first; unparseable payloads are reported as
    errors rather than treated as valid reports.
    """
    if not payload:
        return None
    try:
        data: Any = json.loads(payload)
    except json.JSONDecodeError:
        return ErrorReport(error="Report payload could not be parsed.")

    if isinstance(data, dict) and "error" in data:
        return ErrorReport(error=str(data["error"]))
    try:
        return InterviewReport.model_validate(data)
    except ValidationError:
        return ErrorReport(error="Report payload did not match the expected schema.")


class ScoringOutcome(BaseModel):
    """Result of the scoring step, persisted atomically with report_ready."""

    category_scores: list[CategoryScore] | None = None
    weighted_total_score: int
    talent_tier: TalentTier
    next_interview_eligible_date: datetime | None = None
    report_summary: str
    is_error: bool = False


class SummaryRequest(BaseModel):
    """Input to the transcript summary generator."""

    candidate_name: str
    job_title: str
    interviewer_label: str = "AI Interview Conductor (VAPI)"
    interview_date: str
    transcript_with_context: str
