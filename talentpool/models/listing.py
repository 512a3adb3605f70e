"""
Marketplace listing models for TalentPool
"""

from pydantic import BaseModel, Field


class TalentFilter(BaseModel):
    """Recruiter-side filter over the talent collection."""

    keyword: str = Field(
        default="",
        description="Matches name/headline, else skills; 'A & B' matches any subterm"
    )
    location: str = Field(default="", description="Substring of the talent's country")
    min_experience: float | None = Field(default=None, ge=0)
    max_rate: float | None = Field(default=None, ge=0)
    availability: str = Field(default="", description="Exact match; 'all' disables")
