"""
Marketplace listing filter.

Keyword matching checks name/headline first, then skills (CV skills plus
tech stack). A keyword containing " & " matches if any subterm does.
All other predicates are AND-combined.
"""

from typing import Iterable

from talentpool.models.listing import TalentFilter
from talentpool.models.profile import CandidateProfile

# Abbreviation → phrase accepted in the skills text
KEYWORD_SYNONYMS: dict[str, str] = {
    "ai": "artificial intelligence",
    "ml": "machine learning",
}

SUBTERM_SEPARATOR = " & "


def _skills_text(profile: CandidateProfile) -> str:
    cv_skills = " ".join(profile.cv_skills).lower()
    return f"{cv_skills} {(profile.tech_stack or '').lower()}".strip()


def _term_in_skills(term: str, skills: str) -> bool:
    synonym = KEYWORD_SYNONYMS.get(term)
    return term in skills or (synonym is not None and synonym in skills)


def matches_keyword(profile: CandidateProfile, keyword: str) -> bool:
    term = keyword.lower()
    if not term:
        return True

    if term in (profile.full_name or "").lower() or term in (profile.headline or "").lower():
        return True

    skills = _skills_text(profile)
    if SUBTERM_SEPARATOR in term:
        subterms = [t.strip() for t in term.split(SUBTERM_SEPARATOR) if t.strip()]
        return any(_term_in_skills(t, skills) for t in subterms)
    return _term_in_skills(term, skills)


def matches_filter(profile: CandidateProfile, filt: TalentFilter) -> bool:
    if not matches_keyword(profile, filt.keyword):
        return False

    location = filt.location.lower()
    if location and location not in (profile.country or "").lower():
        return False

    if filt.min_experience is not None and (
        profile.years_of_experience is None or profile.years_of_experience < filt.min_experience
    ):
        return False

    if filt.max_rate is not None and (
        profile.expected_monthly_rate_gbp is None or profile.expected_monthly_rate_gbp > filt.max_rate
    ):
        return False

    availability = filt.availability.lower()
    if availability and availability != "all" and (profile.availability or "").lower() != availability:
        return False

    return True


def filter_talents(
    profiles: Iterable[CandidateProfile],
    filt: TalentFilter,
) -> list[CandidateProfile]:
    """Profiles matching every predicate of `filt`, in input order."""
    return [profile for profile in profiles if matches_filter(profile, filt)]
