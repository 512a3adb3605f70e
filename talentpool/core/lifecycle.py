"""
Talent Lifecycle - State machine for the talent interview journey.

This is the only component that writes `talent_status`, the question
bundle, scores, tier, cooldown and report fields. Every transition is a
compare-and-set on the current status, so a stale or duplicate command
never overwrites a newer state.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable

from pydantic_core import to_jsonable_python

from talentpool.config.settings import Settings, get_settings
from talentpool.core.errors import (
    ConfigurationError,
    PermissionDeniedError,
    PreconditionError,
    ProfileNotFoundError,
)
from talentpool.core.profile_store import ProfileStore
from talentpool.core.scoring import utc_now
from talentpool.models.profile import (
    CandidateProfile,
    CVEducation,
    CVExperience,
    FullProfileCompletion,
    ProfileSubmission,
    TalentStatus,
    UserRole,
)
from talentpool.models.question import QuestionGenerationInput
from talentpool.models.report import ScoringOutcome, TalentTier
from talentpool.models.transcript import InterviewSnapshot

logger = logging.getLogger(__name__)


# Fields nulled whenever a new interview cycle begins
REPORT_FIELDS_CLEARED: dict[str, Any] = {
    "weighted_total_score": None,
    "talent_tier": None,
    "next_interview_eligible_date": None,
    "interview_report_summary": None,
    "category_scores": None,
    "pending_scoring": None,
    "processing_started_at": None,
}


class TalentLifecycle:
    """
    Manages the talent lifecycle using a state machine pattern.

    States:
        new → profile_submitted → interview_invited
            → interview_completed_processing_summary → report_ready
                                                          ↓
                            (interview_invited via retake | profile_fully_completed)
    """

    VALID_TRANSITIONS: dict[TalentStatus, list[TalentStatus]] = {
        TalentStatus.NEW: [TalentStatus.PROFILE_SUBMITTED],
        TalentStatus.PROFILE_SUBMITTED: [TalentStatus.PROFILE_SUBMITTED, TalentStatus.INTERVIEW_INVITED],
        TalentStatus.INTERVIEW_INVITED: [TalentStatus.INTERVIEW_COMPLETED_PROCESSING_SUMMARY],
        TalentStatus.INTERVIEW_COMPLETED_PROCESSING_SUMMARY: [TalentStatus.REPORT_READY],
        TalentStatus.REPORT_READY: [TalentStatus.INTERVIEW_INVITED, TalentStatus.PROFILE_FULLY_COMPLETED],
        TalentStatus.PROFILE_FULLY_COMPLETED: [],  # Terminal state
    }

    def __init__(
        self,
        store: ProfileStore,
        ai_reasoning: Any = None,  # AIReasoningLayer
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the lifecycle service.

        Args:
            store: Profile document store
            ai_reasoning: AI layer for CV analysis and question generation
            settings: Application settings
            clock: Source of the current time
        """
        self.store = store
        self.ai_reasoning = ai_reasoning
        self.settings = settings or get_settings()
        self.clock = clock

    @property
    def retake_cooldown(self) -> timedelta:
        return timedelta(minutes=self.settings.retake_cooldown_minutes)

    # =========================================================================
    # READS
    # =========================================================================

    async def get_profile(self, uid: str) -> CandidateProfile:
        """
        Raises:
            ProfileNotFoundError: If no document exists for `uid`
        """
        document = await self.store.get(uid)
        if document is None:
            raise ProfileNotFoundError(uid)
        return CandidateProfile.from_document(document)

    async def get_talent(self, uid: str) -> CandidateProfile:
        profile = await self.get_profile(uid)
        if profile.role != UserRole.TALENT:
            raise PermissionDeniedError("Only talent profiles have an interview lifecycle.")
        return profile

    # =========================================================================
    # STATE MACHINE
    # =========================================================================

    def _require_transition(self, profile: CandidateProfile, new_status: TalentStatus) -> TalentStatus:
        current = profile.talent_status or TalentStatus.NEW
        if new_status not in self.VALID_TRANSITIONS.get(current, []):
            raise PreconditionError(
                f"Invalid transition from {current.value} to {new_status.value}."
            )
        return current

    async def _write_transition(
        self,
        uid: str,
        old_status: TalentStatus,
        new_status: TalentStatus,
        fields: dict[str, Any] | None = None,
    ) -> bool:
        """Compare-and-set the status together with `fields` in one update."""
        payload = to_jsonable_python({**(fields or {}), "talent_status": new_status})
        written = await self.store.update(
            uid,
            payload,
            expected={"talent_status": old_status.value},
        )
        if written:
            logger.info(f"Talent {uid}: {old_status.value} → {new_status.value}")
        else:
            logger.info(
                f"Talent {uid}: skipped {old_status.value} → {new_status.value}, status already changed"
            )
        return written

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def create_profile(
        self,
        uid: str,
        email: str | None,
        role: UserRole,
        full_name: str = "",
    ) -> CandidateProfile:
        """
        Create the user document at signup. Talents start in `new`.

        Raises:
            PreconditionError: If a document already exists for `uid`
        """
        if await self.store.get(uid) is not None:
            raise PreconditionError(f"Profile already exists: {uid}")

        profile = CandidateProfile(
            uid=uid,
            email=email,
            role=role,
            full_name=full_name,
            talent_status=TalentStatus.NEW if role == UserRole.TALENT else None,
        )
        await self.store.set(uid, profile.model_dump(mode="json", exclude_none=True))
        logger.info(f"Created {role.value} profile {uid}")
        return await self.get_profile(uid)

    async def submit_profile(self, uid: str, submission: ProfileSubmission) -> CandidateProfile:
        """
        Save the talent profile and move to `profile_submitted`.

        Requires a headline, a professional summary and a parsed CV (either
        `cv_text` analyzed now or a previous analysis on file). CV analysis
        failure leaves the profile untouched.
        """
        profile = await self.get_talent(uid)
        current = self._require_transition(profile, TalentStatus.PROFILE_SUBMITTED)

        if not submission.headline.strip() or not submission.professional_summary.strip():
            raise PreconditionError("A headline and professional summary are required.")

        fields = submission.model_dump(exclude={"cv_text"})

        if submission.cv_text and submission.cv_text.strip():
            if self.ai_reasoning is None:
                raise ConfigurationError("CV analysis is not available.")
            analysis = await self.ai_reasoning.analyze_cv(submission.cv_text)
            fields.update(
                cv_analysis_summary=analysis.summary,
                cv_skills=analysis.skills,
                cv_experience=[CVExperience.model_validate(e) for e in analysis.experience],
                cv_education=[CVEducation.model_validate(e) for e in analysis.education],
            )
        elif not profile.cv_analysis_summary:
            raise PreconditionError("Please upload your CV.")

        if not await self._write_transition(uid, current, TalentStatus.PROFILE_SUBMITTED, fields):
            raise PreconditionError("Profile status changed while submitting. Please retry.")
        return await self.get_profile(uid)

    async def prepare_interview(self, uid: str) -> CandidateProfile:
        """
        Generate interview questions and move to `interview_invited`.

        Raises:
            PreconditionError: Wrong status or missing headline/summary/skills
            ExternalServiceError: Question generation failed (status unchanged)
        """
        profile = await self.get_talent(uid)
        if profile.talent_status != TalentStatus.PROFILE_SUBMITTED:
            raise PreconditionError(
                f"Cannot prepare an interview in status: {(profile.talent_status or TalentStatus.NEW).value}"
            )
        return await self._invite(profile, TalentStatus.PROFILE_SUBMITTED)

    async def request_retake(self, uid: str) -> CandidateProfile:
        """
        Start a new interview cycle from `report_ready`.

        Only re_interview_eligible talents whose cooldown has elapsed may retake.
        """
        profile = await self.get_talent(uid)
        if profile.talent_status != TalentStatus.REPORT_READY:
            raise PreconditionError("A retake is only possible once a report is ready.")
        if profile.talent_tier != TalentTier.RE_INTERVIEW_ELIGIBLE:
            raise PreconditionError("Only re-interview eligible talents may retake the interview.")

        eligible_at = profile.next_interview_eligible_date
        if eligible_at is not None and self.clock() < eligible_at:
            raise PreconditionError(
                f"Retake available after {eligible_at.isoformat()}."
            )
        return await self._invite(profile, TalentStatus.REPORT_READY)

    async def _invite(self, profile: CandidateProfile, from_status: TalentStatus) -> CandidateProfile:
        self._require_transition(profile, TalentStatus.INTERVIEW_INVITED)

        skills = profile.skills()
        if not (profile.headline and profile.professional_summary and skills):
            raise PreconditionError(
                "Please ensure your headline, professional summary and skills are complete "
                "before preparing for an AI interview."
            )
        if self.ai_reasoning is None:
            raise ConfigurationError("Question generation is not available.")

        questions = await self.ai_reasoning.generate_interview_questions(
            QuestionGenerationInput(
                headline=profile.headline,
                summary=profile.professional_summary,
                skills=skills,
                experience_summary=profile.experience_summary(),
                role=profile.headline or "Candidate",
            )
        )

        written = await self._write_transition(
            profile.uid,
            from_status,
            TalentStatus.INTERVIEW_INVITED,
            {**REPORT_FIELDS_CLEARED, "interview_questions": questions},
        )
        if not written:
            raise PreconditionError("Profile status changed while preparing the interview. Please retry.")
        return await self.get_profile(profile.uid)

    async def mark_interview_completed(self, snapshot: InterviewSnapshot) -> bool:
        """
        Finalize write: `interview_invited` → processing, storing the snapshot
        as the pending scoring job in the same update.

        Returns:
            False if the interview was already finalized (duplicate end signal)
        """
        return await self._write_transition(
            snapshot.uid,
            TalentStatus.INTERVIEW_INVITED,
            TalentStatus.INTERVIEW_COMPLETED_PROCESSING_SUMMARY,
            {
                "pending_scoring": snapshot,
                "processing_started_at": self.clock(),
            },
        )

    async def record_scoring_outcome(self, uid: str, outcome: ScoringOutcome) -> bool:
        """
        Persist a scoring outcome and move to `report_ready`.

        Returns:
            False if the profile had already left the processing status
        """
        return await self._write_transition(
            uid,
            TalentStatus.INTERVIEW_COMPLETED_PROCESSING_SUMMARY,
            TalentStatus.REPORT_READY,
            {
                "category_scores": outcome.category_scores,
                "weighted_total_score": outcome.weighted_total_score,
                "talent_tier": outcome.talent_tier,
                "next_interview_eligible_date": outcome.next_interview_eligible_date,
                "interview_report_summary": outcome.report_summary,
                "pending_scoring": None,
                "processing_started_at": None,
            },
        )

    async def complete_full_profile(
        self,
        uid: str,
        completion: FullProfileCompletion,
    ) -> CandidateProfile:
        """Save the extended profile fields and move to `profile_fully_completed`."""
        profile = await self.get_talent(uid)
        current = self._require_transition(profile, TalentStatus.PROFILE_FULLY_COMPLETED)

        written = await self._write_transition(
            uid,
            current,
            TalentStatus.PROFILE_FULLY_COMPLETED,
            completion.model_dump(),
        )
        if not written:
            raise PreconditionError("Profile status changed while saving. Please retry.")
        return await self.get_profile(uid)

    async def suggest_summaries(self, headline: str) -> list[str]:
        if not headline.strip():
            raise PreconditionError("A headline is required for summary suggestions.")
        if self.ai_reasoning is None:
            raise ConfigurationError("Summary suggestions are not available.")
        return await self.ai_reasoning.suggest_professional_summaries(headline)
