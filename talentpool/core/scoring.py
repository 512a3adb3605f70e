"""
Scoring & Tiering Engine for TalentPool

Converts a raw AI transcript assessment into:
- four canonical category scores
- a weighted 0-100 total
- a talent tier
- a retake cooldown for the lowest tier

The only I/O is the single summary-generator call in `ScoringEngine.score`;
every failure there becomes an error outcome rather than an exception.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Sequence

from talentpool.core.errors import EmptyInputError, ExternalServiceError, TalentPoolError
from talentpool.models.report import (
    CANONICAL_CATEGORIES,
    CategoryScore,
    ErrorReport,
    InterviewReport,
    ScoringOutcome,
    SummaryRequest,
    TalentTier,
)
from talentpool.models.transcript import InterviewSnapshot
from talentpool.prompts.evaluator import EvaluatorPrompts

logger = logging.getLogger(__name__)


# Positional weights, aligned with CANONICAL_CATEGORIES
CATEGORY_WEIGHTS: tuple[Decimal, ...] = (
    Decimal("0.30"),  # Communication & English Proficiency
    Decimal("0.40"),  # Technical Knowledge & Role Fit
    Decimal("0.20"),  # Problem Solving & Thinking
    Decimal("0.10"),  # Culture & Work Ethic Alignment
)

PRIORITY_THRESHOLD = 90
VERIFIED_THRESHOLD = 85
MANUAL_REVIEW_THRESHOLD = 80

# Evaluated in order, first match wins
TIER_THRESHOLDS: tuple[tuple[int, TalentTier], ...] = (
    (PRIORITY_THRESHOLD, TalentTier.PRIORITY),
    (VERIFIED_THRESHOLD, TalentTier.VERIFIED),
    (MANUAL_REVIEW_THRESHOLD, TalentTier.MANUAL_REVIEW),
)

DEFAULT_RETAKE_COOLDOWN = timedelta(hours=1)

# Bounds on strengths / areasForImprovement in a summary
MIN_LIST_ITEMS = 2
MAX_LIST_ITEMS = 4


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# PURE SCORING FUNCTIONS
# ============================================================================

def coerce_score(value: Any) -> float:
    """Numeric coercion of an AI-supplied score; anything non-numeric is 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def round_half_up(value: Any) -> int:
    """Coerce, then round to the nearest integer with .5 going up."""
    return int(Decimal(repr(coerce_score(value))).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compute_weighted_score(scores: Sequence[Any]) -> int:
    """
    Weighted total of four positional category scores.

    round(comm*0.30 + tech*0.40 + problem*0.20 + culture*0.10), half-up,
    computed in decimal so .5 boundaries are exact. The result is clamped
    to [0, 100]; a non-finite intermediate yields 0.
    """
    if len(scores) != len(CATEGORY_WEIGHTS):
        raise ValueError(f"Expected {len(CATEGORY_WEIGHTS)} category scores, got {len(scores)}")

    total = sum(
        (Decimal(repr(coerce_score(score))) * weight for score, weight in zip(scores, CATEGORY_WEIGHTS)),
        Decimal(0),
    )
    if not total.is_finite():
        return 0

    rounded = int(total.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return max(0, min(100, rounded))


def determine_tier(weighted_score: int) -> TalentTier:
    """Map a weighted score to its tier."""
    for threshold, tier in TIER_THRESHOLDS:
        if weighted_score >= threshold:
            return tier
    return TalentTier.RE_INTERVIEW_ELIGIBLE


def next_eligible_date(
    tier: TalentTier,
    now: datetime,
    cooldown: timedelta = DEFAULT_RETAKE_COOLDOWN,
) -> datetime | None:
    """Retake cooldown end, set only for the lowest tier."""
    if tier is TalentTier.RE_INTERVIEW_ELIGIBLE:
        return now + cooldown
    return None


def normalize_category_scores(raw: Any) -> list[CategoryScore]:
    """
    Validate and normalize the AI's category list.

    Exactly four entries are required. Names that drift from the canonical
    list are replaced by position with a warning.

    Raises:
        ExternalServiceError: If the list is missing or not four objects
    """
    if not isinstance(raw, list) or len(raw) != len(CANONICAL_CATEGORIES):
        count = len(raw) if isinstance(raw, list) else 0
        raise ExternalServiceError(
            "AI failed to generate a valid summary report or it did not match "
            f"the expected schema (4 categories, got {count})."
        )

    normalized = []
    for index, (entry, expected_name) in enumerate(zip(raw, CANONICAL_CATEGORIES)):
        if not isinstance(entry, dict):
            raise ExternalServiceError(f"Category entry {index} is not an object.")
        name = entry.get("name", entry.get("category"))
        if name != expected_name:
            logger.warning(
                f"Category name mismatch at position {index}. "
                f"Expected: '{expected_name}', got: '{name}'. Forcing expected name."
            )
        normalized.append(CategoryScore(
            category=expected_name,
            score=round_half_up(entry.get("score")),
            comment=str(entry.get("comment") or ""),
        ))
    return normalized


# ============================================================================
# ENGINE
# ============================================================================

class ScoringEngine:
    """
    Turns an interview snapshot into a terminal scoring outcome.

    Responsibilities:
    - Compose the summary request (question context + transcript)
    - Call the summary generator
    - Normalize categories, weight, tier, cooldown
    - Absorb every failure into an error outcome
    """

    def __init__(
        self,
        ai_reasoning: Any = None,  # AIReasoningLayer
        retake_cooldown: timedelta = DEFAULT_RETAKE_COOLDOWN,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize scoring engine.

        Args:
            ai_reasoning: AI reasoning layer exposing generate_interview_summary
            retake_cooldown: Wait before a re_interview_eligible talent may retake
            clock: Source of the current time
        """
        self.ai_reasoning = ai_reasoning
        self.retake_cooldown = retake_cooldown
        self.clock = clock
        self.evaluator_prompts = EvaluatorPrompts()

    def build_request(self, snapshot: InterviewSnapshot) -> SummaryRequest:
        transcript = self.evaluator_prompts.transcript_with_context(
            snapshot.questions, snapshot.transcript_text()
        )
        return SummaryRequest(
            candidate_name=snapshot.candidate_name or "Candidate",
            job_title=snapshot.headline or "Role",
            interview_date=snapshot.ended_at.date().isoformat(),
            transcript_with_context=transcript,
        )

    async def score(self, snapshot: InterviewSnapshot) -> ScoringOutcome:
        """
        Score a finalized interview. Never raises for AI failures.

        Returns:
            Success outcome, or the error outcome on any failure
        """
        if snapshot.is_empty:
            return self.error_outcome(
                "Failed to generate summary due to empty interview transcript."
            )
        if self.ai_reasoning is None:
            return self.error_outcome("AI summary generation is not available.")

        request = self.build_request(snapshot)
        logger.info(
            f"Scoring interview for {snapshot.uid} | "
            f"utterances={len(snapshot.utterances)} | "
            f"transcript: {request.transcript_with_context[:200]!r}"
        )

        try:
            raw = await self.ai_reasoning.generate_interview_summary(request)
            outcome = self.build_outcome(raw)
        except TalentPoolError as e:
            logger.error(f"Summary generation failed for {snapshot.uid}: {e}")
            return self.error_outcome(f"AI summary generation failed: {e}")
        except Exception as e:
            logger.exception(f"Unexpected scoring failure for {snapshot.uid}")
            return self.error_outcome(
                f"Failed to finalize interview report due to an unexpected error: {e}"
            )

        logger.info(
            f"Scored {snapshot.uid}: weighted={outcome.weighted_total_score} "
            f"tier={outcome.talent_tier.value}"
        )
        return outcome

    def build_outcome(self, raw: Any) -> ScoringOutcome:
        """
        Convert raw summary-generator output into a success outcome.

        Raises:
            ExternalServiceError: If the output shape is unusable
        """
        if not isinstance(raw, dict):
            raise ExternalServiceError("AI output was empty or not an object.")

        category_scores = normalize_category_scores(raw.get("categoryScores"))
        weighted = compute_weighted_score([cs.score for cs in category_scores])
        tier = determine_tier(weighted)

        final_assessment = raw.get("finalAssessment")
        if not isinstance(final_assessment, str):
            raise ExternalServiceError("AI output is missing a final assessment.")

        report = InterviewReport(
            category_scores=category_scores,
            strengths=self._bounded_list(raw, "strengths"),
            areas_for_improvement=self._bounded_list(raw, "areasForImprovement"),
            final_assessment=final_assessment,
        )
        now = self.clock()
        return ScoringOutcome(
            category_scores=category_scores,
            weighted_total_score=weighted,
            talent_tier=tier,
            next_interview_eligible_date=next_eligible_date(tier, now, self.retake_cooldown),
            report_summary=report.to_payload(),
        )

    def error_outcome(self, message: str) -> ScoringOutcome:
        """Zero-score outcome with an error-shaped report and a retake cooldown."""
        tier = TalentTier.RE_INTERVIEW_ELIGIBLE
        return ScoringOutcome(
            category_scores=None,
            weighted_total_score=0,
            talent_tier=tier,
            next_interview_eligible_date=next_eligible_date(tier, self.clock(), self.retake_cooldown),
            report_summary=ErrorReport(error=message).to_payload(),
            is_error=True,
        )

    @staticmethod
    def _bounded_list(raw: dict[str, Any], key: str) -> list[str]:
        """
        Raises:
            ExternalServiceError: Unless raw[key] is a list of 2-4 strings
        """
        value = raw.get(key)
        if (
            not isinstance(value, list)
            or not MIN_LIST_ITEMS <= len(value) <= MAX_LIST_ITEMS
            or not all(isinstance(item, str) for item in value)
        ):
            raise ExternalServiceError(
                f"AI output field '{key}' must be a list of "
                f"{MIN_LIST_ITEMS}-{MAX_LIST_ITEMS} strings."
            )
        return value


def ensure_transcript(snapshot: InterviewSnapshot) -> InterviewSnapshot:
    """
    Raises:
        EmptyInputError: If the snapshot has no spoken content
    """
    if snapshot.is_empty:
        raise EmptyInputError("Interview ended with no interaction recorded.")
    return snapshot
