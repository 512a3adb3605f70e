"""
Shared fixtures: a controllable clock, fakes for the AI layer and the voice
vendor, and a lifecycle/worker/session stack over the in-memory store.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from talentpool.config.settings import Settings
from talentpool.core.errors import ConfigurationError, ExternalServiceError
from talentpool.core.interview_session import InterviewSessionManager
from talentpool.core.lifecycle import TalentLifecycle
from talentpool.core.profile_store import InMemoryProfileStore
from talentpool.core.scoring import ScoringEngine
from talentpool.core.scoring_worker import ScoringWorker
from talentpool.core.voice_vendor import VoiceVendorClient
from talentpool.models.profile import ProfileSubmission, UserRole
from talentpool.models.question import CVAnalysis, InterviewQuestions, QuestionGenerationInput
from talentpool.models.report import CANONICAL_CATEGORIES, SummaryRequest
from talentpool.models.voice import VoiceCall


START_TIME = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def summary_payload(scores=(90, 90, 90, 90), names=CANONICAL_CATEGORIES) -> dict[str, Any]:
    return {
        "categoryScores": [
            {"name": name, "score": score, "comment": f"{name} comment"}
            for name, score in zip(names, scores)
        ],
        "strengths": ["Clear answers", "Solid SQL"],
        "areasForImprovement": ["More detail on testing", "System design depth"],
        "finalAssessment": "A capable engineer.",
    }


class FakeAI:
    """Stands in for AIReasoningLayer."""

    def __init__(self):
        self.questions = InterviewQuestions(
            behavioural_questions=["Tell me about a conflict you resolved."],
            situational_questions=["A pipeline fails at 2am. What do you do?"],
            technical_questions=["How do you index a large table?"],
        )
        self.summary: dict[str, Any] | Exception = summary_payload()
        self.question_error: Exception | None = None
        self.cv_error: Exception | None = None
        self.question_inputs: list[QuestionGenerationInput] = []
        self.summary_requests: list[SummaryRequest] = []
        self.scores: list[tuple[str, float, str]] = []

    async def generate_interview_questions(self, candidate: QuestionGenerationInput) -> InterviewQuestions:
        self.question_inputs.append(candidate)
        if self.question_error:
            raise self.question_error
        return self.questions

    async def generate_interview_summary(self, request: SummaryRequest) -> dict[str, Any]:
        self.summary_requests.append(request)
        if isinstance(self.summary, Exception):
            raise self.summary
        return self.summary

    async def analyze_cv(self, cv_text: str) -> CVAnalysis:
        if self.cv_error:
            raise self.cv_error
        return CVAnalysis(
            skills=["Python", "SQL"],
            experience=[{"title": "Data Engineer", "company": "Acme", "dates": "2020-2024"}],
            education=[{"degree": "BSc Computer Science", "institution": "UCL"}],
            summary="Data engineer with four years of pipeline work.",
        )

    async def suggest_professional_summaries(self, headline: str) -> list[str]:
        return [f"{headline} focused on reliable delivery.", f"Experienced {headline}."]

    def record_score(self, name: str, value: float, comment: str) -> None:
        self.scores.append((name, value, comment))


class FakeVendor(VoiceVendorClient):
    """Voice vendor that records calls instead of dialing."""

    def __init__(self):
        self.configured = True
        self.start_error: Exception | None = None
        self.assistants: list[dict[str, Any]] = []
        self.ended: list[str] = []
        self._counter = 0

    def ensure_configured(self) -> None:
        if not self.configured:
            raise ConfigurationError("VAPI API key is missing.")

    async def start_call(self, assistant: dict[str, Any]) -> VoiceCall:
        self.ensure_configured()
        if self.start_error:
            raise self.start_error
        self._counter += 1
        self.assistants.append(assistant)
        call_id = f"call-{self._counter}"
        return VoiceCall(
            call_id=call_id,
            web_call_url=f"https://vendor.test/web/{call_id}",
            control_url=f"https://vendor.test/control/{call_id}",
        )

    async def end_call(self, call: VoiceCall) -> None:
        self.ended.append(call.call_id)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        retake_cooldown_minutes=60,
        scoring_stale_after_seconds=900,
        reconcile_interval_seconds=300,
    )


@pytest.fixture
def store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def fake_ai() -> FakeAI:
    return FakeAI()


@pytest.fixture
def vendor() -> FakeVendor:
    return FakeVendor()


@pytest.fixture
def lifecycle(store, fake_ai, settings, clock) -> TalentLifecycle:
    return TalentLifecycle(store=store, ai_reasoning=fake_ai, settings=settings, clock=clock)


@pytest.fixture
def engine(fake_ai, clock) -> ScoringEngine:
    return ScoringEngine(ai_reasoning=fake_ai, retake_cooldown=timedelta(hours=1), clock=clock)


@pytest.fixture
def worker(lifecycle, engine, settings, clock) -> ScoringWorker:
    return ScoringWorker(lifecycle=lifecycle, engine=engine, settings=settings, clock=clock)


@pytest.fixture
def manager(lifecycle, vendor, worker, settings, clock) -> InterviewSessionManager:
    return InterviewSessionManager(
        lifecycle=lifecycle,
        vendor=vendor,
        scoring_worker=worker,
        settings=settings,
        clock=clock,
    )


def make_submission(**overrides) -> ProfileSubmission:
    fields = {
        "full_name": "Ada Lovelace",
        "headline": "Senior Data Engineer",
        "professional_summary": "I build batch and streaming pipelines.",
        "country": "United Kingdom",
        "years_of_experience": 6,
        "tech_stack": "Spark, Airflow",
        "expected_monthly_rate_gbp": 5000,
        "availability": "Full-time",
        "cv_file_name": "ada.pdf",
        "cv_text": "Ada Lovelace. Data Engineer at Acme 2020-2024.",
    }
    fields.update(overrides)
    return ProfileSubmission(**fields)


@pytest.fixture
def invited_talent(lifecycle):
    """Factory: create, submit and prepare a talent; returns its uid."""

    async def _make(uid: str = "talent-1") -> str:
        await lifecycle.create_profile(uid, f"{uid}@example.com", UserRole.TALENT, "Ada Lovelace")
        await lifecycle.submit_profile(uid, make_submission())
        await lifecycle.prepare_interview(uid)
        return uid

    return _make


@pytest.fixture
def question_failure() -> ExternalServiceError:
    return ExternalServiceError("AI question generator returned invalid or incomplete data.")
