"""
Transcript and interview snapshot models for TalentPool
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from talentpool.models.question import InterviewQuestions


class Speaker(str, Enum):
    """Who produced an utterance."""

    AI = "ai"
    CANDIDATE = "candidate"

    @property
    def label(self) -> str:
        return "AI" if self is Speaker.AI else "You"


class Utterance(BaseModel):
    """A single final utterance in the interview transcript."""

    model_config = ConfigDict(frozen=True)

    speaker: Speaker
    text: str

    def formatted(self) -> str:
        return f"{self.speaker.label}: {self.text}"


class InterviewSnapshot(BaseModel):
    """
    Immutable record captured when an interview call is finalized.

    Holds only what scoring needs, so the scoring job does not depend on
    the live session or on later profile edits.
    """

    model_config = ConfigDict(frozen=True)

    uid: str
    call_id: str | None = None
    candidate_name: str
    headline: str
    questions: InterviewQuestions | None = None
    utterances: tuple[Utterance, ...] = ()
    ended_at: datetime

    @property
    def is_empty(self) -> bool:
        return not any(u.text.strip() for u in self.utterances)

    def transcript_text(self) -> str:
        return "\n".join(u.formatted() for u in self.utterances)
