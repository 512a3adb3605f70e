"""
Data models and schemas for TalentPool

Contains Pydantic models for:
- Candidate profiles and lifecycle enums
- Interview questions and AI inputs
- Transcripts and interview snapshots
- Report payloads and scoring outcomes
- Marketplace filters
- Voice vendor events and call handles
"""

from talentpool.models.profile import (
    CandidateProfile,
    FullProfileCompletion,
    ProfileSubmission,
    TalentStatus,
    UserRole,
    ContractType,
    WeeklyAvailability,
    CVExperience,
    CVEducation,
    PortfolioLinks,
)
from talentpool.models.question import (
    InterviewQuestions,
    QuestionGenerationInput,
    CVAnalysis,
)
from talentpool.models.transcript import Speaker, Utterance, InterviewSnapshot
from talentpool.models.report import (
    CANONICAL_CATEGORIES,
    CategoryScore,
    ErrorReport,
    InterviewReport,
    ScoringOutcome,
    SummaryRequest,
    TalentTier,
    parse_report_payload,
)
from talentpool.models.listing import TalentFilter
from talentpool.models.voice import (
    CallEnded,
    CallFailed,
    TranscriptType,
    VoiceCall,
    VoiceEvent,
    VoiceEventType,
)

__all__ = [
    # Profile
    "CandidateProfile",
    "FullProfileCompletion",
    "ProfileSubmission",
    "TalentStatus",
    "UserRole",
    "ContractType",
    "WeeklyAvailability",
    "CVExperience",
    "CVEducation",
    "PortfolioLinks",
    # Question
    "InterviewQuestions",
    "QuestionGenerationInput",
    "CVAnalysis",
    # Transcript
    "Speaker",
    "Utterance",
    "InterviewSnapshot",
    # Report
    "CANONICAL_CATEGORIES",
    "CategoryScore",
    "ErrorReport",
    "InterviewReport",
    "ScoringOutcome",
    "SummaryRequest",
    "TalentTier",
    "parse_report_payload",
    # Listing
    "TalentFilter",
    # Voice
    "CallEnded",
    "CallFailed",
    "TranscriptType",
    "VoiceCall",
    "VoiceEvent",
    "VoiceEventType",
]
