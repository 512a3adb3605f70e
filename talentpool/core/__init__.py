"""
Core business logic modules for TalentPool

Contains:
- Talent Lifecycle: State machine for the talent interview journey
- AI Reasoning: Question generation, transcript scoring, CV analysis
- Scoring Engine: Category normalization, weighted score, tiering
- Scoring Worker: Background scoring queue and reconcile sweep
- Interview Session: Live voice interview driver
- Profile Store: Document persistence
- Listing: Marketplace filter
"""

from talentpool.core.ai_reasoning import AIReasoningLayer
from talentpool.core.interview_session import InterviewSessionDriver, InterviewSessionManager
from talentpool.core.lifecycle import TalentLifecycle
from talentpool.core.listing import filter_talents
from talentpool.core.profile_store import InMemoryProfileStore, ProfileStore, SQLProfileStore
from talentpool.core.scoring import ScoringEngine
from talentpool.core.scoring_worker import ScoringWorker
from talentpool.core.voice_vendor import VapiClient, VoiceVendorClient

__all__ = [
    "AIReasoningLayer",
    "InterviewSessionDriver",
    "InterviewSessionManager",
    "TalentLifecycle",
    "filter_talents",
    "InMemoryProfileStore",
    "ProfileStore",
    "SQLProfileStore",
    "ScoringEngine",
    "ScoringWorker",
    "VapiClient",
    "VoiceVendorClient",
]
