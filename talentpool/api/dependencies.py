"""
API Dependencies

Provides dependency injection for API endpoints.
Manages singleton instances of core components and resolves the caller
identity supplied by the upstream identity provider.
"""

import logging

from fastapi import Depends, Header, HTTPException, status
from pydantic import BaseModel

from talentpool.config.settings import get_settings
from talentpool.core.ai_reasoning import AIReasoningLayer
from talentpool.core.errors import (
    ConfigurationError,
    ExternalServiceError,
    PermissionDeniedError,
    PreconditionError,
    ProfileNotFoundError,
    TalentPoolError,
)
from talentpool.core.interview_session import InterviewSessionManager
from talentpool.core.lifecycle import TalentLifecycle
from talentpool.core.profile_store import InMemoryProfileStore, ProfileStore, SQLProfileStore
from talentpool.core.scoring import ScoringEngine
from talentpool.core.scoring_worker import ScoringWorker
from talentpool.core.voice_vendor import VapiClient, VoiceVendorClient
from talentpool.models.profile import UserRole

logger = logging.getLogger(__name__)


# ============================================================================
# SINGLETON INSTANCES
# ============================================================================

_store: ProfileStore | None = None
_ai_reasoning: AIReasoningLayer | None = None
_vendor: VoiceVendorClient | None = None
_lifecycle: TalentLifecycle | None = None
_scoring_worker: ScoringWorker | None = None
_session_manager: InterviewSessionManager | None = None


def get_store() -> ProfileStore:
    """Get the profile store singleton (SQL when DATABASE_URL is set)."""
    global _store

    if _store is None:
        settings = get_settings()
        if settings.database_url:
            _store = SQLProfileStore(settings.database_url)
        else:
            logger.warning("DATABASE_URL not set, using in-memory profile store")
            _store = InMemoryProfileStore()

    return _store


def get_ai_reasoning() -> AIReasoningLayer:
    global _ai_reasoning

    if _ai_reasoning is None:
        _ai_reasoning = AIReasoningLayer()

    return _ai_reasoning


def get_vendor() -> VoiceVendorClient:
    global _vendor

    if _vendor is None:
        _vendor = VapiClient()

    return _vendor


def get_lifecycle() -> TalentLifecycle:
    """
    Get the talent lifecycle singleton.

    Lazily initializes the store and AI layer it depends on.
    """
    global _lifecycle

    if _lifecycle is None:
        _lifecycle = TalentLifecycle(store=get_store(), ai_reasoning=get_ai_reasoning())

    return _lifecycle


def get_scoring_worker() -> ScoringWorker:
    global _scoring_worker

    if _scoring_worker is None:
        lifecycle = get_lifecycle()
        engine = ScoringEngine(
            ai_reasoning=lifecycle.ai_reasoning,
            retake_cooldown=lifecycle.retake_cooldown,
        )
        _scoring_worker = ScoringWorker(lifecycle=lifecycle, engine=engine)

    return _scoring_worker


def get_session_manager() -> InterviewSessionManager:
    global _session_manager

    if _session_manager is None:
        _session_manager = InterviewSessionManager(
            lifecycle=get_lifecycle(),
            vendor=get_vendor(),
            scoring_worker=get_scoring_worker(),
        )

    return _session_manager


async def cleanup():
    """Cleanup resources on shutdown."""
    global _store, _ai_reasoning, _vendor, _lifecycle, _scoring_worker, _session_manager

    if _session_manager:
        await _session_manager.close()
        _session_manager = None

    if _scoring_worker:
        await _scoring_worker.stop()
        _scoring_worker = None

    if _vendor:
        await _vendor.close()
        _vendor = None

    if _ai_reasoning:
        await _ai_reasoning.close()
        _ai_reasoning = None

    if _store:
        await _store.close()
        _store = None

    _lifecycle = None


# ============================================================================
# CALLER IDENTITY
# ============================================================================

class CurrentUser(BaseModel):
    """Authenticated caller, as asserted by the identity provider."""
    uid: str
    role: UserRole


async def get_current_user(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> CurrentUser:
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        role = UserRole(x_user_role.lower())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Unknown role: {x_user_role}") from None
    return CurrentUser(uid=x_user_id, role=role)


async def get_current_talent(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role != UserRole.TALENT:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Talent access only")
    return user


async def get_current_recruiter(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role != UserRole.RECRUITER:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Recruiter access only")
    return user


# ============================================================================
# ERROR MAPPING
# ============================================================================

_STATUS_BY_ERROR: list[tuple[type[TalentPoolError], int]] = [
    (ProfileNotFoundError, status.HTTP_404_NOT_FOUND),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (PreconditionError, status.HTTP_409_CONFLICT),
    (ConfigurationError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ExternalServiceError, status.HTTP_502_BAD_GATEWAY),
]


def http_error(error: TalentPoolError) -> HTTPException:
    """Translate a domain error into the HTTP error surfaced to the caller."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
