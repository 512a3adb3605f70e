"""
Interview API endpoints

Handles the live voice interview:
- Starting the vendor call
- Candidate-initiated stop
- Live transcript polling
- Vendor event webhook
"""

import hmac
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, status
from pydantic import BaseModel

from talentpool.api.dependencies import (
    CurrentUser,
    get_current_talent,
    get_session_manager,
    http_error,
)
from talentpool.config.settings import get_settings
from talentpool.core.errors import TalentPoolError
from talentpool.core.interview_session import InterviewSessionManager
from talentpool.core.voice_vendor import normalize_vendor_event

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class BeginResponse(BaseModel):
    """Response after starting the interview call."""
    call_id: str
    web_call_url: str | None = None
    state: str


class EndResponse(BaseModel):
    finalized: bool


class LiveUtterance(BaseModel):
    speaker: str
    text: str


class LiveSessionResponse(BaseModel):
    """Current transcript of the caller's live session."""
    state: str
    call_id: str | None = None
    utterances: list[LiveUtterance]
    live_preview: str = ""
    last_error: str | None = None


class EventResponse(BaseModel):
    handled: bool


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("/begin", response_model=BeginResponse)
async def begin_interview(
    user: CurrentUser = Depends(get_current_talent),
    manager: InterviewSessionManager = Depends(get_session_manager),
) -> BeginResponse:
    """
    Start the voice interview for the calling talent.

    Requires status `interview_invited` with a question bundle on file.
    """
    try:
        driver = await manager.begin(user.uid, caller_id=user.uid, caller_role=user.role)
    except TalentPoolError as e:
        raise http_error(e)

    return BeginResponse(
        call_id=driver.call.call_id,
        web_call_url=driver.call.web_call_url,
        state=driver.state.value,
    )


@router.post("/end", response_model=EndResponse)
async def end_interview(
    user: CurrentUser = Depends(get_current_talent),
    manager: InterviewSessionManager = Depends(get_session_manager),
) -> EndResponse:
    """
    Stop the interview. The transcript so far is scored.

    Returns once the processing status is written; scoring continues in
    the background.
    """
    if manager.get(user.uid) is None:
        raise HTTPException(status_code=404, detail="No interview in progress")
    try:
        finalized = await manager.end(user.uid)
    except TalentPoolError as e:
        raise http_error(e)
    return EndResponse(finalized=finalized)


@router.get("/live", response_model=LiveSessionResponse)
async def get_live_session(
    user: CurrentUser = Depends(get_current_talent),
    manager: InterviewSessionManager = Depends(get_session_manager),
) -> LiveSessionResponse:
    driver = manager.get(user.uid)
    if driver is None:
        raise HTTPException(status_code=404, detail="No interview in progress")

    return LiveSessionResponse(
        state=driver.state.value,
        call_id=driver.call_id,
        utterances=[
            LiveUtterance(speaker=u.speaker.label, text=u.text) for u in driver.utterances
        ],
        live_preview=driver.live_preview,
        last_error=driver.last_error,
    )


@router.post("/events", response_model=EventResponse)
async def receive_vendor_event(
    payload: dict[str, Any] = Body(...),
    x_vendor_secret: str | None = Header(default=None),
    manager: InterviewSessionManager = Depends(get_session_manager),
) -> EventResponse:
    """
    Vendor webhook.

    Events for unknown or already-finalized calls are acknowledged and
    dropped so the vendor does not retry them.
    """
    secret = get_settings().vapi_webhook_secret
    if secret and not hmac.compare_digest(x_vendor_secret or "", secret):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid vendor secret")

    event = normalize_vendor_event(payload)
    if event is None:
        return EventResponse(handled=False)

    try:
        handled = await manager.dispatch(event)
    except TalentPoolError as e:
        logger.error(f"Vendor event {event.type.value} failed: {e}")
        raise http_error(e)
    return EventResponse(handled=handled)
