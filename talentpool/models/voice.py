"""
Voice vendor boundary models for TalentPool

Vendor payloads are normalized into these shapes at the edge so the
interview driver never inspects raw vendor JSON.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class VoiceEventType(str, Enum):
    """Normalized vendor event kinds."""

    CALL_START = "call-start"
    CALL_END = "call-end"
    TRANSCRIPT = "transcript"
    ERROR = "error"


class TranscriptType(str, Enum):
    PARTIAL = "partial"
    FINAL = "final"


class VoiceEvent(BaseModel):
    """A single normalized event from the voice vendor."""

    type: VoiceEventType
    call_id: str | None = None

    # Transcript events
    role: str | None = None  # "assistant" | "user"
    transcript_type: TranscriptType | None = None
    text: str = ""

    # Error events (raw vendor payload)
    error: Any = None


class VoiceCall(BaseModel):
    """Handle for a live vendor call."""

    call_id: str
    web_call_url: str | None = None
    control_url: str | None = None


class CallEnded(BaseModel):
    """Vendor signal classified as a normal end of call."""


class CallFailed(BaseModel):
    """Vendor signal classified as a real failure."""

    reason: str
