"""
Voice Vendor Integration for TalentPool

Handles:
- Starting and ending vendor web calls (Vapi) over httpx
- Normalizing vendor webhook payloads into VoiceEvent
- Classifying vendor error payloads into CallEnded / CallFailed

Vendor error payloads come in many shapes; `extract_error_message` and
`classify_vendor_error` are the only places that look inside them.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from talentpool.config.settings import Settings, get_settings
from talentpool.core.errors import ConfigurationError, ExternalServiceError
from talentpool.models.voice import (
    CallEnded,
    CallFailed,
    TranscriptType,
    VoiceCall,
    VoiceEvent,
    VoiceEventType,
)

logger = logging.getLogger(__name__)

# Substring (case-insensitive) the vendor uses when a call ends normally
TERMINATION_PHRASE = "meeting has ended"


# ============================================================================
# ERROR CLASSIFICATION
# ============================================================================

def _non_blank(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def extract_error_message(error: Any, default: str = "") -> str:
    """Best-effort human-readable message from a duck-typed vendor error."""
    if not error:
        return default
    if isinstance(error, str):
        return error if error.strip() else default
    if isinstance(error, BaseException):
        return str(error) or default
    if isinstance(error, dict):
        for key in ("message", "errorMsg"):
            if message := _non_blank(error.get(key)):
                return message
        nested = error.get("error")
        if isinstance(nested, dict):
            message = nested.get("message")
            if _non_blank(message):
                return message
            if isinstance(message, list) and message:
                return ", ".join(str(m) for m in message)
            for key in ("msg", "error"):
                if text := _non_blank(nested.get(key)):
                    return text
        elif text := _non_blank(nested):
            return text
        try:
            serialized = json.dumps(error)
        except (TypeError, ValueError):
            return default
        return serialized if serialized != "{}" else default
    return str(error) or default


def classify_vendor_error(payload: Any) -> CallEnded | CallFailed:
    """Map a vendor error payload to a normal end or a failure."""
    message = extract_error_message(payload)
    candidates = [message]
    if isinstance(payload, dict) and isinstance(payload.get("errorMsg"), str):
        candidates.append(payload["errorMsg"])

    if any(TERMINATION_PHRASE in text.lower() for text in candidates):
        return CallEnded()
    return CallFailed(reason=message or "An unspecified voice connection error occurred.")


# ============================================================================
# EVENT NORMALIZATION
# ============================================================================

_END_TYPES = {"call-end", "end-of-call-report", "hang"}


def normalize_vendor_event(payload: dict[str, Any]) -> VoiceEvent | None:
    """
    Normalize a vendor webhook/client event.

    Accepts both flat client events ({"type": "call-end", "callId": ...})
    and server messages wrapped as {"message": {...}}. Returns None for
    event kinds the interview driver does not consume.
    """
    message = payload.get("message") if isinstance(payload.get("message"), dict) else payload
    call = message.get("call") if isinstance(message.get("call"), dict) else {}
    call_id = payload.get("callId") or message.get("callId") or call.get("id")
    event_type = message.get("type")

    if event_type == "status-update":
        status = message.get("status")
        if status == "in-progress":
            event_type = "call-start"
        elif status == "ended":
            event_type = "call-end"

    if event_type == "call-start":
        return VoiceEvent(type=VoiceEventType.CALL_START, call_id=call_id)
    if event_type in _END_TYPES:
        return VoiceEvent(type=VoiceEventType.CALL_END, call_id=call_id)
    if event_type == "transcript":
        raw_type = message.get("transcriptType")
        return VoiceEvent(
            type=VoiceEventType.TRANSCRIPT,
            call_id=call_id,
            role=message.get("role"),
            transcript_type=TranscriptType.FINAL if raw_type == "final" else TranscriptType.PARTIAL,
            text=str(message.get("transcript") or ""),
        )
    if event_type == "error":
        return VoiceEvent(
            type=VoiceEventType.ERROR,
            call_id=call_id,
            error=message.get("error", message),
        )

    logger.debug(f"Ignoring vendor event type: {event_type}")
    return None


# ============================================================================
# VENDOR CLIENTS
# ============================================================================

class VoiceVendorClient(ABC):
    """Contract for the live-call vendor."""

    @abstractmethod
    def ensure_configured(self) -> None:
        """Raise ConfigurationError if the vendor credential is missing."""

    @abstractmethod
    async def start_call(self, assistant: dict[str, Any]) -> VoiceCall:
        """Open a call with the given assistant configuration."""

    @abstractmethod
    async def end_call(self, call: VoiceCall) -> None:
        """Ask the vendor to hang up a live call."""

    async def close(self) -> None:
        """Release client resources."""


class VapiClient(VoiceVendorClient):
    """
    Vapi REST client.

    Web calls are created server-side; the returned web call URL is handed
    to the browser, and live-call control goes through the call's control URL.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self.client = httpx.AsyncClient(
            base_url=self.settings.vapi_base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {self.settings.vapi_api_key}",
                "Content-Type": "application/json",
            },
            timeout=30.0,
            transport=transport,
        )

    async def close(self) -> None:
        await self.client.aclose()

    def ensure_configured(self) -> None:
        if not self.settings.vapi_api_key:
            raise ConfigurationError("VAPI API key is missing.")

    async def start_call(self, assistant: dict[str, Any]) -> VoiceCall:
        self.ensure_configured()
        try:
            response = await self.client.post("/call/web", json={"assistant": assistant})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Vapi start call failed: {e}")
            raise ExternalServiceError(f"Failed to start voice call: {e}") from e
        except ValueError as e:
            raise ExternalServiceError("Voice vendor returned a non-JSON body.") from e

        call_id = data.get("id")
        if not call_id:
            raise ExternalServiceError("Voice vendor did not return a call id.")
        monitor = data.get("monitor") or {}
        return VoiceCall(
            call_id=call_id,
            web_call_url=data.get("webCallUrl"),
            control_url=monitor.get("controlUrl"),
        )

    async def end_call(self, call: VoiceCall) -> None:
        if not call.control_url:
            logger.warning(f"Call {call.call_id} has no control URL; relying on vendor hang-up")
            return
        try:
            response = await self.client.post(call.control_url, json={"type": "end-call"})
            response.raise_for_status()
        except httpx.HTTPError as e:
            # The transcript gathered so far is still finalized
            logger.warning(f"Vapi end call failed for {call.call_id}: {e}")
