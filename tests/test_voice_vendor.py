import json

import httpx
import pytest

from talentpool.config.settings import Settings
from talentpool.core.errors import ConfigurationError, ExternalServiceError
from talentpool.core.voice_vendor import (
    VapiClient,
    classify_vendor_error,
    extract_error_message,
    normalize_vendor_event,
)
from talentpool.models.voice import CallEnded, CallFailed, TranscriptType, VoiceCall, VoiceEventType


class TestErrorClassification:
    @pytest.mark.parametrize(
        "payload",
        [
            {"errorMsg": "Meeting has ended"},
            {"error": {"message": "The meeting has ended for all participants"}},
            {"error": {"msg": "meeting has ended"}},
            "Meeting has ended",
            {"type": "ejected", "errorMsg": "MEETING HAS ENDED"},
        ],
    )
    def test_meeting_ended_is_normal_end(self, payload):
        assert isinstance(classify_vendor_error(payload), CallEnded)

    def test_other_errors_fail(self):
        result = classify_vendor_error({"error": {"message": "Microphone permission denied"}})
        assert result == CallFailed(reason="Microphone permission denied")

    def test_empty_payload_has_default_reason(self):
        result = classify_vendor_error({})
        assert isinstance(result, CallFailed)
        assert result.reason

    def test_extraction_order(self):
        assert extract_error_message({"message": "top", "errorMsg": "second"}) == "top"
        assert extract_error_message({"error": {"message": ["a", "b"]}}) == "a, b"
        assert extract_error_message({"error": {"error": "nested"}}) == "nested"
        assert extract_error_message({"error": "flat"}) == "flat"
        assert extract_error_message({"code": 42}) == json.dumps({"code": 42})
        assert extract_error_message(None, default="fallback") == "fallback"
        assert extract_error_message(RuntimeError("boom")) == "boom"


class TestEventNormalization:
    def test_server_status_updates(self):
        started = normalize_vendor_event(
            {"message": {"type": "status-update", "status": "in-progress", "call": {"id": "c1"}}}
        )
        assert started.type is VoiceEventType.CALL_START
        assert started.call_id == "c1"

        ended = normalize_vendor_event(
            {"message": {"type": "status-update", "status": "ended", "call": {"id": "c1"}}}
        )
        assert ended.type is VoiceEventType.CALL_END

    def test_transcript(self):
        event = normalize_vendor_event({
            "message": {
                "type": "transcript",
                "role": "user",
                "transcriptType": "final",
                "transcript": "Hello there",
                "call": {"id": "c1"},
            }
        })
        assert event.type is VoiceEventType.TRANSCRIPT
        assert event.transcript_type is TranscriptType.FINAL
        assert event.role == "user"
        assert event.text == "Hello there"

    def test_flat_client_events(self):
        assert normalize_vendor_event({"type": "call-end", "callId": "c9"}).call_id == "c9"
        error = normalize_vendor_event({"type": "error", "callId": "c9", "error": {"errorMsg": "x"}})
        assert error.error == {"errorMsg": "x"}

    def test_unconsumed_events_ignored(self):
        assert normalize_vendor_event({"message": {"type": "speech-update"}}) is None


class TestVapiClient:
    def make_client(self, handler, api_key="vapi-key") -> VapiClient:
        settings = Settings(_env_file=None, vapi_api_key=api_key, vapi_base_url="https://vapi.test")
        return VapiClient(settings=settings, transport=httpx.MockTransport(handler))

    async def test_start_call(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "id": "call-123",
                "webCallUrl": "https://vapi.test/web/call-123",
                "monitor": {"controlUrl": "https://vapi.test/control/call-123"},
            })

        client = self.make_client(handler)
        call = await client.start_call({"name": "AI Interviewer"})
        await client.close()

        assert call == VoiceCall(
            call_id="call-123",
            web_call_url="https://vapi.test/web/call-123",
            control_url="https://vapi.test/control/call-123",
        )
        assert seen["url"] == "https://vapi.test/call/web"
        assert seen["auth"] == "Bearer vapi-key"
        assert seen["body"] == {"assistant": {"name": "AI Interviewer"}}

    async def test_start_call_http_error(self):
        client = self.make_client(lambda request: httpx.Response(500, json={"message": "down"}))
        with pytest.raises(ExternalServiceError):
            await client.start_call({})
        await client.close()

    async def test_missing_key(self):
        client = self.make_client(lambda request: httpx.Response(200), api_key="")
        with pytest.raises(ConfigurationError):
            await client.start_call({})
        await client.close()

    async def test_end_call_posts_to_control_url(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((str(request.url), json.loads(request.content)))
            return httpx.Response(200)

        client = self.make_client(handler)
        await client.end_call(VoiceCall(call_id="c1", control_url="https://vapi.test/control/c1"))
        await client.end_call(VoiceCall(call_id="c2"))
        await client.close()

        assert seen == [("https://vapi.test/control/c1", {"type": "end-call"})]
