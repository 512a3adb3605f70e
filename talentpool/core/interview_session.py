"""
Interview Session Driver - Drives one live voice interview.

Responsibilities:
- Validate the candidate may start an interview
- Start the vendor call with the interviewer script
- Accumulate final utterances; expose the partial candidate utterance
- Finalize exactly once, whichever termination signal arrives first
- Hand the transcript snapshot to the scoring worker

Only one driver exists per candidate at a time; the session manager owns
that bookkeeping and routes vendor events by call id.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from talentpool.config.settings import Settings, get_settings
from talentpool.core.errors import (
    EmptyInputError,
    PermissionDeniedError,
    PreconditionError,
)
from talentpool.core.lifecycle import TalentLifecycle
from talentpool.core.scoring import ensure_transcript, utc_now
from talentpool.core.scoring_worker import ScoringWorker
from talentpool.core.voice_vendor import VoiceVendorClient, classify_vendor_error
from talentpool.models.profile import CandidateProfile, TalentStatus, UserRole
from talentpool.models.transcript import InterviewSnapshot, Speaker, Utterance
from talentpool.models.voice import (
    CallEnded,
    TranscriptType,
    VoiceCall,
    VoiceEvent,
    VoiceEventType,
)
from talentpool.prompts.interviewer import InterviewerPrompts

logger = logging.getLogger(__name__)

EMPTY_INTERVIEW_MESSAGE = "Interview ended prematurely with no interaction recorded."


class SessionState(str, Enum):
    """Driver states."""

    IDLE = "idle"
    CONNECTING = "connecting"
    ACTIVE = "active"
    FINALIZING = "finalizing"
    FINALIZED = "finalized"
    FAILED = "failed"

    @property
    def is_live(self) -> bool:
        return self in (SessionState.CONNECTING, SessionState.ACTIVE)


class InterviewSessionDriver:
    """
    One live interview for one candidate.

    Every termination path (vendor call-end, "meeting has ended" error,
    candidate stop) funnels into `_finalize`, which flips the state before
    its first await so a second signal is a no-op.
    """

    def __init__(
        self,
        lifecycle: TalentLifecycle,
        vendor: VoiceVendorClient,
        scoring_worker: ScoringWorker,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
        on_close: Callable[["InterviewSessionDriver"], None] | None = None,
    ):
        self.lifecycle = lifecycle
        self.vendor = vendor
        self.scoring_worker = scoring_worker
        self.settings = settings or get_settings()
        self.clock = clock
        self.on_close = on_close
        self.prompts = InterviewerPrompts()

        self.state = SessionState.IDLE
        self.candidate: CandidateProfile | None = None
        self.call: VoiceCall | None = None
        self.utterances: list[Utterance] = []
        self.live_preview: str = ""
        self.last_error: str | None = None

    @property
    def uid(self) -> str | None:
        return self.candidate.uid if self.candidate else None

    @property
    def call_id(self) -> str | None:
        return self.call.call_id if self.call else None

    # =========================================================================
    # START
    # =========================================================================

    def build_assistant(self, candidate: CandidateProfile) -> dict[str, Any]:
        """Vendor assistant configuration for this candidate."""
        name = candidate.display_name()
        position = candidate.headline or "the role"
        return {
            "name": "AI Interviewer",
            "firstMessage": self.prompts.first_message(name, position),
            "transcriber": {"provider": "deepgram", "model": "nova-2", "language": "en-US"},
            "voice": {"provider": "playht", "voiceId": "jennifer"},
            "model": {
                "provider": "openai",
                "model": "gpt-4",
                "messages": [
                    {
                        "role": "system",
                        "content": self.prompts.voice_system_prompt(
                            name, position, candidate.interview_questions
                        ),
                    }
                ],
            },
            "maxDurationSeconds": self.settings.interview_max_duration_seconds,
            "metadata": {"uid": candidate.uid},
        }

    async def begin(
        self,
        candidate: CandidateProfile,
        caller_id: str,
        caller_role: UserRole,
    ) -> VoiceCall:
        """
        Start the vendor call.

        Raises:
            PermissionDeniedError: Caller is not this talent
            PreconditionError: Wrong status, missing questions, or already started
            ConfigurationError: Vendor credential missing
            ExternalServiceError: Vendor refused the call (status unchanged)
        """
        if self.state != SessionState.IDLE:
            raise PreconditionError("This interview session has already been started.")
        if caller_id != candidate.uid or caller_role != UserRole.TALENT:
            raise PermissionDeniedError("Only the invited talent can start this interview.")
        if candidate.talent_status != TalentStatus.INTERVIEW_INVITED:
            raise PreconditionError("You are not currently invited to an interview.")
        if not candidate.interview_questions or candidate.interview_questions.is_empty():
            raise PreconditionError("Interview questions are not ready.")
        self.vendor.ensure_configured()

        self.candidate = candidate
        self.state = SessionState.CONNECTING
        try:
            self.call = await self.vendor.start_call(self.build_assistant(candidate))
        except Exception as e:
            self.state = SessionState.FAILED
            self.last_error = str(e)
            self._close()
            raise

        logger.info(f"Interview call {self.call.call_id} started for {candidate.uid}")
        return self.call

    # =========================================================================
    # EVENTS
    # =========================================================================

    async def handle_event(self, event: VoiceEvent) -> None:
        if not self.state.is_live:
            logger.debug(f"Ignoring {event.type.value} in state {self.state.value} for {self.uid}")
            return

        if event.type == VoiceEventType.CALL_START:
            self.state = SessionState.ACTIVE
            logger.info(f"Interview call connected for {self.uid}")

        elif event.type == VoiceEventType.TRANSCRIPT:
            self._handle_transcript(event)

        elif event.type == VoiceEventType.CALL_END:
            await self._finalize()

        elif event.type == VoiceEventType.ERROR:
            classification = classify_vendor_error(event.error)
            if isinstance(classification, CallEnded):
                logger.info(f"Vendor reported meeting ended for {self.uid}")
                await self._finalize()
            else:
                await self._fail(classification.reason)

    def _handle_transcript(self, event: VoiceEvent) -> None:
        speaker = Speaker.AI if event.role == "assistant" else Speaker.CANDIDATE
        if event.transcript_type == TranscriptType.FINAL:
            text = event.text.strip()
            if text:
                self.utterances.append(Utterance(speaker=speaker, text=text))
            if speaker == Speaker.CANDIDATE:
                self.live_preview = ""
        elif speaker == Speaker.CANDIDATE:
            self.live_preview = event.text

    async def end(self) -> bool:
        """
        Candidate-initiated stop.

        Returns:
            True if this call performed the finalize
        """
        if not self.state.is_live:
            return False
        if self.call is not None:
            await self.vendor.end_call(self.call)
        return await self._finalize()

    # =========================================================================
    # TERMINATION
    # =========================================================================

    def snapshot(self) -> InterviewSnapshot:
        candidate = self.candidate
        return InterviewSnapshot(
            uid=candidate.uid,
            call_id=self.call_id,
            candidate_name=candidate.display_name(),
            headline=candidate.headline or "",
            questions=candidate.interview_questions,
            utterances=tuple(self.utterances),
            ended_at=self.clock(),
        )

    async def _finalize(self) -> bool:
        if self.state in (SessionState.FINALIZING, SessionState.FINALIZED):
            return False
        self.state = SessionState.FINALIZING
        self.live_preview = ""

        try:
            snapshot = self.snapshot()
            written = await self.lifecycle.mark_interview_completed(snapshot)
            if not written:
                logger.warning(f"Interview for {snapshot.uid} was already finalized")
                return False

            try:
                ensure_transcript(snapshot)
            except EmptyInputError:
                logger.warning(f"Interview for {snapshot.uid} ended with no interaction")
                outcome = self.scoring_worker.engine.error_outcome(EMPTY_INTERVIEW_MESSAGE)
                await self.lifecycle.record_scoring_outcome(snapshot.uid, outcome)
            else:
                await self.scoring_worker.enqueue(snapshot.uid)

            logger.info(
                f"Interview finalized for {snapshot.uid} | utterances={len(snapshot.utterances)}"
            )
            return True
        finally:
            self.state = SessionState.FINALIZED
            self._close()

    async def _fail(self, reason: str) -> None:
        """Real vendor failure: drop the session, leave the status as invited."""
        logger.error(f"Interview call failed for {self.uid}: {reason}")
        self.state = SessionState.FAILED
        self.last_error = reason
        self.live_preview = ""
        if self.call is not None:
            await self.vendor.end_call(self.call)
        self._close()

    def _close(self) -> None:
        if self.on_close:
            self.on_close(self)


class InterviewSessionManager:
    """Holds at most one live driver per candidate and routes vendor events."""

    def __init__(
        self,
        lifecycle: TalentLifecycle,
        vendor: VoiceVendorClient,
        scoring_worker: ScoringWorker,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.lifecycle = lifecycle
        self.vendor = vendor
        self.scoring_worker = scoring_worker
        self.settings = settings or get_settings()
        self.clock = clock

        self._by_uid: dict[str, InterviewSessionDriver] = {}
        self._by_call: dict[str, InterviewSessionDriver] = {}

    def get(self, uid: str) -> InterviewSessionDriver | None:
        return self._by_uid.get(uid)

    def get_by_call(self, call_id: str) -> InterviewSessionDriver | None:
        return self._by_call.get(call_id)

    async def begin(self, uid: str, caller_id: str, caller_role: UserRole) -> InterviewSessionDriver:
        if uid in self._by_uid:
            raise PreconditionError("An interview is already in progress.")

        candidate = await self.lifecycle.get_profile(uid)
        driver = InterviewSessionDriver(
            lifecycle=self.lifecycle,
            vendor=self.vendor,
            scoring_worker=self.scoring_worker,
            settings=self.settings,
            clock=self.clock,
            on_close=self._release,
        )
        # Reserve the slot before the vendor round-trip
        self._by_uid[uid] = driver
        try:
            call = await driver.begin(candidate, caller_id, caller_role)
        except Exception:
            self._by_uid.pop(uid, None)
            raise
        self._by_call[call.call_id] = driver
        return driver

    async def end(self, uid: str) -> bool:
        driver = self._by_uid.get(uid)
        if driver is None:
            return False
        return await driver.end()

    async def dispatch(self, event: VoiceEvent) -> bool:
        """
        Route a vendor event to its driver.

        Returns:
            False if no live driver owns the event's call
        """
        driver = self._by_call.get(event.call_id) if event.call_id else None
        if driver is None:
            logger.debug(f"No live session for call {event.call_id}, event {event.type.value} dropped")
            return False
        await driver.handle_event(event)
        return True

    def _release(self, driver: InterviewSessionDriver) -> None:
        if driver.uid and self._by_uid.get(driver.uid) is driver:
            del self._by_uid[driver.uid]
        if driver.call_id and self._by_call.get(driver.call_id) is driver:
            del self._by_call[driver.call_id]

    async def close(self) -> None:
        """Hang up live calls on shutdown. Profiles stay invited."""
        for driver in list(self._by_uid.values()):
            if driver.call is not None and driver.state.is_live:
                await self.vendor.end_call(driver.call)
        self._by_uid.clear()
        self._by_call.clear()
