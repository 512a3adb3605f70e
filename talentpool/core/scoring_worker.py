"""
Background scoring worker for TalentPool.

The interview driver only records the finalize write (status +
pending snapshot) and enqueues the candidate id. This worker owns the
long-running summary call and the terminal `report_ready` write, so
scoring survives the candidate closing the page.

A periodic reconcile sweep picks up profiles left in the processing
status by a crash or restart.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable

from talentpool.config.settings import Settings, get_settings
from talentpool.core.errors import ProfileNotFoundError
from talentpool.core.lifecycle import TalentLifecycle
from talentpool.core.scoring import ScoringEngine, utc_now
from talentpool.models.profile import CandidateProfile, TalentStatus, UserRole

logger = logging.getLogger(__name__)

LOST_TRANSCRIPT_MESSAGE = "Interview transcript was lost before scoring could complete."


class ScoringWorker:
    """
    In-process scoring queue.

    Jobs are candidate ids; the job payload itself lives on the profile
    (`pending_scoring`), so a job can always be rebuilt from the store.
    """

    def __init__(
        self,
        lifecycle: TalentLifecycle,
        engine: ScoringEngine,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.lifecycle = lifecycle
        self.engine = engine
        self.settings = settings or get_settings()
        self.clock = clock

        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._queued: set[str] = set()
        self._tasks: list[asyncio.Task] = []

    @property
    def stale_after(self) -> timedelta:
        return timedelta(seconds=self.settings.scoring_stale_after_seconds)

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> None:
        """Start the consumer and the periodic reconcile loop."""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._run(), name="scoring-worker"),
            asyncio.create_task(self._reconcile_loop(), name="scoring-reconcile"),
        ]
        logger.info("Scoring worker started")

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Scoring worker stopped")

    async def enqueue(self, uid: str) -> None:
        if uid in self._queued:
            logger.debug(f"Scoring job for {uid} already queued")
            return
        self._queued.add(uid)
        await self._queue.put(uid)
        logger.info(f"Queued scoring job for {uid}")

    async def drain(self) -> None:
        """Wait until every queued job has been processed."""
        await self._queue.join()

    # =========================================================================
    # JOBS
    # =========================================================================

    async def process(self, uid: str) -> bool:
        """
        Score one candidate and write the terminal outcome.

        Returns:
            True if this call wrote `report_ready`
        """
        try:
            profile = await self.lifecycle.get_profile(uid)
        except ProfileNotFoundError:
            logger.warning(f"Scoring job for missing profile {uid} dropped")
            return False

        if profile.talent_status != TalentStatus.INTERVIEW_COMPLETED_PROCESSING_SUMMARY:
            logger.info(f"Scoring job for {uid} skipped, status is {profile.talent_status}")
            return False

        if profile.pending_scoring is None:
            logger.error(f"Profile {uid} is processing without a transcript snapshot")
            outcome = self.engine.error_outcome(LOST_TRANSCRIPT_MESSAGE)
        else:
            outcome = await self.engine.score(profile.pending_scoring)

        written = await self.lifecycle.record_scoring_outcome(uid, outcome)
        if written and not outcome.is_error and self.engine.ai_reasoning is not None:
            self.engine.ai_reasoning.record_score(
                name="weighted_total_score",
                value=outcome.weighted_total_score,
                comment=f"{uid}: {outcome.talent_tier.value}",
            )
        return written

    async def _run(self) -> None:
        while True:
            uid = await self._queue.get()
            self._queued.discard(uid)
            try:
                await self.process(uid)
            except asyncio.CancelledError:
                raise
            except Exception:
                # The profile stays in processing and the next sweep retries it
                logger.exception(f"Scoring job for {uid} failed")
            finally:
                self._queue.task_done()

    # =========================================================================
    # RECONCILIATION
    # =========================================================================

    def _is_stale(self, profile: CandidateProfile, stale_after: timedelta) -> bool:
        started = profile.processing_started_at or profile.updated_at
        if started is None:
            return True
        return self.clock() - started >= stale_after

    async def reconcile(self, stale_after: timedelta | None = None) -> int:
        """
        Recover profiles stuck in the processing status.

        Stale profiles with a snapshot are re-queued; those without one get
        the error outcome written directly.

        Returns:
            Number of profiles recovered
        """
        threshold = self.stale_after if stale_after is None else stale_after
        documents = await self.lifecycle.store.list_profiles(
            role=UserRole.TALENT.value,
            status=TalentStatus.INTERVIEW_COMPLETED_PROCESSING_SUMMARY.value,
        )

        recovered = 0
        for document in documents:
            profile = CandidateProfile.from_document(document)
            if not self._is_stale(profile, threshold):
                continue
            if profile.pending_scoring is not None:
                await self.enqueue(profile.uid)
            else:
                await self.process(profile.uid)
            recovered += 1

        if recovered:
            logger.info(f"Reconcile recovered {recovered} stuck scoring job(s)")
        return recovered

    async def _reconcile_loop(self) -> None:
        # Anything already processing at startup belongs to a previous process
        first_pass = timedelta(0)
        while True:
            try:
                await self.reconcile(stale_after=first_pass)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Scoring reconcile sweep failed")
            first_pass = None
            await asyncio.sleep(self.settings.reconcile_interval_seconds)
