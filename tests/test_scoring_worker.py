from datetime import timedelta

from conftest import START_TIME
from talentpool.core.scoring_worker import LOST_TRANSCRIPT_MESSAGE
from talentpool.models.profile import TalentStatus
from talentpool.models.report import ErrorReport, parse_report_payload
from talentpool.models.transcript import InterviewSnapshot, Speaker, Utterance


async def processing_talent(lifecycle, invited_talent, uid="talent-1") -> str:
    await invited_talent(uid)
    await lifecycle.mark_interview_completed(InterviewSnapshot(
        uid=uid,
        candidate_name="Ada Lovelace",
        headline="Senior Data Engineer",
        utterances=(Utterance(speaker=Speaker.CANDIDATE, text="I like streaming systems."),),
        ended_at=START_TIME,
    ))
    return uid


async def test_process_skips_finished_profiles(worker, lifecycle, invited_talent, fake_ai):
    uid = await invited_talent()
    assert await worker.process(uid) is False
    assert await worker.process("ghost") is False
    assert fake_ai.summary_requests == []


async def test_reconcile_ignores_fresh_jobs(worker, lifecycle, invited_talent, clock):
    await processing_talent(lifecycle, invited_talent)
    clock.advance(minutes=5)

    assert await worker.reconcile() == 0
    assert worker._queue.qsize() == 0


async def test_reconcile_requeues_stale_snapshot(worker, lifecycle, invited_talent, clock):
    uid = await processing_talent(lifecycle, invited_talent)
    clock.advance(minutes=16)

    assert await worker.reconcile() == 1
    assert worker._queue.qsize() == 1

    # Already queued jobs are not duplicated
    await worker.reconcile()
    assert worker._queue.qsize() == 1

    assert await worker.process(uid) is True
    assert (await lifecycle.get_profile(uid)).talent_status is TalentStatus.REPORT_READY


async def test_reconcile_without_snapshot_writes_error_report(worker, lifecycle, store, invited_talent, clock, fake_ai):
    uid = await processing_talent(lifecycle, invited_talent)
    await store.update(uid, {"pending_scoring": None})
    clock.advance(minutes=16)

    assert await worker.reconcile() == 1

    profile = await lifecycle.get_profile(uid)
    assert profile.talent_status is TalentStatus.REPORT_READY
    report = parse_report_payload(profile.interview_report_summary)
    assert isinstance(report, ErrorReport)
    assert report.error == LOST_TRANSCRIPT_MESSAGE
    assert fake_ai.summary_requests == []


async def test_startup_sweep_recovers_everything(worker, lifecycle, invited_talent):
    uid = await processing_talent(lifecycle, invited_talent)

    assert await worker.reconcile(stale_after=timedelta(0)) == 1
    await worker.start()
    await worker.drain()
    await worker.stop()

    assert (await lifecycle.get_profile(uid)).talent_status is TalentStatus.REPORT_READY
    assert not worker.running
