import asyncio

import pytest

from talentpool.core.errors import ProfileNotFoundError
from talentpool.core.profile_store import InMemoryProfileStore, SQLProfileStore


@pytest.fixture(params=["memory", "sql"])
async def profile_store(request, tmp_path):
    if request.param == "memory":
        backend = InMemoryProfileStore()
    else:
        backend = SQLProfileStore(f"sqlite+aiosqlite:///{tmp_path / 'profiles.db'}")
    await backend.init()
    yield backend
    await backend.close()


async def test_get_missing(profile_store):
    assert await profile_store.get("nobody") is None


async def test_set_stamps_timestamps(profile_store):
    await profile_store.set("t1", {"role": "talent", "talent_status": "new", "full_name": "Ada"})
    document = await profile_store.get("t1")

    assert document["uid"] == "t1"
    assert document["full_name"] == "Ada"
    assert document["created_at"]
    assert document["updated_at"]


async def test_update_merges_fields(profile_store):
    await profile_store.set("t1", {"role": "talent", "talent_status": "new", "headline": "Engineer"})
    before = await profile_store.get("t1")

    assert await profile_store.update("t1", {"talent_status": "profile_submitted", "country": None})

    document = await profile_store.get("t1")
    assert document["talent_status"] == "profile_submitted"
    assert document["headline"] == "Engineer"
    assert document["country"] is None
    assert document["updated_at"] >= before["updated_at"]


async def test_compare_and_set(profile_store):
    await profile_store.set("t1", {"role": "talent", "talent_status": "interview_invited"})

    assert await profile_store.update(
        "t1",
        {"talent_status": "interview_completed_processing_summary"},
        expected={"talent_status": "interview_invited"},
    )
    assert not await profile_store.update(
        "t1",
        {"talent_status": "interview_completed_processing_summary", "marker": 1},
        expected={"talent_status": "interview_invited"},
    )
    assert "marker" not in await profile_store.get("t1")


async def test_update_missing_raises(profile_store):
    with pytest.raises(ProfileNotFoundError):
        await profile_store.update("ghost", {"a": 1})


async def test_list_filters(profile_store):
    await profile_store.set("t1", {"role": "talent", "talent_status": "new"})
    await profile_store.set("t2", {"role": "talent", "talent_status": "report_ready"})
    await profile_store.set("r1", {"role": "recruiter"})

    talents = await profile_store.list_profiles(role="talent")
    assert sorted(d["uid"] for d in talents) == ["t1", "t2"]

    ready = await profile_store.list_profiles(role="talent", status="report_ready")
    assert [d["uid"] for d in ready] == ["t2"]

    assert len(await profile_store.list_profiles()) == 3


async def test_sql_store_persists_across_instances(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'profiles.db'}"
    first = SQLProfileStore(url)
    await first.init()
    await first.set("t1", {"role": "talent", "talent_status": "new"})
    await first.close()

    second = SQLProfileStore(url)
    await second.init()
    assert (await second.get("t1"))["talent_status"] == "new"
    await second.close()


async def test_concurrent_compare_and_set_applies_once(profile_store):
    await profile_store.set("t1", {"role": "talent", "talent_status": "interview_invited"})

    results = await asyncio.gather(*(
        profile_store.update(
            "t1",
            {"talent_status": "interview_completed_processing_summary", "writer": writer},
            expected={"talent_status": "interview_invited"},
        )
        for writer in range(5)
    ))

    assert results.count(True) == 1
    document = await profile_store.get("t1")
    assert document["writer"] == results.index(True)


async def test_concurrent_merges_are_not_lost(profile_store):
    await profile_store.set("t1", {"role": "talent", "talent_status": "new"})

    await asyncio.gather(*(
        profile_store.update("t1", {f"field_{n}": n}) for n in range(5)
    ))

    document = await profile_store.get("t1")
    assert all(document[f"field_{n}"] == n for n in range(5))
