"""
Tests for the SQLite data access layer, run against a real temporary file.
"""

import asyncio
from datetime import timedelta

import pytest
import pytest_asyncio

from cwebot.database.database import Database
from cwebot.datatypes.community_datatypes import (
    CampaignRecord,
    RequestRecord,
    SubmissionState,
    SuggestionRecord,
    TagRecord,
)
from cwebot.datatypes.infraction_datatypes import (
    InfractionRecord,
    InfractionType,
    MuteRecord,
    new_infraction_id,
)


@pytest_asyncio.fixture
async def test_db(tmp_path):
    """Create a temporary test database."""
    db = Database(tmp_path / "test.db")
    assert await db.initialize()
    yield db
    await db.shutdown()


def make_record(user_id, created_at, infraction_type=InfractionType.WARN, reason="spam"):
    return InfractionRecord(
        infraction_id=new_infraction_id(),
        user_id=user_id,
        staff_id=7,
        staff_username="mod#0001",
        infraction_type=infraction_type,
        reason=reason,
        created_at=created_at,
        username="target#0001",
    )


@pytest.mark.asyncio
async def test_initialize_is_idempotent(test_db):
    assert test_db.initialized
    assert await test_db.initialize() is True


@pytest.mark.asyncio
async def test_create_infraction_round_trips(test_db, fixed_now):
    record = make_record(42, fixed_now)

    assert await test_db.create_infraction(record) is True

    assert await test_db.get_infraction(record.infraction_id) == record
    assert await test_db.get_infraction("missing") is None


@pytest.mark.asyncio
async def test_user_infractions_are_oldest_first(test_db, fixed_now):
    later = make_record(42, fixed_now + timedelta(minutes=5), reason="second")
    earlier = make_record(42, fixed_now, reason="first")
    other_user = make_record(43, fixed_now)

    for record in (later, earlier, other_user):
        assert await test_db.create_infraction(record)

    history = await test_db.get_user_infractions(42)

    assert [r.reason for r in history] == ["first", "second"]
    assert len(await test_db.get_user_infractions(42)) == 2
    assert await test_db.get_user_infractions(999) == []


@pytest.mark.asyncio
async def test_infraction_with_mute_is_stored_together(test_db, fixed_now):
    record = make_record(42, fixed_now, InfractionType.MUTE)
    mute = MuteRecord(record.infraction_id, 42, fixed_now, fixed_now + timedelta(minutes=75))

    assert await test_db.create_infraction(record, mute)

    stored = await test_db.get_mute(record.infraction_id)
    assert stored == mute
    assert stored.duration == timedelta(minutes=75)


@pytest.mark.asyncio
async def test_failed_mute_insert_rolls_back_the_infraction(test_db, fixed_now):
    record = make_record(42, fixed_now, InfractionType.MUTE)
    # mute_end must be after mute_start, so this row violates the table's CHECK
    bad_mute = MuteRecord(record.infraction_id, 42, fixed_now, fixed_now)

    assert await test_db.create_infraction(record, bad_mute) is False

    assert await test_db.get_infraction(record.infraction_id) is None
    assert await test_db.get_user_infractions(42) == []


@pytest.mark.asyncio
async def test_reads_wait_for_an_open_transaction(test_db, fixed_now):
    record = make_record(42, fixed_now, InfractionType.MUTE)
    bad_mute = MuteRecord(record.infraction_id, 42, fixed_now, fixed_now)

    write = asyncio.create_task(test_db.create_infraction(record, bad_mute))
    seen = []
    while not write.done():
        seen.append(len(await test_db.get_user_infractions(42)))
        await asyncio.sleep(0)

    assert await write is False
    # The infraction row inserted before the failing mute is never visible
    assert seen and max(seen) == 0


@pytest.mark.asyncio
async def test_delete_infraction_removes_its_mute(test_db, fixed_now):
    record = make_record(42, fixed_now, InfractionType.MUTE)
    kept = make_record(42, fixed_now + timedelta(minutes=1))
    mute = MuteRecord(record.infraction_id, 42, fixed_now, fixed_now + timedelta(hours=1))
    assert await test_db.create_infraction(record, mute)
    assert await test_db.create_infraction(kept)

    assert await test_db.delete_infraction(record.infraction_id) is True

    assert await test_db.get_infraction(record.infraction_id) is None
    assert await test_db.get_mute(record.infraction_id) is None
    assert await test_db.get_active_mute(42, fixed_now) is None
    assert [r.infraction_id for r in await test_db.get_user_infractions(42)] == [kept.infraction_id]
    assert await test_db.delete_infraction(record.infraction_id) is False


@pytest.mark.asyncio
async def test_duplicate_infraction_id_is_rejected(test_db, fixed_now):
    record = make_record(42, fixed_now)

    assert await test_db.create_infraction(record)
    assert await test_db.create_infraction(record) is False
    assert len(await test_db.get_user_infractions(42)) == 1


@pytest.mark.asyncio
async def test_expired_and_active_mutes(test_db, fixed_now):
    short = make_record(42, fixed_now, InfractionType.MUTE)
    long = make_record(43, fixed_now, InfractionType.MUTE)
    await test_db.create_infraction(short, MuteRecord(short.infraction_id, 42, fixed_now, fixed_now + timedelta(minutes=1)))
    await test_db.create_infraction(long, MuteRecord(long.infraction_id, 43, fixed_now, fixed_now + timedelta(hours=1)))

    check_time = fixed_now + timedelta(minutes=1)
    expired = await test_db.get_expired_mutes(check_time)

    assert [m.infraction_id for m in expired] == [short.infraction_id]
    assert await test_db.get_active_mute(43, check_time) is not None
    assert await test_db.get_active_mute(42, check_time) is None

    assert await test_db.delete_mute(short.infraction_id) is True
    assert await test_db.delete_mute(short.infraction_id) is False
    assert await test_db.get_expired_mutes(check_time) == []
    # The infraction itself stays on record
    assert await test_db.get_infraction(short.infraction_id) is not None


@pytest.mark.asyncio
async def test_campaign_upsert_last_write_wins(test_db, fixed_now):
    first = CampaignRecord(42, 7, 1000, fixed_now, fixed_now + timedelta(days=1), 3, 1, "first")
    second = CampaignRecord(42, 8, 2000, fixed_now, fixed_now + timedelta(days=2), 5, 2, "second")

    assert await test_db.save_campaign(first)
    assert await test_db.save_campaign(second)

    assert await test_db.get_campaign(42) == second
    assert len(await test_db.get_campaigns()) == 1

    assert await test_db.delete_campaign(42) is True
    assert await test_db.get_campaign(42) is None


@pytest.mark.asyncio
async def test_ranks(test_db):
    assert await test_db.create_rank(500)
    assert await test_db.create_rank(100)
    assert await test_db.create_rank(500)

    assert [rank.role_id for rank in await test_db.get_ranks()] == [100, 500]
    assert await test_db.delete_rank(100) is True
    assert await test_db.delete_rank(100) is False


@pytest.mark.asyncio
async def test_requests(test_db):
    request_id = await test_db.create_request(RequestRecord("More channels", 42, 9000))

    assert request_id is not None
    stored = await test_db.get_request(request_id)
    assert stored.state is SubmissionState.PENDING
    assert (await test_db.get_request_by_message(9000)).request_id == request_id

    assert await test_db.set_request_state(request_id, SubmissionState.APPROVED)
    assert (await test_db.get_request(request_id)).state is SubmissionState.APPROVED

    assert await test_db.delete_request(request_id)
    assert await test_db.get_request(request_id) is None
    assert await test_db.set_request_state(request_id, SubmissionState.DENIED) is False


@pytest.mark.asyncio
async def test_suggestions(test_db):
    suggestion_id = await test_db.create_suggestion(SuggestionRecord(42, 9001))

    assert (await test_db.get_suggestion(suggestion_id)).state is SubmissionState.PENDING
    assert await test_db.set_suggestion_state(suggestion_id, SubmissionState.DENIED)
    assert (await test_db.get_suggestion(suggestion_id)).state is SubmissionState.DENIED
    assert await test_db.delete_suggestion(suggestion_id)
    assert await test_db.get_suggestion(suggestion_id) is None


@pytest.mark.asyncio
async def test_tags_lookup_is_case_insensitive(test_db):
    tag_id = await test_db.create_tag(TagRecord(name="Rules", content="Be nice", owner_id=42))
    await test_db.create_tag(TagRecord(name="faq", content="Read the docs", owner_id=43))

    tag = await test_db.get_tag("rules")
    assert tag.tag_id == tag_id
    assert tag.content == "Be nice"

    assert [t.name for t in await test_db.get_tags()] == ["faq", "Rules"]

    assert await test_db.delete_tag(tag_id)
    assert await test_db.get_tag("Rules") is None


@pytest.mark.asyncio
async def test_writes_after_shutdown_raise(tmp_path, fixed_now):
    db = Database(tmp_path / "closed.db")
    await db.initialize()
    await db.shutdown()

    with pytest.raises(RuntimeError):
        await db.create_infraction(make_record(42, fixed_now))
