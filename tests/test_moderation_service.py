from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from cwebot.datatypes.infraction_datatypes import ActionError, InfractionType, StaffMember
from cwebot.services.moderation_service import MAX_REASON_LENGTH, ModerationService, format_type
from cwebot.util.time_utils import utcnow


STAFF = StaffMember(user_id=7, display_name="mod#0001")


def make_service(fixed_now, *, stored=True, history=None):
    database = SimpleNamespace(
        create_infraction=AsyncMock(return_value=stored),
        get_user_infractions=AsyncMock(return_value=history or []),
        delete_infraction=AsyncMock(return_value=True),
    )
    return ModerationService(database, clock=lambda: fixed_now), database


def test_format_type_is_past_tense():
    assert format_type(InfractionType.WARN) == "warned"
    assert format_type(InfractionType.MUTE) == "muted"


@pytest.mark.asyncio
async def test_warn_creates_one_record(fixed_now):
    service, database = make_service(fixed_now)

    result = await service.apply_infraction(InfractionType.WARN, 42, STAFF, "spam")

    assert result.ok
    assert result.mute is None
    record = result.record
    assert (record.user_id, record.staff_id, record.reason) == (42, 7, "spam")
    assert record.infraction_type is InfractionType.WARN
    assert record.created_at == fixed_now
    database.create_infraction.assert_awaited_once_with(record, None)


@pytest.mark.asyncio
async def test_mute_stores_record_and_mute_together(fixed_now):
    service, database = make_service(fixed_now)

    result = await service.apply_infraction(InfractionType.MUTE, 42, STAFF, "flooding", "1h15m")

    assert result.ok
    assert result.mute.infraction_id == result.record.infraction_id
    assert result.mute.mute_start == fixed_now
    assert result.mute.mute_end == fixed_now + timedelta(minutes=75)
    database.create_infraction.assert_awaited_once_with(result.record, result.mute)


@pytest.mark.asyncio
async def test_mute_accepts_timedelta(fixed_now):
    service, _ = make_service(fixed_now)

    result = await service.apply_infraction(InfractionType.MUTE, 42, STAFF, "flooding", timedelta(seconds=90))

    assert result.mute.duration == timedelta(seconds=90)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "duration", [None, "", "soon", "10", "0m", "-5m", "99999999h", "99999999999999999999h"]
)
async def test_invalid_mute_duration_writes_nothing(fixed_now, duration):
    service, database = make_service(fixed_now)

    result = await service.apply_infraction(InfractionType.MUTE, 42, STAFF, "flooding", duration)

    assert not result.ok
    assert result.error is ActionError.INVALID_DURATION
    assert result.detail == "Please enter a valid timespan, ex: 1h15m"
    database.create_infraction.assert_not_awaited()


@pytest.mark.asyncio
async def test_blank_reason_is_rejected(fixed_now):
    service, database = make_service(fixed_now)

    result = await service.apply_infraction(InfractionType.KICK, 42, STAFF, "   ")

    assert result.error is ActionError.INVALID_REASON
    database.create_infraction.assert_not_awaited()


@pytest.mark.asyncio
async def test_overlong_reason_is_rejected(fixed_now):
    service, database = make_service(fixed_now)

    accepted = await service.apply_infraction(InfractionType.WARN, 42, STAFF, "x" * MAX_REASON_LENGTH)
    rejected = await service.apply_infraction(InfractionType.WARN, 42, STAFF, "x" * (MAX_REASON_LENGTH + 1))

    assert accepted.ok
    assert rejected.error is ActionError.INVALID_REASON
    assert rejected.detail == "Reasons are limited to 512 characters."
    database.create_infraction.assert_awaited_once()


@pytest.mark.asyncio
async def test_default_clock_stamps_current_utc_time():
    database = SimpleNamespace(create_infraction=AsyncMock(return_value=True))
    service = ModerationService(database)
    before = utcnow()

    result = await service.apply_infraction(InfractionType.MUTE, 42, STAFF, "flooding", "10m")

    assert result.ok
    assert before <= result.record.created_at <= utcnow()
    assert result.record.created_at.tzinfo is not None
    assert result.mute.mute_end - result.mute.mute_start == timedelta(minutes=10)


@pytest.mark.asyncio
async def test_duration_is_ignored_for_non_mutes(fixed_now):
    service, database = make_service(fixed_now)

    result = await service.apply_infraction(InfractionType.BAN, 42, STAFF, "raid", "garbage")

    assert result.ok
    assert result.mute is None
    database.create_infraction.assert_awaited_once()


@pytest.mark.asyncio
async def test_persistence_failure_is_reported(fixed_now):
    service, _ = make_service(fixed_now, stored=False)

    result = await service.apply_infraction(InfractionType.KICK, 42, STAFF, "spam")

    assert not result.ok
    assert result.error is ActionError.PERSISTENCE_FAILURE
    assert result.detail == "Failed to kick user 42"


@pytest.mark.asyncio
async def test_each_infraction_gets_a_fresh_id(fixed_now):
    service, _ = make_service(fixed_now)

    first = await service.apply_infraction(InfractionType.WARN, 42, STAFF, "one")
    second = await service.apply_infraction(InfractionType.WARN, 42, STAFF, "two")

    assert first.record.infraction_id != second.record.infraction_id


@pytest.mark.asyncio
async def test_infraction_page(fixed_now):
    history = [SimpleNamespace(reason=str(i)) for i in range(25)]
    service, _ = make_service(fixed_now, history=history)

    first, total = await service.get_infraction_page(42, 0)
    assert total == 2
    assert len(first) == 20

    second, _ = await service.get_infraction_page(42, 1)
    assert [r.reason for r in second] == ["20", "21", "22", "23", "24"]

    beyond, total = await service.get_infraction_page(42, 5)
    assert beyond == []
    assert total == 2


@pytest.mark.asyncio
async def test_revoke_infraction(fixed_now):
    service, database = make_service(fixed_now)

    assert await service.revoke_infraction("abc") is True
    database.delete_infraction.assert_awaited_once_with("abc")
