import uuid
from datetime import timedelta

from cwebot.datatypes.infraction_datatypes import (
    PAST_TENSE,
    ActionError,
    InfractionRecord,
    InfractionResult,
    InfractionType,
    MuteRecord,
    new_infraction_id,
)


def test_ban_is_its_own_type():
    assert InfractionType("ban") is InfractionType.BAN
    assert InfractionType.BAN is not InfractionType.KICK
    assert str(InfractionType.MUTE) == "mute"


def test_every_type_has_a_past_tense():
    assert set(PAST_TENSE) == set(InfractionType)
    assert PAST_TENSE[InfractionType.BAN] == "banned"


def test_new_infraction_ids_are_unique_uuid4():
    first, second = new_infraction_id(), new_infraction_id()

    assert first != second
    assert uuid.UUID(first).version == 4


def test_mute_duration(fixed_now):
    mute = MuteRecord("id", 42, fixed_now, fixed_now + timedelta(minutes=75))
    assert mute.duration == timedelta(minutes=75)


def test_infraction_result_ok_and_failure(fixed_now):
    record = InfractionRecord("id", 42, 7, "mod", InfractionType.WARN, "spam", fixed_now)

    assert InfractionResult(record=record).ok is True

    failed = InfractionResult.failure(ActionError.INVALID_DURATION, "bad")
    assert failed.ok is False
    assert failed.record is None
    assert failed.detail == "bad"
