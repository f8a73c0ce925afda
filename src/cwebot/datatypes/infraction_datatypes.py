"""
Infraction and mute records plus the result type of a moderation action.

These dataclasses mirror rows of the ``infractions`` and ``mutes`` tables
one-to-one. They carry plain Discord snowflakes (``int``) rather than
py-cord objects so the service and database layers never touch the gateway.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum


class InfractionType(Enum):
    """Kinds of moderation action that leave an infraction behind."""

    WARN = "warn"
    KICK = "kick"
    BAN = "ban"
    MUTE = "mute"

    def __str__(self) -> str:
        return self.value


# Past tense used in replies, e.g. "Successfully banned someone#0001"
PAST_TENSE = {
    InfractionType.WARN: "warned",
    InfractionType.KICK: "kicked",
    InfractionType.BAN: "banned",
    InfractionType.MUTE: "muted",
}


class ActionError(Enum):
    """Reasons a moderation action can fail before or during persistence."""

    INVALID_DURATION = "invalid_duration"
    INVALID_REASON = "invalid_reason"
    PERSISTENCE_FAILURE = "persistence_failure"
    PERMISSION_DENIED = "permission_denied"

    def __str__(self) -> str:
        return self.value


def new_infraction_id() -> str:
    """Return a fresh infraction id (uuid4, canonical text form)."""
    return str(uuid.uuid4())


@dataclass(slots=True, frozen=True)
class InfractionRecord:
    """A single row of the ``infractions`` table.

    Attributes:
        infraction_id: uuid4 text, never reused
        user_id: Snowflake of the member the action was taken against
        staff_id: Snowflake of the staff member who took the action
        staff_username: Display name of the staff member at the time
        infraction_type: What happened
        reason: Free text supplied by staff
        created_at: Timezone-aware UTC creation time
        username: Display name of the target at the time, may be empty
    """
    infraction_id: str
    user_id: int
    staff_id: int
    staff_username: str
    infraction_type: InfractionType
    reason: str
    created_at: datetime
    username: str = ""


@dataclass(slots=True, frozen=True)
class MuteRecord:
    """A row of the ``mutes`` table, linked to a MUTE infraction."""
    infraction_id: str
    user_id: int
    mute_start: datetime
    mute_end: datetime

    @property
    def duration(self) -> timedelta:
        return self.mute_end - self.mute_start


@dataclass(slots=True, frozen=True)
class StaffMember:
    """Who performed an action: just the parts that end up in the record."""
    user_id: int
    display_name: str


@dataclass(slots=True)
class InfractionResult:
    """Outcome of :meth:`ModerationService.apply_infraction`.

    Exactly one of ``record`` and ``error`` is set. ``mute`` is only set for a
    successful MUTE.
    """
    record: InfractionRecord | None = None
    mute: MuteRecord | None = None
    error: ActionError | None = None
    detail: str = field(default="")

    @property
    def ok(self) -> bool:
        return self.error is None and self.record is not None

    @classmethod
    def failure(cls, error: ActionError, detail: str = "") -> "InfractionResult":
        return cls(error=error, detail=detail)
