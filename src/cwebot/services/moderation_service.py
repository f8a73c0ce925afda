"""
Infraction lifecycle: validate a moderation request, persist the audit
record, and report the outcome.

The service never talks to Discord. It receives plain IDs and names, builds
:class:`InfractionRecord` (and :class:`MuteRecord` for mutes), and hands them
to the data access layer in a single call so both rows commit together.
Enforcing the action on the guild happens afterwards in the command layer.

Usage:
    service = ModerationService(database)
    result = await service.apply_infraction(
        InfractionType.MUTE, target_user_id=42,
        staff=StaffMember(7, "mod"), reason="spam", duration="1h15m",
    )
    if result.ok:
        ...
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, List

from cwebot.database.database import Database
from cwebot.datatypes.infraction_datatypes import (
    PAST_TENSE,
    ActionError,
    InfractionRecord,
    InfractionResult,
    InfractionType,
    MuteRecord,
    StaffMember,
    new_infraction_id,
)
from cwebot.util.duration import try_parse_duration
from cwebot.util.logger import get_logger
from cwebot.util.pagination import PAGE_SIZE, page_count, paginate
from cwebot.util.time_utils import utcnow

logger = get_logger("moderation_service")

# Discord rejects audit log reasons longer than this
MAX_REASON_LENGTH = 512


def format_type(infraction_type: InfractionType) -> str:
    """Past-tense verb for an infraction type, e.g. ``"banned"``."""
    return PAST_TENSE[infraction_type]


class ModerationService:
    """Applies infractions and answers history queries.

    Args:
        database: Data access layer used for every read and write
        clock: Returns the current UTC time; injectable for tests
    """

    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow) -> None:
        self.database = database
        self.clock = clock

    @staticmethod
    def resolve_duration(duration: timedelta | str | None) -> timedelta | None:
        """Turn the caller's duration into a positive timedelta, or None if unusable."""
        if isinstance(duration, str):
            duration = try_parse_duration(duration)
        if duration is None or duration <= timedelta(0):
            return None
        return duration

    @staticmethod
    def mute_end(start: datetime, length: timedelta) -> datetime | None:
        """``start + length``, or None when that falls past ``datetime.max``."""
        try:
            return start + length
        except OverflowError:
            return None

    async def apply_infraction(
        self,
        infraction_type: InfractionType,
        target_user_id: int,
        staff: StaffMember,
        reason: str,
        duration: timedelta | str | None = None,
        *,
        target_username: str = "",
    ) -> InfractionResult:
        """
        Record a moderation action against ``target_user_id``.

        Args:
            infraction_type: Kind of action
            target_user_id: Snowflake of the member being moderated
            staff: Who is taking the action
            reason: Non-empty reason text
            duration: Mute length as a timedelta or a ``1h15m`` string.
                Required for MUTE, ignored otherwise.
            target_username: Display name of the target, stored for history

        Returns:
            InfractionResult: ``ok`` with the stored records, or an
            :class:`ActionError`. Validation failures never touch the database.
        """
        reason = (reason or "").strip()
        if not reason:
            return InfractionResult.failure(ActionError.INVALID_REASON, "A reason is required.")
        if len(reason) > MAX_REASON_LENGTH:
            return InfractionResult.failure(
                ActionError.INVALID_REASON,
                f"Reasons are limited to {MAX_REASON_LENGTH} characters.",
            )

        now = self.clock()
        mute_end: datetime | None = None
        if infraction_type is InfractionType.MUTE:
            mute_length = self.resolve_duration(duration)
            if mute_length is not None:
                mute_end = self.mute_end(now, mute_length)
            if mute_end is None:
                return InfractionResult.failure(
                    ActionError.INVALID_DURATION,
                    "Please enter a valid timespan, ex: 1h15m",
                )

        record = InfractionRecord(
            infraction_id=new_infraction_id(),
            user_id=target_user_id,
            username=target_username,
            staff_id=staff.user_id,
            staff_username=staff.display_name,
            infraction_type=infraction_type,
            reason=reason,
            created_at=now,
        )

        mute = None
        if mute_end is not None:
            mute = MuteRecord(
                infraction_id=record.infraction_id,
                user_id=target_user_id,
                mute_start=now,
                mute_end=mute_end,
            )

        if not await self.database.create_infraction(record, mute):
            logger.warning(
                "[MODERATION] Could not persist %s of user %s by %s",
                infraction_type, target_user_id, staff.user_id,
            )
            return InfractionResult.failure(
                ActionError.PERSISTENCE_FAILURE,
                f"Failed to {infraction_type} user {target_user_id}",
            )

        logger.info(
            "[MODERATION] %s %s (infraction %s, staff %s)",
            format_type(infraction_type).capitalize(), target_user_id, record.infraction_id, staff.user_id,
        )
        return InfractionResult(record=record, mute=mute)

    async def revoke_infraction(self, infraction_id: str) -> bool:
        """Remove a stored infraction, and its mute, whose action never happened on Discord."""
        removed = await self.database.delete_infraction(infraction_id)
        if removed:
            logger.info("[MODERATION] Revoked infraction %s", infraction_id)
        return removed

    async def get_user_infractions(self, user_id: int) -> List[InfractionRecord]:
        """All infractions of a member, oldest first."""
        return await self.database.get_user_infractions(user_id)

    async def get_infraction_page(
        self, user_id: int, page: int, page_size: int = PAGE_SIZE
    ) -> tuple[List[InfractionRecord], int]:
        """
        One page of a member's history.

        Returns:
            ``(records, total_pages)``; records is empty for out-of-range pages.
        """
        infractions = await self.get_user_infractions(user_id)
        return paginate(infractions, page, page_size), page_count(len(infractions), page_size)

