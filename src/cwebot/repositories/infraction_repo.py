"""
Persistent storage for infractions and the mutes attached to them.

Timestamps are stored as UTC ISO-8601 text with a fixed microsecond field,
so ``ORDER BY created_at`` is chronological.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

import aiosqlite

from cwebot.datatypes.infraction_datatypes import InfractionRecord, InfractionType, MuteRecord
from cwebot.util.time_utils import from_db_time, to_db_time


def _row_to_infraction(row) -> InfractionRecord:
    return InfractionRecord(
        infraction_id=row["infraction_id"],
        user_id=row["user_id"],
        username=row["username"],
        staff_id=row["staff_id"],
        staff_username=row["staff_username"],
        infraction_type=InfractionType(row["type"]),
        reason=row["reason"],
        created_at=from_db_time(row["created_at"]),
    )


def _row_to_mute(row) -> MuteRecord:
    return MuteRecord(
        infraction_id=row["infraction_id"],
        user_id=row["user_id"],
        mute_start=from_db_time(row["mute_start"]),
        mute_end=from_db_time(row["mute_end"]),
    )


class InfractionRepo:
    """Low-level CRUD for the ``infractions`` and ``mutes`` tables."""

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    async def insert(conn: aiosqlite.Connection, record: InfractionRecord) -> None:
        await conn.execute(
            """
            INSERT INTO infractions (infraction_id, user_id, username, staff_id, staff_username, type, reason, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.infraction_id,
                record.user_id,
                record.username,
                record.staff_id,
                record.staff_username,
                record.infraction_type.value,
                record.reason,
                to_db_time(record.created_at),
            ),
        )

    @staticmethod
    async def insert_mute(conn: aiosqlite.Connection, mute: MuteRecord) -> None:
        await conn.execute(
            "INSERT INTO mutes (infraction_id, user_id, mute_start, mute_end) VALUES (?, ?, ?, ?)",
            (mute.infraction_id, mute.user_id, to_db_time(mute.mute_start), to_db_time(mute.mute_end)),
        )

    @staticmethod
    async def delete(conn: aiosqlite.Connection, infraction_id: str) -> bool:
        """Remove an infraction and any mute attached to it."""
        await conn.execute("DELETE FROM mutes WHERE infraction_id = ?", (infraction_id,))
        cursor = await conn.execute("DELETE FROM infractions WHERE infraction_id = ?", (infraction_id,))
        return cursor.rowcount > 0

    @staticmethod
    async def delete_mute(conn: aiosqlite.Connection, infraction_id: str) -> bool:
        """Remove a mute row once the mute has been lifted. Returns True if a row went away."""
        cursor = await conn.execute("DELETE FROM mutes WHERE infraction_id = ?", (infraction_id,))
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    async def get(conn: aiosqlite.Connection, infraction_id: str) -> Optional[InfractionRecord]:
        cursor = await conn.execute("SELECT * FROM infractions WHERE infraction_id = ?", (infraction_id,))
        row = await cursor.fetchone()
        return _row_to_infraction(row) if row else None

    @staticmethod
    async def get_for_user(conn: aiosqlite.Connection, user_id: int) -> List[InfractionRecord]:
        """All infractions of ``user_id``, oldest first."""
        cursor = await conn.execute(
            "SELECT * FROM infractions WHERE user_id = ? ORDER BY created_at ASC, rowid ASC",
            (user_id,),
        )
        rows = await cursor.fetchall()
        return [_row_to_infraction(row) for row in rows]

    @staticmethod
    async def get_mute(conn: aiosqlite.Connection, infraction_id: str) -> Optional[MuteRecord]:
        cursor = await conn.execute("SELECT * FROM mutes WHERE infraction_id = ?", (infraction_id,))
        row = await cursor.fetchone()
        return _row_to_mute(row) if row else None

    @staticmethod
    async def get_expired_mutes(conn: aiosqlite.Connection, now: datetime) -> List[MuteRecord]:
        """Return every mute whose ``mute_end`` is at or before ``now``."""
        cursor = await conn.execute(
            "SELECT * FROM mutes WHERE mute_end <= ? ORDER BY mute_end ASC",
            (to_db_time(now),),
        )
        rows = await cursor.fetchall()
        return [_row_to_mute(row) for row in rows]

    @staticmethod
    async def get_active_mute_for_user(
        conn: aiosqlite.Connection, user_id: int, now: datetime
    ) -> Optional[MuteRecord]:
        """The latest-ending mute of ``user_id`` that has not expired yet."""
        cursor = await conn.execute(
            "SELECT * FROM mutes WHERE user_id = ? AND mute_end > ? ORDER BY mute_end DESC LIMIT 1",
            (user_id, to_db_time(now)),
        )
        row = await cursor.fetchone()
        return _row_to_mute(row) if row else None
