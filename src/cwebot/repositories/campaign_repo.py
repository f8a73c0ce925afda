"""
Persistent storage for escalation campaigns.

``user_id`` is the primary key, so a user has at most one campaign. Writing
a second one for the same user replaces the first (last write wins).
"""

from __future__ import annotations

from typing import List, Optional

import aiosqlite

from cwebot.datatypes.community_datatypes import CampaignRecord
from cwebot.util.time_utils import from_db_time, to_db_time


def _row_to_campaign(row) -> CampaignRecord:
    return CampaignRecord(
        user_id=row["user_id"],
        initiator_id=row["initiator_id"],
        message_id=row["message_id"],
        start=from_db_time(row["starts_at"]),
        end=from_db_time(row["ends_at"]),
        minimal=row["minimal"],
        campaign_type=row["type"],
        reason=row["reason"],
    )


class CampaignRepo:
    """Low-level CRUD for the ``campaigns`` table."""

    @staticmethod
    async def upsert(conn: aiosqlite.Connection, campaign: CampaignRecord) -> None:
        """Insert or replace the campaign of ``campaign.user_id``."""
        await conn.execute(
            """
            INSERT INTO campaigns (user_id, initiator_id, message_id, starts_at, ends_at, minimal, type, reason)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                initiator_id = excluded.initiator_id,
                message_id   = excluded.message_id,
                starts_at    = excluded.starts_at,
                ends_at      = excluded.ends_at,
                minimal      = excluded.minimal,
                type         = excluded.type,
                reason       = excluded.reason
            """,
            (
                campaign.user_id,
                campaign.initiator_id,
                campaign.message_id,
                to_db_time(campaign.start),
                to_db_time(campaign.end),
                campaign.minimal,
                campaign.campaign_type,
                campaign.reason,
            ),
        )

    @staticmethod
    async def delete(conn: aiosqlite.Connection, user_id: int) -> bool:
        cursor = await conn.execute("DELETE FROM campaigns WHERE user_id = ?", (user_id,))
        return cursor.rowcount > 0

    @staticmethod
    async def get(conn: aiosqlite.Connection, user_id: int) -> Optional[CampaignRecord]:
        cursor = await conn.execute("SELECT * FROM campaigns WHERE user_id = ?", (user_id,))
        row = await cursor.fetchone()
        return _row_to_campaign(row) if row else None

    @staticmethod
    async def get_all(conn: aiosqlite.Connection) -> List[CampaignRecord]:
        cursor = await conn.execute("SELECT * FROM campaigns ORDER BY starts_at ASC")
        rows = await cursor.fetchall()
        return [_row_to_campaign(row) for row in rows]
