"""
Persistent storage for ranks, requests, suggestions and tags.

Each table is a flat record keyed by an integer; none references another.
"""

from __future__ import annotations

from typing import List, Optional

import aiosqlite

from cwebot.datatypes.community_datatypes import (
    RankRecord,
    RequestRecord,
    SubmissionState,
    SuggestionRecord,
    TagRecord,
)


class RankRepo:
    """CRUD for the ``ranks`` table."""

    @staticmethod
    async def insert(conn: aiosqlite.Connection, rank: RankRecord) -> None:
        await conn.execute("INSERT OR IGNORE INTO ranks (role_id) VALUES (?)", (rank.role_id,))

    @staticmethod
    async def delete(conn: aiosqlite.Connection, role_id: int) -> bool:
        cursor = await conn.execute("DELETE FROM ranks WHERE role_id = ?", (role_id,))
        return cursor.rowcount > 0

    @staticmethod
    async def get_all(conn: aiosqlite.Connection) -> List[RankRecord]:
        cursor = await conn.execute("SELECT role_id FROM ranks ORDER BY role_id ASC")
        rows = await cursor.fetchall()
        return [RankRecord(role_id=row[0]) for row in rows]


class RequestRepo:
    """CRUD for the ``requests`` table."""

    @staticmethod
    async def insert(conn: aiosqlite.Connection, request: RequestRecord) -> int:
        """Insert ``request`` and return its new id."""
        cursor = await conn.execute(
            "INSERT INTO requests (description, initiator_id, message_id, state) VALUES (?, ?, ?, ?)",
            (request.description, request.initiator_id, request.message_id, int(request.state)),
        )
        return cursor.lastrowid

    @staticmethod
    async def set_state(conn: aiosqlite.Connection, request_id: int, state: SubmissionState) -> bool:
        cursor = await conn.execute("UPDATE requests SET state = ? WHERE id = ?", (int(state), request_id))
        return cursor.rowcount > 0

    @staticmethod
    async def delete(conn: aiosqlite.Connection, request_id: int) -> bool:
        cursor = await conn.execute("DELETE FROM requests WHERE id = ?", (request_id,))
        return cursor.rowcount > 0

    @staticmethod
    async def get(conn: aiosqlite.Connection, request_id: int) -> Optional[RequestRecord]:
        cursor = await conn.execute("SELECT * FROM requests WHERE id = ?", (request_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return RequestRecord(
            request_id=row["id"],
            description=row["description"],
            initiator_id=row["initiator_id"],
            message_id=row["message_id"],
            state=SubmissionState(row["state"]),
        )

    @staticmethod
    async def get_by_message(conn: aiosqlite.Connection, message_id: int) -> Optional[RequestRecord]:
        cursor = await conn.execute("SELECT id FROM requests WHERE message_id = ?", (message_id,))
        row = await cursor.fetchone()
        return await RequestRepo.get(conn, row[0]) if row else None


class SuggestionRepo:
    """CRUD for the ``suggestions`` table."""

    @staticmethod
    async def insert(conn: aiosqlite.Connection, suggestion: SuggestionRecord) -> int:
        cursor = await conn.execute(
            "INSERT INTO suggestions (initiator_id, message_id, state) VALUES (?, ?, ?)",
            (suggestion.initiator_id, suggestion.message_id, int(suggestion.state)),
        )
        return cursor.lastrowid

    @staticmethod
    async def set_state(conn: aiosqlite.Connection, suggestion_id: int, state: SubmissionState) -> bool:
        cursor = await conn.execute("UPDATE suggestions SET state = ? WHERE id = ?", (int(state), suggestion_id))
        return cursor.rowcount > 0

    @staticmethod
    async def delete(conn: aiosqlite.Connection, suggestion_id: int) -> bool:
        cursor = await conn.execute("DELETE FROM suggestions WHERE id = ?", (suggestion_id,))
        return cursor.rowcount > 0

    @staticmethod
    async def get(conn: aiosqlite.Connection, suggestion_id: int) -> Optional[SuggestionRecord]:
        cursor = await conn.execute("SELECT * FROM suggestions WHERE id = ?", (suggestion_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return SuggestionRecord(
            suggestion_id=row["id"],
            initiator_id=row["initiator_id"],
            message_id=row["message_id"],
            state=SubmissionState(row["state"]),
        )


def _row_to_tag(row) -> TagRecord:
    return TagRecord(tag_id=row["id"], name=row["name"], content=row["content"], owner_id=row["owner_id"])


class TagRepo:
    """CRUD for the ``tags`` table. Names compare case-insensitively."""

    @staticmethod
    async def insert(conn: aiosqlite.Connection, tag: TagRecord) -> int:
        cursor = await conn.execute(
            "INSERT INTO tags (name, content, owner_id) VALUES (?, ?, ?)",
            (tag.name, tag.content, tag.owner_id),
        )
        return cursor.lastrowid

    @staticmethod
    async def delete(conn: aiosqlite.Connection, tag_id: int) -> bool:
        cursor = await conn.execute("DELETE FROM tags WHERE id = ?", (tag_id,))
        return cursor.rowcount > 0

    @staticmethod
    async def get_by_name(conn: aiosqlite.Connection, name: str) -> Optional[TagRecord]:
        cursor = await conn.execute(
            "SELECT * FROM tags WHERE name = ? COLLATE NOCASE ORDER BY id ASC LIMIT 1",
            (name,),
        )
        row = await cursor.fetchone()
        return _row_to_tag(row) if row else None

    @staticmethod
    async def get_all(conn: aiosqlite.Connection) -> List[TagRecord]:
        cursor = await conn.execute("SELECT * FROM tags ORDER BY name COLLATE NOCASE ASC")
        rows = await cursor.fetchall()
        return [_row_to_tag(row) for row in rows]
