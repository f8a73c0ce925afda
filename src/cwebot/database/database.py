"""
Data access layer for the bot's SQLite database.

The :class:`Database` coordinator owns a :class:`ConnectionManager` and
delegates each table to a repository in :mod:`cwebot.repositories`.

Writes report failure instead of raising: every mutating method catches
``aiosqlite.Error``, logs it and returns ``False``/``None`` so the caller can
turn it into a user-facing error. Multi-row writes (an infraction together
with its mute) share one transaction.

Lifecycle:
    1. ``await database.initialize()`` at startup
    2. use the CRUD methods
    3. ``await database.shutdown()`` at exit
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

import aiosqlite

from cwebot.database.db_connection import ConnectionManager
from cwebot.database.db_schema import SchemaManager
from cwebot.datatypes.community_datatypes import (
    CampaignRecord,
    RankRecord,
    RequestRecord,
    SubmissionState,
    SuggestionRecord,
    TagRecord,
)
from cwebot.datatypes.infraction_datatypes import InfractionRecord, MuteRecord
from cwebot.repositories.campaign_repo import CampaignRepo
from cwebot.repositories.community_repo import RankRepo, RequestRepo, SuggestionRepo, TagRepo
from cwebot.repositories.infraction_repo import InfractionRepo
from cwebot.util.logger import get_logger

logger = get_logger("database")

DB_PATH = Path("./data/cwebot.db").resolve()


class Database:
    """
    Central coordinator for every database operation.

    Construct one per process and pass it to the services that need it.
    """

    def __init__(self, db_path: Path = DB_PATH):
        """
        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self.connection_manager = ConnectionManager()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> bool:
        """
        Open the connection and create the schema.

        Returns:
            True if initialization succeeded, False otherwise
        """
        if self._initialized:
            logger.debug("[DATABASE] Already initialized, skipping")
            return True

        try:
            await self.connection_manager.open(self.db_path)
            async with self.connection_manager.read() as db:
                await SchemaManager.initialize_schema(db)

            self._initialized = True
            logger.info("[DATABASE] Database initialized at %s", self.db_path)
            return True

        except (aiosqlite.Error, OSError) as e:
            logger.error("[DATABASE] Database initialization failed: %s", e)
            await self.connection_manager.close()
            return False

    async def shutdown(self) -> None:
        """Close the connection. Safe to call when never initialized."""
        await self.connection_manager.close()
        if self._initialized:
            self._initialized = False
            logger.info("[DATABASE] Database shutdown complete")

    # ------------------------------------------------------------------
    # Infractions and mutes
    # ------------------------------------------------------------------

    async def create_infraction(self, record: InfractionRecord, mute: Optional[MuteRecord] = None) -> bool:
        """
        Store an infraction, and its mute when given, in one transaction.

        Args:
            record: The infraction row
            mute: Optional mute row referencing ``record.infraction_id``

        Returns:
            True when every row was committed; False when nothing was.
        """
        try:
            async with self.connection_manager.transaction() as db:
                await InfractionRepo.insert(db, record)
                if mute is not None:
                    await InfractionRepo.insert_mute(db, mute)
        except aiosqlite.Error as e:
            logger.error(
                "[DATABASE] Failed to store %s infraction %s for user %s: %s",
                record.infraction_type, record.infraction_id, record.user_id, e,
            )
            return False

        logger.debug(
            "[DATABASE] Stored %s infraction %s for user %s%s",
            record.infraction_type, record.infraction_id, record.user_id,
            " with mute" if mute is not None else "",
        )
        return True

    async def delete_infraction(self, infraction_id: str) -> bool:
        """Remove an infraction together with its mute, in one transaction."""
        try:
            async with self.connection_manager.transaction() as db:
                removed = await InfractionRepo.delete(db, infraction_id)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to delete infraction %s: %s", infraction_id, e)
            return False

        if removed:
            logger.debug("[DATABASE] Deleted infraction %s", infraction_id)
        return removed

    async def get_infraction(self, infraction_id: str) -> Optional[InfractionRecord]:
        async with self.connection_manager.read() as db:
            return await InfractionRepo.get(db, infraction_id)

    async def get_user_infractions(self, user_id: int) -> List[InfractionRecord]:
        """
        Every infraction of ``user_id``, oldest first.

        Args:
            user_id: Snowflake of the member

        Returns:
            Records ordered by creation time ascending, insertion order on ties
        """
        async with self.connection_manager.read() as db:
            return await InfractionRepo.get_for_user(db, user_id)

    async def get_mute(self, infraction_id: str) -> Optional[MuteRecord]:
        async with self.connection_manager.read() as db:
            return await InfractionRepo.get_mute(db, infraction_id)

    async def get_expired_mutes(self, now: datetime) -> List[MuteRecord]:
        async with self.connection_manager.read() as db:
            return await InfractionRepo.get_expired_mutes(db, now)

    async def get_active_mute(self, user_id: int, now: datetime) -> Optional[MuteRecord]:
        async with self.connection_manager.read() as db:
            return await InfractionRepo.get_active_mute_for_user(db, user_id, now)

    async def delete_mute(self, infraction_id: str) -> bool:
        try:
            async with self.connection_manager.transaction() as db:
                return await InfractionRepo.delete_mute(db, infraction_id)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to delete mute %s: %s", infraction_id, e)
            return False

    # ------------------------------------------------------------------
    # Campaigns
    # ------------------------------------------------------------------

    async def save_campaign(self, campaign: CampaignRecord) -> bool:
        """Create the campaign of ``campaign.user_id`` or replace the existing one."""
        try:
            async with self.connection_manager.transaction() as db:
                await CampaignRepo.upsert(db, campaign)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to save campaign for user %s: %s", campaign.user_id, e)
            return False
        return True

    async def get_campaign(self, user_id: int) -> Optional[CampaignRecord]:
        async with self.connection_manager.read() as db:
            return await CampaignRepo.get(db, user_id)

    async def get_campaigns(self) -> List[CampaignRecord]:
        async with self.connection_manager.read() as db:
            return await CampaignRepo.get_all(db)

    async def delete_campaign(self, user_id: int) -> bool:
        try:
            async with self.connection_manager.transaction() as db:
                return await CampaignRepo.delete(db, user_id)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to delete campaign for user %s: %s", user_id, e)
            return False

    # ------------------------------------------------------------------
    # Ranks
    # ------------------------------------------------------------------

    async def create_rank(self, role_id: int) -> bool:
        try:
            async with self.connection_manager.transaction() as db:
                await RankRepo.insert(db, RankRecord(role_id=role_id))
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to create rank %s: %s", role_id, e)
            return False
        return True

    async def get_ranks(self) -> List[RankRecord]:
        async with self.connection_manager.read() as db:
            return await RankRepo.get_all(db)

    async def delete_rank(self, role_id: int) -> bool:
        try:
            async with self.connection_manager.transaction() as db:
                return await RankRepo.delete(db, role_id)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to delete rank %s: %s", role_id, e)
            return False

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def create_request(self, request: RequestRecord) -> Optional[int]:
        """Store a request; returns its new id, or None on failure."""
        try:
            async with self.connection_manager.transaction() as db:
                return await RequestRepo.insert(db, request)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to create request from %s: %s", request.initiator_id, e)
            return None

    async def get_request(self, request_id: int) -> Optional[RequestRecord]:
        async with self.connection_manager.read() as db:
            return await RequestRepo.get(db, request_id)

    async def get_request_by_message(self, message_id: int) -> Optional[RequestRecord]:
        async with self.connection_manager.read() as db:
            return await RequestRepo.get_by_message(db, message_id)

    async def set_request_state(self, request_id: int, state: SubmissionState) -> bool:
        try:
            async with self.connection_manager.transaction() as db:
                return await RequestRepo.set_state(db, request_id, state)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to update request %s: %s", request_id, e)
            return False

    async def delete_request(self, request_id: int) -> bool:
        try:
            async with self.connection_manager.transaction() as db:
                return await RequestRepo.delete(db, request_id)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to delete request %s: %s", request_id, e)
            return False

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    async def create_suggestion(self, suggestion: SuggestionRecord) -> Optional[int]:
        try:
            async with self.connection_manager.transaction() as db:
                return await SuggestionRepo.insert(db, suggestion)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to create suggestion from %s: %s", suggestion.initiator_id, e)
            return None

    async def get_suggestion(self, suggestion_id: int) -> Optional[SuggestionRecord]:
        async with self.connection_manager.read() as db:
            return await SuggestionRepo.get(db, suggestion_id)

    async def set_suggestion_state(self, suggestion_id: int, state: SubmissionState) -> bool:
        try:
            async with self.connection_manager.transaction() as db:
                return await SuggestionRepo.set_state(db, suggestion_id, state)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to update suggestion %s: %s", suggestion_id, e)
            return False

    async def delete_suggestion(self, suggestion_id: int) -> bool:
        try:
            async with self.connection_manager.transaction() as db:
                return await SuggestionRepo.delete(db, suggestion_id)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to delete suggestion %s: %s", suggestion_id, e)
            return False

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    async def create_tag(self, tag: TagRecord) -> Optional[int]:
        try:
            async with self.connection_manager.transaction() as db:
                return await TagRepo.insert(db, tag)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to create tag %r: %s", tag.name, e)
            return None

    async def get_tag(self, name: str) -> Optional[TagRecord]:
        async with self.connection_manager.read() as db:
            return await TagRepo.get_by_name(db, name)

    async def get_tags(self) -> List[TagRecord]:
        async with self.connection_manager.read() as db:
            return await TagRepo.get_all(db)

    async def delete_tag(self, tag_id: int) -> bool:
        try:
            async with self.connection_manager.transaction() as db:
                return await TagRepo.delete(db, tag_id)
        except aiosqlite.Error as e:
            logger.error("[DATABASE] Failed to delete tag %s: %s", tag_id, e)
            return False
