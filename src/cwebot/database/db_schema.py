"""
Database schema initialization.

Creates every table and index the bot uses and records the schema version.
All statements are idempotent so this runs on every startup.
"""

import aiosqlite
from cwebot.util.logger import get_logger

logger = get_logger("database_schema")

SCHEMA_VERSION = 1


class SchemaManager:
    """Creates the tables, indexes and version row."""

    @staticmethod
    async def initialize_schema(db: aiosqlite.Connection) -> None:
        """
        Create or update all tables and indexes.

        Args:
            db: Open database connection
        """
        await SchemaManager._create_tables(db)
        await SchemaManager._create_indexes(db)
        await db.execute(
            "INSERT OR IGNORE INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,)
        )
        await db.commit()
        logger.info("[SCHEMA] Database schema initialized (version %d)", SCHEMA_VERSION)

    @staticmethod
    async def _create_tables(db: aiosqlite.Connection) -> None:
        """Create all required database tables."""
        # Infractions: rowid gives insertion order for ties on created_at
        await db.execute("""
            CREATE TABLE IF NOT EXISTS infractions (
                infraction_id TEXT PRIMARY KEY,
                user_id INTEGER NOT NULL,
                username TEXT NOT NULL DEFAULT '',
                staff_id INTEGER NOT NULL,
                staff_username TEXT NOT NULL DEFAULT '',
                type TEXT NOT NULL CHECK (type IN ('warn', 'kick', 'ban', 'mute')),
                reason TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS mutes (
                infraction_id TEXT PRIMARY KEY,
                user_id INTEGER NOT NULL,
                mute_start TEXT NOT NULL,
                mute_end TEXT NOT NULL,
                CHECK (mute_end > mute_start),
                FOREIGN KEY (infraction_id) REFERENCES infractions(infraction_id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS campaigns (
                user_id INTEGER PRIMARY KEY,
                initiator_id INTEGER NOT NULL,
                message_id INTEGER NOT NULL,
                starts_at TEXT NOT NULL,
                ends_at TEXT NOT NULL,
                minimal INTEGER NOT NULL DEFAULT 0,
                type INTEGER NOT NULL DEFAULT 0,
                reason TEXT NOT NULL DEFAULT ''
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS ranks (
                role_id INTEGER PRIMARY KEY
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS requests (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                description TEXT NOT NULL DEFAULT '',
                initiator_id INTEGER NOT NULL,
                message_id INTEGER NOT NULL,
                state INTEGER NOT NULL DEFAULT 0
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS suggestions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                initiator_id INTEGER NOT NULL,
                message_id INTEGER NOT NULL,
                state INTEGER NOT NULL DEFAULT 0
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS tags (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                content TEXT NOT NULL DEFAULT '',
                owner_id INTEGER NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    @staticmethod
    async def _create_indexes(db: aiosqlite.Connection) -> None:
        """Indexes for the lookups the bot actually performs."""
        await db.execute("CREATE INDEX IF NOT EXISTS idx_infractions_user ON infractions(user_id, created_at)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_mutes_end ON mutes(mute_end)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_tags_name ON tags(name COLLATE NOCASE)")
