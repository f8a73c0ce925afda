"""
Community moderation bot
========================

Records warnings, kicks, bans and mutes as infractions, enforces them on the
guild and lets staff browse each member's history. Also hosts the tag
commands and the background loop that lifts expired mutes.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Project root: ``CWEBOT_HOME`` when set, otherwise two levels above this package."""
    if env_home := os.getenv("CWEBOT_HOME"):
        return Path(env_home).resolve()
    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from cwebot.bot.moderation_handler import ModerationCommandHandler
from cwebot.configuration.app_configuration import AppConfig, app_config
from cwebot.database.database import Database
from cwebot.services.moderation_service import ModerationService
from cwebot.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Intents for guild members and prefixed text commands."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    return intents


def load_cogs(discord_bot_instance: discord.Bot, database: Database, config: AppConfig) -> ModerationCommandHandler:
    """Register all cogs, sharing one moderation handler between them.

    Parameters
    ----------
    discord_bot_instance:
        Py-Cord bot object that should receive the cogs.
    database:
        Initialized data access layer.
    config:
        Application configuration.
    """
    from cwebot.bot.cogs import message_listener, moderation_cmds, mute_expiry_cog, tags_cmds

    handler = ModerationCommandHandler(ModerationService(database), config)

    moderation_cmds.setup(discord_bot_instance, handler)
    message_listener.setup(discord_bot_instance, handler.build_command_table(), config)
    mute_expiry_cog.setup(discord_bot_instance, database, config)
    tags_cmds.setup(discord_bot_instance, database, handler)

    logger.info("All cogs loaded successfully.")
    return handler


def create_bot(database: Database, config: AppConfig) -> discord.Bot:
    """Instantiate the Discord bot and register all cogs."""
    bot = discord.Bot(intents=build_intents())
    load_cogs(bot, database, config)
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Start the Discord bot and log around the connection."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None, database: Database) -> None:
    """Close the Discord connection, then the database."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord client: %s", exc)

    try:
        await database.shutdown()
    except Exception as exc:
        logger.exception("Error during database shutdown: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the database and the bot, returning an exit code."""
    token = load_environment()

    database = Database(app_config.database_path)
    logger.info("Initializing database at %s...", app_config.database_path)
    if not await database.initialize():
        logger.critical("Failed to initialize database.")
        return 1

    bot = None
    exit_code = 0
    try:
        bot = create_bot(database, app_config)
        await start_bot(bot, token)
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, database)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    sys.excepthook = handle_exception
    logger.info("Starting community moderation bot…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
