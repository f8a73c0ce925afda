"""Background cog that lifts mute roles once a mute's end time has passed.

Mutes live in the ``mutes`` table, so restarts do not lose pending expiries.
Timeout-based mutes expire on Discord's side; for those only the row is
dropped. The role stays on a member who still has another active mute.
A row whose role removal fails is kept and retried on the next sweep.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional

import discord
from discord.ext import commands, tasks

from cwebot.configuration.app_configuration import AppConfig
from cwebot.database.database import Database
from cwebot.datatypes.infraction_datatypes import MuteRecord
from cwebot.util.logger import get_logger
from cwebot.util.time_utils import utcnow

logger = get_logger("mute_expiry_cog")


class MuteExpiryCog(commands.Cog):
    """DB-polling loop that ends expired mutes."""

    def __init__(self, bot: discord.Bot, database: Database, config: AppConfig) -> None:
        self.bot = bot
        self.database = database
        self.config = config

    @commands.Cog.listener()
    async def on_ready(self) -> None:
        interval = self.config.mute_expiry_interval
        self._expiry_task.change_interval(seconds=interval)
        if not self._expiry_task.is_running():
            self._expiry_task.start()
        logger.info("[MUTE_EXPIRY] Ready (interval=%.1fs)", interval)

    def cog_unload(self) -> None:
        self._expiry_task.cancel()
        logger.info("[MUTE_EXPIRY] Stopped")

    @tasks.loop(seconds=30)  # real interval set in on_ready
    async def _expiry_task(self) -> None:
        try:
            await self.sweep(utcnow())
        except Exception as exc:
            logger.exception("[MUTE_EXPIRY] Sweep failed: %s", exc)

    @_expiry_task.before_loop
    async def _before_expiry(self) -> None:
        await self.bot.wait_until_ready()

    async def sweep(self, now: datetime) -> int:
        """End every mute whose ``mute_end`` is at or before ``now``.

        Returns the number of mute rows removed.
        """
        expired = await self.database.get_expired_mutes(now)
        if not expired:
            return 0

        role_id = self.config.mute_role_id
        removed = 0
        for mute in expired:
            if await self.database.get_active_mute(mute.user_id, now) is not None:
                # A later mute still runs; only the finished row goes
                if await self.database.delete_mute(mute.infraction_id):
                    removed += 1
                continue

            try:
                await self._lift_mute(mute, role_id)
            except asyncio.CancelledError:
                raise
            except discord.HTTPException as exc:
                logger.error("[MUTE_EXPIRY] Failed to unmute %s: %s", mute.user_id, exc)
                continue  # leave the row; will retry next sweep

            if await self.database.delete_mute(mute.infraction_id):
                removed += 1

        if removed:
            logger.info("[MUTE_EXPIRY] Lifted %d expired mute(s)", removed)
        return removed

    async def _lift_mute(self, mute: MuteRecord, role_id: Optional[int]) -> None:
        """Remove the mute role wherever the member still has it."""
        if role_id is None:
            return
        for guild in self.bot.guilds:
            member = guild.get_member(mute.user_id)
            if member is None:
                continue
            role = guild.get_role(role_id)
            if role is None or role not in member.roles:
                continue
            await member.remove_roles(role, reason=f"Mute {mute.infraction_id} expired")
            logger.debug("[MUTE_EXPIRY] Removed mute role from %s in guild %s", mute.user_id, guild.id)


def setup(bot: discord.Bot, database: Database, config: AppConfig) -> None:
    bot.add_cog(MuteExpiryCog(bot, database, config))
