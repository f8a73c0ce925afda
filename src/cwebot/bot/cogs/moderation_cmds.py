"""
Moderation cog: slash commands for taking disciplinary actions on members.

Commands
- ``/warn <user> <reason>``
- ``/kick <user> <reason>``
- ``/ban <user> <reason>``
- ``/mute <user> <duration> <reason>`` where duration looks like ``1h15m``
- ``/infractions <user>`` paginated history, 20 entries per page

Every command defers, delegates to :class:`ModerationCommandHandler` and
replies with the embed it returns. Unexpected errors are logged and reported
to the invoker without leaking details.
"""

import discord
from discord import Option
from discord.ext import commands, pages

from cwebot.bot.moderation_handler import ModerationCommandHandler
from cwebot.datatypes.infraction_datatypes import InfractionType
from cwebot.util.logger import get_logger

logger = get_logger("moderation_cog")


class ModerationActionCog(commands.Cog):
    """Cog containing moderation slash commands.

    Parameters
    ----------
    discord_bot_instance:
        Active :class:`discord.Bot`.
    handler:
        Shared handler doing the checks, persistence and enforcement.
    """

    def __init__(self, discord_bot_instance, handler: ModerationCommandHandler):
        self.discord_bot_instance = discord_bot_instance
        self.handler = handler
        logger.info("Moderation cog loaded")

    async def run_action(
        self,
        ctx: discord.ApplicationContext,
        user: discord.Member,
        infraction_type: InfractionType,
        reason: str,
        duration: str | None = None,
    ) -> None:
        """Defer, execute through the handler and reply with its embed."""
        await ctx.defer()
        try:
            embed = await self.handler.execute_action(ctx.guild, ctx.author, user, infraction_type, reason, duration)
        except Exception as e:
            logger.exception("Error executing %s command: %s", infraction_type, e)
            await ctx.respond("An error occurred while processing the command.", ephemeral=True)
            return
        await ctx.respond(embed=embed)

    @commands.slash_command(name="warn", description="Warns a user.")
    async def warn(
        self,
        ctx: discord.ApplicationContext,
        user: Option(discord.Member, "The user to warn.", required=True),  # type: ignore
        reason: Option(str, "The reason to warn this user.", required=True),  # type: ignore
    ) -> None:
        """Warn a user. Warnings only leave a record."""
        await self.run_action(ctx, user, InfractionType.WARN, reason)

    @commands.slash_command(name="kick", description="Kicks a user.")
    async def kick(
        self,
        ctx: discord.ApplicationContext,
        user: Option(discord.Member, "The user to kick.", required=True),  # type: ignore
        reason: Option(str, "The reason to kick this user.", required=True),  # type: ignore
    ) -> None:
        """Kick a member from the guild."""
        await self.run_action(ctx, user, InfractionType.KICK, reason)

    @commands.slash_command(name="ban", description="Bans a user.")
    async def ban(
        self,
        ctx: discord.ApplicationContext,
        user: Option(discord.Member, "The user to ban.", required=True),  # type: ignore
        reason: Option(str, "The reason to ban this user.", required=True),  # type: ignore
    ) -> None:
        """Ban a member from the guild."""
        await self.run_action(ctx, user, InfractionType.BAN, reason)

    @commands.slash_command(name="mute", description="Mutes a user for a duration.")
    async def mute(
        self,
        ctx: discord.ApplicationContext,
        user: Option(discord.Member, "The user to mute.", required=True),  # type: ignore
        duration: Option(str, "How long, e.g. 1h15m, 30m or 90s.", required=True),  # type: ignore
        reason: Option(str, "The reason to mute this user.", required=True),  # type: ignore
    ) -> None:
        """Mute a member for a duration."""
        await self.run_action(ctx, user, InfractionType.MUTE, reason, duration)

    @commands.slash_command(name="infractions", description="Shows a user's infractions.")
    async def infractions(
        self,
        ctx: discord.ApplicationContext,
        user: Option(discord.Member, "The user whose infractions will be displayed.", required=True),  # type: ignore
    ) -> None:
        """Show a member's infraction history, oldest first."""
        await ctx.defer()
        try:
            embeds = await self.handler.infraction_pages(ctx.author, user)
        except Exception as e:
            logger.exception("Error loading infractions of %s: %s", getattr(user, "id", user), e)
            await ctx.respond("An error occurred while processing the command.", ephemeral=True)
            return

        if len(embeds) == 1:
            await ctx.respond(embed=embeds[0])
            return

        paginator = pages.Paginator(pages=embeds, author_check=True, disable_on_timeout=True)
        await paginator.respond(ctx.interaction)


def setup(discord_bot_instance, handler: ModerationCommandHandler) -> None:
    """Register the moderation cog."""
    discord_bot_instance.add_cog(ModerationActionCog(discord_bot_instance, handler))
