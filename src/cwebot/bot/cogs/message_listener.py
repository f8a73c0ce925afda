"""Message listener cog: prefix text commands such as ``!warn @user spam``.

Messages are matched against the :class:`CommandTable` built by the
moderation handler. The table validates argument shapes; this cog resolves
the user argument to a guild member and sends back whatever embeds the
handler returns.
"""

from typing import Any, Dict, Optional

import discord
from discord.ext import commands

from cwebot.bot.command_table import CommandInvocation, CommandParseError, CommandTable, ParamKind
from cwebot.configuration.app_configuration import AppConfig
from cwebot.util.logger import get_logger

logger = get_logger("message_listener_cog")


class MessageListenerCog(commands.Cog):
    """Cog dispatching prefixed text commands from guild messages."""

    def __init__(self, discord_bot_instance, command_table: CommandTable, config: AppConfig):
        """
        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        command_table:
            Commands this listener understands.
        config:
            Source of the command prefix.
        """
        self.bot = discord_bot_instance
        self.command_table = command_table
        self.config = config
        logger.info("Message listener cog loaded")

    @staticmethod
    async def resolve_member(guild: discord.Guild, user_id: int) -> Optional[discord.Member]:
        """Cached member lookup with an API fallback."""
        member = guild.get_member(user_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id)
        except discord.NotFound:
            return None

    async def resolve_arguments(self, message: discord.Message, invocation: CommandInvocation) -> Optional[Dict[str, Any]]:
        """Replace USER arguments with members. None if a member is missing."""
        arguments = dict(invocation.arguments)
        for param in invocation.spec.params:
            if param.kind is not ParamKind.USER:
                continue
            member = await self.resolve_member(message.guild, arguments[param.name])
            if member is None:
                await message.reply("The specified user is not a member of this server.", mention_author=False)
                return None
            arguments[param.name] = member
        return arguments

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message) -> None:
        """Handle a guild message that starts with the command prefix."""
        if message.author.bot or message.guild is None:
            return

        try:
            invocation = self.command_table.parse(message.content, self.config.command_prefix)
        except CommandParseError as exc:
            await message.reply(str(exc), mention_author=False)
            return

        if invocation is None:
            return

        logger.debug("Text command %s from %s", invocation.spec.name, message.author.id)
        try:
            arguments = await self.resolve_arguments(message, invocation)
            if arguments is None:
                return
            embeds = await invocation.spec.handler(message, **arguments)
        except discord.HTTPException as exc:
            logger.error("Discord error while running %s: %s", invocation.spec.name, exc)
            return
        except Exception as exc:
            logger.exception("Error running text command %s: %s", invocation.spec.name, exc)
            await message.reply("An error occurred while processing the command.", mention_author=False)
            return

        if not embeds:
            return
        first = embeds[0]
        if len(embeds) > 1:
            first.set_footer(text=f"Page 1/{len(embeds)}. Use /{invocation.spec.name} to browse every page.")
        await message.reply(embed=first, mention_author=False)


def setup(discord_bot_instance, command_table: CommandTable, config: AppConfig) -> None:
    """Register the message listener cog."""
    discord_bot_instance.add_cog(MessageListenerCog(discord_bot_instance, command_table, config))
