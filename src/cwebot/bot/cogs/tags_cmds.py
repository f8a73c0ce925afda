"""
Tag commands cog: short named snippets any member can recall.
"""

import discord
from discord import Option
from discord.ext import commands

from cwebot.bot.moderation_handler import ModerationCommandHandler
from cwebot.database.database import Database
from cwebot.datatypes.community_datatypes import TagRecord
from cwebot.util.logger import get_logger

logger = get_logger("tags_commands")

MAX_TAG_NAME = 32


class TagsCog(commands.Cog):
    """Cog for the ``/tag`` command group."""

    tag = discord.SlashCommandGroup("tag", "Saved text snippets")

    def __init__(self, bot: discord.Bot, database: Database, handler: ModerationCommandHandler):
        self.bot = bot
        self.database = database
        self.handler = handler

    @tag.command(name="create", description="Save a new tag")
    async def create(
        self,
        application_context: discord.ApplicationContext,
        name: Option(str, "Name used to recall the tag.", required=True),  # type: ignore
        content: Option(str, "Text the tag shows.", required=True),  # type: ignore
    ) -> None:
        name = name.strip()
        content = content.strip()
        if not name or not content:
            await application_context.respond("❌ A tag needs a name and some content.", ephemeral=True)
            return
        if len(name) > MAX_TAG_NAME or " " in name:
            await application_context.respond(
                f"❌ Tag names are a single word of at most {MAX_TAG_NAME} characters.", ephemeral=True
            )
            return

        if await self.database.get_tag(name) is not None:
            await application_context.respond(f"❌ A tag named `{name}` already exists.", ephemeral=True)
            return

        tag_id = await self.database.create_tag(TagRecord(name=name, content=content, owner_id=application_context.author.id))
        if tag_id is None:
            await application_context.respond("❌ The tag could not be saved.", ephemeral=True)
            return

        logger.debug("Tag %r created by %s", name, application_context.author.id)
        await application_context.respond(f"✅ Tag `{name}` created.")

    @tag.command(name="show", description="Show a tag")
    async def show(
        self,
        application_context: discord.ApplicationContext,
        name: Option(str, "Name of the tag.", required=True),  # type: ignore
    ) -> None:
        record = await self.database.get_tag(name.strip())
        if record is None:
            await application_context.respond(f"❌ No tag named `{name}`.", ephemeral=True)
            return
        await application_context.respond(record.content)

    @tag.command(name="list", description="List every tag")
    async def list_tags(self, application_context: discord.ApplicationContext) -> None:
        records = await self.database.get_tags()
        embed = discord.Embed(title="Tags", color=discord.Color.blurple())
        if records:
            embed.description = ", ".join(f"`{record.name}`" for record in records)
        else:
            embed.description = "No tags yet."
        await application_context.respond(embed=embed, ephemeral=True)

    @tag.command(name="delete", description="Delete a tag you own")
    async def delete(
        self,
        application_context: discord.ApplicationContext,
        name: Option(str, "Name of the tag.", required=True),  # type: ignore
    ) -> None:
        """Owners may delete their own tags; staff may delete any tag."""
        record = await self.database.get_tag(name.strip())
        if record is None:
            await application_context.respond(f"❌ No tag named `{name}`.", ephemeral=True)
            return

        author = application_context.author
        if record.owner_id != author.id and not self.handler.is_staff(author):
            await application_context.respond("❌ You can only delete your own tags.", ephemeral=True)
            return

        if not await self.database.delete_tag(record.tag_id):
            await application_context.respond("❌ The tag could not be deleted.", ephemeral=True)
            return

        logger.debug("Tag %r deleted by %s", record.name, author.id)
        await application_context.respond(f"✅ Tag `{record.name}` deleted.")


def setup(bot: discord.Bot, database: Database, handler: ModerationCommandHandler) -> None:
    bot.add_cog(TagsCog(bot, database, handler))
