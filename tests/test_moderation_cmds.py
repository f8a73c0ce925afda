from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from cwebot.bot.cogs import moderation_cmds
from cwebot.datatypes.infraction_datatypes import InfractionType


class Ctx:
    def __init__(self):
        self.author = SimpleNamespace(id=7)
        self.guild = SimpleNamespace(id=99)
        self.interaction = object()
        self.defer = AsyncMock()
        self.respond = AsyncMock()


def make_cog(**handler_methods):
    handler = SimpleNamespace(**handler_methods)
    return moderation_cmds.ModerationActionCog(SimpleNamespace(), handler), handler


def test_setup_registers_cog():
    captured = {}

    def fake_add_cog(cog):
        captured["cog"] = cog

    fake_bot = SimpleNamespace(add_cog=fake_add_cog)
    moderation_cmds.setup(fake_bot, SimpleNamespace())
    assert isinstance(captured["cog"], moderation_cmds.ModerationActionCog)


@pytest.mark.asyncio
async def test_warn_command_delegates_to_handler():
    embed = discord.Embed(title="done")
    cog, handler = make_cog(execute_action=AsyncMock(return_value=embed))
    ctx = Ctx()
    user = SimpleNamespace(id=42)

    await moderation_cmds.ModerationActionCog.warn.callback(cog, ctx, user, "spam")

    ctx.defer.assert_awaited_once()
    handler.execute_action.assert_awaited_once_with(ctx.guild, ctx.author, user, InfractionType.WARN, "spam", None)
    ctx.respond.assert_awaited_once_with(embed=embed)


@pytest.mark.asyncio
async def test_mute_command_passes_duration():
    cog, handler = make_cog(execute_action=AsyncMock(return_value=discord.Embed()))
    ctx = Ctx()
    user = SimpleNamespace(id=42)

    await moderation_cmds.ModerationActionCog.mute.callback(cog, ctx, user, "1h15m", "loud")

    handler.execute_action.assert_awaited_once_with(ctx.guild, ctx.author, user, InfractionType.MUTE, "loud", "1h15m")


@pytest.mark.asyncio
async def test_ban_command_reports_unexpected_errors():
    cog, _ = make_cog(execute_action=AsyncMock(side_effect=RuntimeError("boom")))
    ctx = Ctx()

    await moderation_cmds.ModerationActionCog.ban.callback(cog, ctx, SimpleNamespace(id=42), "raid")

    ctx.respond.assert_awaited_once_with("An error occurred while processing the command.", ephemeral=True)


@pytest.mark.asyncio
async def test_infractions_single_page_replies_directly():
    page = discord.Embed(title="page")
    cog, _ = make_cog(infraction_pages=AsyncMock(return_value=[page]))
    ctx = Ctx()

    await moderation_cmds.ModerationActionCog.infractions.callback(cog, ctx, SimpleNamespace(id=42))

    ctx.respond.assert_awaited_once_with(embed=page)


@pytest.mark.asyncio
async def test_infractions_multiple_pages_use_paginator(monkeypatch):
    embeds = [discord.Embed(title="one"), discord.Embed(title="two")]
    cog, _ = make_cog(infraction_pages=AsyncMock(return_value=embeds))
    ctx = Ctx()

    paginator = MagicMock()
    paginator.respond = AsyncMock()
    paginator_type = MagicMock(return_value=paginator)
    monkeypatch.setattr(moderation_cmds.pages, "Paginator", paginator_type)

    await moderation_cmds.ModerationActionCog.infractions.callback(cog, ctx, SimpleNamespace(id=42))

    assert paginator_type.call_args.kwargs["pages"] == embeds
    paginator.respond.assert_awaited_once_with(ctx.interaction)
    ctx.respond.assert_not_awaited()
