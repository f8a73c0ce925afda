from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from cwebot.bot.cogs.tags_cmds import TagsCog
from cwebot.datatypes.community_datatypes import TagRecord


class Ctx:
    def __init__(self, author_id=42):
        self.author = SimpleNamespace(id=author_id)
        self.respond = AsyncMock()


def make_cog(existing=None, *, staff=False, created_id=1, tags=()):
    database = SimpleNamespace(
        get_tag=AsyncMock(return_value=existing),
        get_tags=AsyncMock(return_value=list(tags)),
        create_tag=AsyncMock(return_value=created_id),
        delete_tag=AsyncMock(return_value=True),
    )
    handler = SimpleNamespace(is_staff=lambda member: staff)
    return TagsCog(SimpleNamespace(), database, handler), database


@pytest.mark.asyncio
async def test_create_tag():
    cog, database = make_cog()
    ctx = Ctx()

    await TagsCog.create.callback(cog, ctx, "rules", "Be nice")

    stored = database.create_tag.await_args.args[0]
    assert (stored.name, stored.content, stored.owner_id) == ("rules", "Be nice", 42)
    assert "created" in ctx.respond.await_args.args[0]


@pytest.mark.asyncio
async def test_create_rejects_duplicate_names():
    cog, database = make_cog(existing=TagRecord("Rules", "old", 1, tag_id=3))
    ctx = Ctx()

    await TagsCog.create.callback(cog, ctx, "rules", "Be nice")

    database.create_tag.assert_not_awaited()
    assert "already exists" in ctx.respond.await_args.args[0]


@pytest.mark.asyncio
async def test_create_rejects_multi_word_names():
    cog, database = make_cog()
    ctx = Ctx()

    await TagsCog.create.callback(cog, ctx, "two words", "text")

    database.create_tag.assert_not_awaited()


@pytest.mark.asyncio
async def test_show_tag():
    cog, _ = make_cog(existing=TagRecord("rules", "Be nice", 1, tag_id=3))
    ctx = Ctx()

    await TagsCog.show.callback(cog, ctx, "rules")

    ctx.respond.assert_awaited_once_with("Be nice")


@pytest.mark.asyncio
async def test_list_tags():
    cog, _ = make_cog(tags=[TagRecord("faq", "x", 1, 1), TagRecord("rules", "y", 1, 2)])
    ctx = Ctx()

    await TagsCog.list_tags.callback(cog, ctx)

    embed = ctx.respond.await_args.kwargs["embed"]
    assert embed.description == "`faq`, `rules`"


@pytest.mark.asyncio
async def test_owner_can_delete():
    cog, database = make_cog(existing=TagRecord("rules", "Be nice", 42, tag_id=3))

    await TagsCog.delete.callback(cog, Ctx(author_id=42), "rules")

    database.delete_tag.assert_awaited_once_with(3)


@pytest.mark.asyncio
async def test_other_members_cannot_delete():
    cog, database = make_cog(existing=TagRecord("rules", "Be nice", 42, tag_id=3))
    ctx = Ctx(author_id=99)

    await TagsCog.delete.callback(cog, ctx, "rules")

    database.delete_tag.assert_not_awaited()
    assert "only delete your own" in ctx.respond.await_args.args[0]


@pytest.mark.asyncio
async def test_staff_can_delete_any_tag():
    cog, database = make_cog(existing=TagRecord("rules", "Be nice", 42, tag_id=3), staff=True)

    await TagsCog.delete.callback(cog, Ctx(author_id=99), "rules")

    database.delete_tag.assert_awaited_once_with(3)
