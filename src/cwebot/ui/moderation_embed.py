"""
Embed creation for moderation replies.

Turns :class:`ActionSummary` / :class:`ActionFailure` and pages of
infraction records into ``discord.Embed`` objects. Nothing here touches the
database or the gateway.
"""

import datetime
from typing import List, Sequence

import discord

from cwebot.datatypes.infraction_datatypes import InfractionRecord, InfractionType
from cwebot.datatypes.reply_datatypes import ActionFailure, ActionSummary
from cwebot.services.moderation_service import format_type
from cwebot.util.duration import format_duration
from cwebot.util.pagination import PAGE_SIZE, page_count, paginate
from cwebot.util.time_utils import humanize_timestamp


ACTION_EMOJIS = {
    InfractionType.WARN: "⚠️",
    InfractionType.KICK: "👢",
    InfractionType.BAN: "🔨",
    InfractionType.MUTE: "🔇",
}

# Discord caps a field value at 1024 characters and a whole embed at 6000
FIELD_VALUE_LIMIT = 1024
# Twenty history fields at these lengths fit in one embed
HISTORY_REASON_LIMIT = 100
HISTORY_NAME_LIMIT = 40


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters, ending in an ellipsis when cut."""
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def create_success_embed(summary: ActionSummary) -> discord.Embed:
    """
    Summarise a completed moderation action.

    The Mute Duration field is only added when the summary carries a
    duration.

    Args:
        summary: What was done, to whom and by whom

    Returns:
        discord.Embed: Green embed titled "Successfully <verb> <target>"
    """
    embed = discord.Embed(
        title=f"Successfully {format_type(summary.infraction_type)} {summary.target}",
        color=discord.Color.green(),
        timestamp=summary.timestamp,
    )
    if summary.target_avatar_url:
        embed.set_author(name=summary.target, icon_url=summary.target_avatar_url)
    else:
        embed.set_author(name=summary.target)

    embed.add_field(name="Staff member", value=truncate(summary.staff, FIELD_VALUE_LIMIT), inline=True)
    embed.add_field(name="Reason", value=truncate(summary.reason, FIELD_VALUE_LIMIT), inline=True)
    if summary.duration is not None:
        embed.add_field(name="Mute Duration", value=format_duration(summary.duration), inline=True)

    embed.set_footer(text=f"Infraction {summary.infraction_id}")
    return embed


def create_failure_embed(failure: ActionFailure) -> discord.Embed:
    """Red embed explaining why an action did not happen."""
    emoji = ACTION_EMOJIS.get(failure.infraction_type, "⚙️")
    return discord.Embed(
        title=f"{emoji} {failure.title}",
        description=failure.description,
        color=discord.Color.red(),
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )


def format_infraction_field(record: InfractionRecord) -> str:
    """Body of one history entry."""
    return (
        f"Date: {humanize_timestamp(record.created_at)}\n"
        f"Reason: {truncate(record.reason, HISTORY_REASON_LIMIT)}\n"
        f"Staff member: {truncate(record.staff_username, HISTORY_NAME_LIMIT)}\n"
        f"Id: {record.infraction_id}"
    )


def create_infraction_page_embed(
    target: str,
    records: Sequence[InfractionRecord],
    page: int,
    total_pages: int,
) -> discord.Embed:
    """
    One page of a member's infraction history.

    Args:
        target: Display form of the member
        records: At most one page of records, oldest first
        page: Zero-based page index
        total_pages: Number of pages, for the footer
    """
    embed = discord.Embed(title=f"{truncate(target, HISTORY_NAME_LIMIT)}'s infractions", color=discord.Color.green())
    for record in records:
        embed.add_field(
            name=format_type(record.infraction_type).capitalize(),
            value=format_infraction_field(record),
            inline=False,
        )
    if not records:
        embed.description = "No infractions on record."
    embed.set_footer(text=f"Page {page + 1}/{max(total_pages, 1)}")
    return embed


def build_infraction_pages(
    target: str, records: Sequence[InfractionRecord], page_size: int = PAGE_SIZE
) -> List[discord.Embed]:
    """Split a full history into page embeds. Always returns at least one page."""
    total_pages = page_count(len(records), page_size)
    if total_pages == 0:
        return [create_infraction_page_embed(target, [], 0, 0)]
    return [
        create_infraction_page_embed(target, paginate(records, page, page_size), page, total_pages)
        for page in range(total_pages)
    ]
