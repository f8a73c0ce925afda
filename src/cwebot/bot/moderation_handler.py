"""
Glue between Discord commands and :class:`ModerationService`.

Both the slash-command cog and the prefix-command listener go through
:class:`ModerationCommandHandler`, so the checks, the persistence step and the
enforcement step are identical whichever way a command arrives.

Flow of one action
------------------
1. Staff and target checks (member, not self, not an administrator).
2. ``ModerationService.apply_infraction``; nothing else happens if it fails.
3. Best-effort DM to the target, sent before kicks and bans remove them.
4. Enforcement on the guild (kick, ban, mute role or timeout). If Discord
   refuses it, the stored infraction is revoked again.
5. A success or failure embed for the invoker.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, List, Optional, Sequence

import discord

from cwebot.bot.command_table import CommandParam, CommandTable, ParamKind
from cwebot.configuration.app_configuration import AppConfig
from cwebot.datatypes.infraction_datatypes import (
    ActionError,
    InfractionResult,
    InfractionType,
    StaffMember,
)
from cwebot.datatypes.reply_datatypes import ActionFailure, ActionSummary
from cwebot.services.moderation_service import MAX_REASON_LENGTH, ModerationService, format_type
from cwebot.ui.moderation_embed import (
    build_infraction_pages,
    create_failure_embed,
    create_success_embed,
    truncate,
)
from cwebot.util.duration import format_duration
from cwebot.util.logger import get_logger

logger = get_logger("moderation_handler")

# Discord refuses timeouts longer than 28 days
MAX_TIMEOUT = timedelta(days=28)


class ModerationCommandHandler:
    """Runs moderation commands for any front end.

    Args:
        service: Infraction persistence and history
        config: Staff roles and mute role come from here
    """

    def __init__(self, service: ModerationService, config: AppConfig) -> None:
        self.service = service
        self.config = config

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def is_staff(self, member: Any) -> bool:
        """Staff hold a configured staff role or the Moderate Members permission."""
        if not isinstance(member, discord.Member):
            return False
        permissions = member.guild_permissions
        if getattr(permissions, "administrator", False) or getattr(permissions, "moderate_members", False):
            return True
        staff_roles = set(self.config.staff_role_ids)
        return any(role.id in staff_roles for role in member.roles)

    def check_target(self, invoker: Any, target: Any) -> Optional[str]:
        """
        Validate the target of a moderation command.

        Returns:
            None when the action may proceed, otherwise a message for the invoker.
        """
        if not isinstance(target, discord.Member):
            return "The specified user is not a member of this server."
        if target.id == invoker.id:
            return "You cannot perform moderation actions on yourself."
        if target.guild_permissions.administrator:
            return "You cannot perform moderation actions against administrators."
        return None

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def execute_action(
        self,
        guild: discord.Guild,
        invoker: Any,
        target: Any,
        infraction_type: InfractionType,
        reason: str,
        duration: Optional[str] = None,
    ) -> discord.Embed:
        """
        Validate, persist and enforce one moderation action.

        Args:
            guild: Guild the command was used in
            invoker: Member running the command
            target: Member being moderated
            infraction_type: What to do
            reason: Reason text
            duration: Raw duration string, only used for mutes

        Returns:
            discord.Embed: The reply to send back to the invoker.
        """
        target_name = str(target)

        if not self.is_staff(invoker):
            return self.failure_embed(
                infraction_type, target_name, ActionError.PERMISSION_DENIED,
                "You do not have permission to use this command.",
            )

        problem = self.check_target(invoker, target)
        if problem:
            return self.failure_embed(infraction_type, target_name, ActionError.PERMISSION_DENIED, problem)

        result = await self.service.apply_infraction(
            infraction_type,
            target.id,
            StaffMember(user_id=invoker.id, display_name=str(invoker)),
            reason,
            duration,
            target_username=target_name,
        )
        if not result.ok:
            return self.failure_embed(infraction_type, target_name, result.error, result.detail)

        await self.notify_target(guild, target, result)

        try:
            await self.enforce(guild, target, result)
        except discord.HTTPException as exc:
            logger.error(
                "[MODERATION] %s of %s failed, revoking infraction %s: %s",
                infraction_type, target.id, result.record.infraction_id, exc,
            )
            await self.service.revoke_infraction(result.record.infraction_id)
            return create_failure_embed(ActionFailure(
                infraction_type=infraction_type,
                target=target_name,
                title="Action failed",
                description=(
                    f"I could not {infraction_type} {target_name}, so no infraction was recorded. "
                    "Check my role position and permissions."
                ),
            ))

        avatar = getattr(target, "display_avatar", None)
        return create_success_embed(ActionSummary(
            infraction_type=infraction_type,
            target=target_name,
            staff=str(invoker),
            reason=result.record.reason,
            timestamp=result.record.created_at,
            infraction_id=result.record.infraction_id,
            duration=result.mute.duration if result.mute else None,
            target_avatar_url=avatar.url if avatar is not None else None,
        ))

    @staticmethod
    def failure_embed(
        infraction_type: InfractionType,
        target: str,
        error: Optional[ActionError],
        detail: str,
    ) -> discord.Embed:
        titles = {
            ActionError.INVALID_DURATION: "Invalid Timespan",
            ActionError.INVALID_REASON: "Missing Reason",
            ActionError.PERMISSION_DENIED: "Not Allowed",
        }
        return create_failure_embed(ActionFailure(
            infraction_type=infraction_type,
            target=target,
            title=titles.get(error, "Action failed"),
            description=detail or f"Failed to {infraction_type} {target}",
        ))

    async def notify_target(self, guild: discord.Guild, target: discord.Member, result: InfractionResult) -> None:
        """DM the member about the action. Closed DMs are not an error."""
        record = result.record
        lines = [f"You have been {format_type(record.infraction_type)} in **{guild.name}**.", f"Reason: {record.reason}"]
        if result.mute is not None:
            lines.append(f"Duration: {format_duration(result.mute.duration)}")
        try:
            await target.send("\n".join(lines))
        except discord.HTTPException as exc:
            logger.debug("[MODERATION] Could not DM %s: %s", target.id, exc)

    async def enforce(self, guild: discord.Guild, target: discord.Member, result: InfractionResult) -> None:
        """
        Apply a stored infraction on Discord.

        Raises:
            discord.HTTPException: The guild refused the action.
        """
        record = result.record
        audit_reason = truncate(f"{record.staff_username}: {record.reason}", MAX_REASON_LENGTH)

        if record.infraction_type is InfractionType.KICK:
            await target.kick(reason=audit_reason)
        elif record.infraction_type is InfractionType.BAN:
            await guild.ban(target, reason=audit_reason)
        elif record.infraction_type is InfractionType.MUTE:
            role = guild.get_role(self.config.mute_role_id) if self.config.mute_role_id else None
            if role is not None:
                await target.add_roles(role, reason=audit_reason)
            else:
                await target.timeout_for(min(result.mute.duration, MAX_TIMEOUT), reason=audit_reason)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def infraction_pages(self, invoker: Any, target: Any) -> List[discord.Embed]:
        """History pages for ``target``, or a single failure embed for non-staff."""
        if not self.is_staff(invoker):
            return [self.failure_embed(
                InfractionType.WARN, str(target), ActionError.PERMISSION_DENIED,
                "You do not have permission to use this command.",
            )]
        records = await self.service.get_user_infractions(target.id)
        return build_infraction_pages(str(target), records)

    # ------------------------------------------------------------------
    # Text commands
    # ------------------------------------------------------------------

    def build_command_table(self) -> CommandTable:
        """The text command table: warn, kick, ban, mute and infractions."""
        table = CommandTable()
        user = CommandParam("user", ParamKind.USER)
        reason = CommandParam("reason", ParamKind.TEXT)

        table.register("warn", self._text_action(InfractionType.WARN), user, reason, description="Warn a user.")
        table.register("kick", self._text_action(InfractionType.KICK), user, reason, description="Kick a user.")
        table.register("ban", self._text_action(InfractionType.BAN), user, reason, description="Ban a user.")
        table.register(
            "mute", self._text_action(InfractionType.MUTE),
            user, CommandParam("duration", ParamKind.WORD), reason,
            description="Mute a user for a duration such as 1h15m.",
        )
        table.register("infractions", self._text_infractions, user, description="Show a user's infractions.")
        return table

    def _text_action(self, infraction_type: InfractionType):
        async def run(message: discord.Message, user: discord.Member, reason: str, duration: Optional[str] = None):
            return [await self.execute_action(message.guild, message.author, user, infraction_type, reason, duration)]

        run.__name__ = f"text_{infraction_type.value}"
        return run

    async def _text_infractions(self, message: discord.Message, user: discord.Member) -> Sequence[discord.Embed]:
        return await self.infraction_pages(message.author, user)
