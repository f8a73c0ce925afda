"""
Structured replies produced by moderation commands.

The command layer fills these in; :mod:`cwebot.ui.moderation_embed` turns
them into Discord embeds. Keeping them separate lets tests assert on the
content without building embeds.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from cwebot.datatypes.infraction_datatypes import InfractionType


@dataclass(slots=True, frozen=True)
class ActionSummary:
    """What happened on a successful action.

    ``duration`` is only set for mutes; the renderer adds a duration field
    only when it is present.
    """
    infraction_type: InfractionType
    target: str
    staff: str
    reason: str
    timestamp: datetime
    infraction_id: str
    duration: timedelta | None = None
    target_avatar_url: str | None = None


@dataclass(slots=True, frozen=True)
class ActionFailure:
    """Why an action could not be completed."""
    infraction_type: InfractionType
    target: str
    title: str
    description: str
