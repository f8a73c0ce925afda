"""
Records for the community tables: campaigns, ranks, requests, suggestions
and tags.

These are flat rows with no relationships enforced between them; any IDs
they hold are plain Discord snowflakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum


class SubmissionState(IntEnum):
    """Review state shared by requests and suggestions."""

    PENDING = 0
    APPROVED = 1
    DENIED = 2


@dataclass(slots=True)
class CampaignRecord:
    """An escalation campaign; at most one per user.

    Attributes:
        user_id: Member the campaign is about (primary key)
        initiator_id: Member who started it
        message_id: Message used to collect votes
        start: When the campaign opened (UTC)
        end: When it closes (UTC)
        minimal: Minimal number of votes needed
        campaign_type: Free integer discriminator chosen by the caller
        reason: Why the campaign was started
    """
    user_id: int
    initiator_id: int
    message_id: int
    start: datetime
    end: datetime
    minimal: int
    campaign_type: int
    reason: str


@dataclass(slots=True)
class RankRecord:
    """A self-assignable role."""
    role_id: int


@dataclass(slots=True)
class RequestRecord:
    """A member request awaiting review. ``request_id`` is None until stored."""
    description: str
    initiator_id: int
    message_id: int
    state: SubmissionState = SubmissionState.PENDING
    request_id: int | None = None


@dataclass(slots=True)
class SuggestionRecord:
    """A suggestion message awaiting review. ``suggestion_id`` is None until stored."""
    initiator_id: int
    message_id: int
    state: SubmissionState = SubmissionState.PENDING
    suggestion_id: int | None = None


@dataclass(slots=True)
class TagRecord:
    """A named text snippet owned by a member. ``tag_id`` is None until stored."""
    name: str
    content: str
    owner_id: int
    tag_id: int | None = None
