"""
Compact duration strings such as ``1h15m`` or ``90s``.

A duration is one or more ``<integer><unit>`` segments written back to back.
Only three units exist: ``h`` (hours), ``m`` (minutes) and ``s`` (seconds).
Anything else, including signs, spaces between segments, or a bare number,
is rejected.

Examples:
    >>> parse_duration("1h15m")
    datetime.timedelta(seconds=4500)
    >>> format_duration(timedelta(minutes=75))
    '1 hour, 15 minutes'
"""

from __future__ import annotations

import re
from datetime import timedelta

UNIT_SECONDS = {
    "h": 3600,
    "m": 60,
    "s": 1,
}

_SEGMENT = re.compile(r"(\d+)([hms])")


class DurationParseError(ValueError):
    """Raised when a duration string does not follow the ``<int><unit>`` grammar."""


def parse_duration(text: str) -> timedelta:
    """
    Convert a compact duration string to a :class:`timedelta`.

    Args:
        text: Duration such as ``"1h15m"``. Case and surrounding whitespace
            are ignored.

    Returns:
        timedelta: The summed duration.

    Raises:
        DurationParseError: If the input is empty, contains a negative
            number, has any token that is not ``<integer><h|m|s>``, or is too
            long to represent.
    """
    if text is None:
        raise DurationParseError("Duration is empty")

    value = text.strip().lower()
    if not value:
        raise DurationParseError("Duration is empty")
    if value.startswith("-"):
        raise DurationParseError(f"Negative durations are not allowed: {text!r}")

    total_seconds = 0
    position = 0
    for match in _SEGMENT.finditer(value):
        if match.start() != position:
            break
        amount, unit = match.groups()
        total_seconds += int(amount) * UNIT_SECONDS[unit]
        position = match.end()

    if position != len(value):
        raise DurationParseError(f"Invalid duration {text!r}, expected something like 1h15m")

    try:
        return timedelta(seconds=total_seconds)
    except OverflowError as exc:
        raise DurationParseError(f"Duration {text!r} is too long") from exc


def try_parse_duration(text: str) -> timedelta | None:
    """Like :func:`parse_duration` but returns ``None`` instead of raising."""
    try:
        return parse_duration(text)
    except DurationParseError:
        return None


def _plural(amount: int, word: str) -> str:
    return f"{amount} {word}{'s' if amount != 1 else ''}"


def format_duration(delta: timedelta) -> str:
    """
    Render a duration for humans, largest unit first.

    Days are split out for long mutes even though the parser never accepts
    them. Sub-second precision is dropped.
    """
    seconds = int(delta.total_seconds())
    if seconds <= 0:
        return "0 seconds"

    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)

    parts = []
    if days:
        parts.append(_plural(days, "day"))
    if hours:
        parts.append(_plural(hours, "hour"))
    if minutes:
        parts.append(_plural(minutes, "minute"))
    if seconds:
        parts.append(_plural(seconds, "second"))
    return ", ".join(parts)
