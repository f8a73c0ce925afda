"""
Explicit table of text commands.

Each entry maps a command name to a handler and the arguments it expects.
:meth:`CommandTable.parse` splits a message, checks every argument against
its declared kind and only then returns an invocation, so handlers always
receive well-formed values.

Argument kinds:
    USER  - ``<@123>``, ``<@!123>`` or a bare snowflake, converted to ``int``
    WORD  - a single whitespace-free token, kept as ``str``
    TEXT  - the rest of the message, must not be empty
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

USER_MENTION = re.compile(r"^<@!?(\d{15,21})>$")
SNOWFLAKE = re.compile(r"^\d{15,21}$")


class ParamKind(Enum):
    USER = "user"
    WORD = "word"
    TEXT = "text"


@dataclass(frozen=True)
class CommandParam:
    name: str
    kind: ParamKind


@dataclass(frozen=True)
class CommandSpec:
    """A registered command: its name, handler and ordered parameters."""
    name: str
    handler: Callable[..., Awaitable[Any]]
    params: Sequence[CommandParam] = field(default_factory=tuple)
    description: str = ""

    @property
    def usage(self) -> str:
        return " ".join([self.name, *(f"<{param.name}>" for param in self.params)])


@dataclass(frozen=True)
class CommandInvocation:
    """A parsed, validated call ready to hand to ``spec.handler``."""
    spec: CommandSpec
    arguments: Dict[str, Any]


class CommandParseError(ValueError):
    """The message named a known command but its arguments do not fit."""

    def __init__(self, spec: CommandSpec, message: str) -> None:
        super().__init__(message)
        self.spec = spec


def _split_first(text: str) -> tuple[str, str]:
    """First whitespace-separated token and the stripped rest."""
    parts = text.split(None, 1)
    if not parts:
        return "", ""
    return parts[0], parts[1].strip() if len(parts) > 1 else ""


def parse_user_id(token: str) -> Optional[int]:
    """Snowflake from a mention or a raw ID, or None."""
    match = USER_MENTION.match(token)
    if match:
        return int(match.group(1))
    if SNOWFLAKE.match(token):
        return int(token)
    return None


class CommandTable:
    """Registry of text commands keyed by lower-case name."""

    def __init__(self) -> None:
        self._commands: Dict[str, CommandSpec] = {}

    def register(
        self,
        name: str,
        handler: Callable[..., Awaitable[Any]],
        *params: CommandParam,
        description: str = "",
    ) -> CommandSpec:
        """Add a command. Only the last parameter may be TEXT."""
        key = name.lower()
        if key in self._commands:
            raise ValueError(f"Command {name!r} is already registered")
        for param in params[:-1]:
            if param.kind is ParamKind.TEXT:
                raise ValueError(f"TEXT parameter {param.name!r} must be the last one")

        spec = CommandSpec(name=key, handler=handler, params=tuple(params), description=description)
        self._commands[key] = spec
        return spec

    def get(self, name: str) -> Optional[CommandSpec]:
        return self._commands.get(name.lower())

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._commands

    def __iter__(self):
        return iter(self._commands.values())

    def parse(self, content: str, prefix: str) -> Optional[CommandInvocation]:
        """
        Parse ``content`` as a prefixed command.

        Returns:
            None if the message is not a command in this table, otherwise a
            validated :class:`CommandInvocation`.

        Raises:
            CommandParseError: The command exists but an argument is missing
                or malformed. The message is safe to show to the user.
        """
        if not prefix or not content.startswith(prefix):
            return None

        body = content[len(prefix):].strip()
        if not body:
            return None

        name, rest = _split_first(body)
        spec = self.get(name)
        if spec is None:
            return None

        arguments: Dict[str, Any] = {}
        remaining = rest.strip()
        for param in spec.params:
            if param.kind is ParamKind.TEXT:
                if not remaining:
                    raise CommandParseError(spec, f"Missing {param.name}. Usage: {prefix}{spec.usage}")
                arguments[param.name] = remaining
                remaining = ""
                continue

            token, remaining = _split_first(remaining)
            if not token:
                raise CommandParseError(spec, f"Missing {param.name}. Usage: {prefix}{spec.usage}")

            if param.kind is ParamKind.USER:
                user_id = parse_user_id(token)
                if user_id is None:
                    raise CommandParseError(spec, f"{token!r} is not a user mention or ID.")
                arguments[param.name] = user_id
            else:
                arguments[param.name] = token

        if remaining:
            raise CommandParseError(spec, f"Too many arguments. Usage: {prefix}{spec.usage}")

        return CommandInvocation(spec=spec, arguments=arguments)
