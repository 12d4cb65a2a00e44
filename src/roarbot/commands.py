from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any

from .context import ReplyContext
from .errors import CommandError, DefinitionError, ParseError
from .logging import get_logger
from .messages import DEFAULT_MESSAGES, Messages
from .patterns import ArgType, Choice, Slot, parse_args, validate_pattern
from .types import Post

logger = get_logger(__name__)

__all__ = ["Command", "CommandHandler", "CommandRegistry"]

type CommandHandler = Callable[
    [ReplyContext, list[Any], Post], Awaitable[object] | object
]


@dataclass(frozen=True, slots=True)
class Command:
    name: str
    handler: CommandHandler
    pattern: tuple[Slot | ArgType | Choice, ...] = ()
    aliases: tuple[str, ...] = ()
    description: str | None = None
    category: str = "None"
    admin_only: bool = False

    @property
    def triggers(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


class CommandRegistry:
    def __init__(
        self,
        *,
        messages: Messages = DEFAULT_MESSAGES,
        admins: Iterable[str] = (),
        banned: Iterable[str] = (),
    ) -> None:
        self.messages = messages
        self.admins = frozenset(admins)
        self.banned = frozenset(banned)
        self._commands: list[Command] = []
        self._by_trigger: dict[str, Command] = {}

    @property
    def commands(self) -> tuple[Command, ...]:
        return tuple(self._commands)

    def get(self, trigger: str) -> Command | None:
        return self._by_trigger.get(trigger)

    def register(self, command: Command) -> Command:
        triggers = command.triggers
        if len(set(triggers)) != len(triggers):
            raise CommandError(
                f"command {command.name!r} repeats its name or an alias"
            )
        for trigger in triggers:
            existing = self._by_trigger.get(trigger)
            if existing is not None:
                raise CommandError(
                    f"{trigger!r} is already used by command {existing.name!r}"
                )
        try:
            validate_pattern(command.pattern, self.messages)
        except DefinitionError as exc:
            logger.warning(
                "command.pattern_invalid", command=command.name, error=str(exc)
            )
        self._commands.append(command)
        for trigger in triggers:
            self._by_trigger[trigger] = command
        logger.debug(
            "command.registered", command=command.name, aliases=command.aliases
        )
        return command

    async def _reply(self, reply: ReplyContext, text: str, *, command: str) -> None:
        try:
            await reply(text)
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "command.reply_failed",
                command=command,
                origin=reply.origin,
                post_id=reply.post_id,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )

    async def dispatch(
        self, reply: ReplyContext, post: Post, *, username: str | None
    ) -> None:
        if username is None or post.username == username:
            return
        tokens = post.content.split()
        if not tokens or tokens[0].lower() != f"@{username}".lower():
            return
        if len(tokens) < 2:
            return
        trigger = tokens[1]
        command = self._by_trigger.get(trigger)
        if command is None:
            await self._reply(
                reply, self.messages.unknown_command(trigger), command=trigger
            )
            return
        if post.username in self.banned:
            logger.info(
                "command.denied",
                command=command.name,
                user=post.username,
                reason="banned",
            )
            await self._reply(reply, self.messages.banned, command=command.name)
            return
        if command.admin_only and post.username not in self.admins:
            logger.info(
                "command.denied",
                command=command.name,
                user=post.username,
                reason="admin",
            )
            await self._reply(reply, self.messages.admin_only, command=command.name)
            return
        try:
            args = parse_args(command.pattern, tokens[2:], self.messages)
        except ParseError as exc:
            await self._reply(reply, str(exc), command=command.name)
            return
        logger.info(
            "command.run", command=command.name, user=post.username, post_id=post.id
        )
        try:
            result = command.handler(reply, args, post)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "command.failed",
                command=command.name,
                post_id=post.id,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            await self._reply(
                reply, self.messages.handler_failed, command=command.name
            )
