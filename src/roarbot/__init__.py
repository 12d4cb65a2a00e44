"""Build bots for the Meower chat platform."""

from __future__ import annotations

from .bot import RoarBot
from .commands import Command, CommandRegistry
from .context import ReplyContext
from .errors import (
    ApiError,
    CommandError,
    ConfigError,
    DefinitionError,
    InvalidArgumentError,
    LoginError,
    MissingArgumentError,
    ParseError,
    RoarBotError,
    TooManyArgumentsError,
)
from .messages import DEFAULT_MESSAGES, Messages
from .patterns import Choice, Slot, parse_args
from .router import ConnectionState, EventRouter
from .types import Attachment, Post, Reaction

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_MESSAGES",
    "ApiError",
    "Attachment",
    "Choice",
    "Command",
    "CommandError",
    "CommandRegistry",
    "ConfigError",
    "ConnectionState",
    "DefinitionError",
    "EventRouter",
    "InvalidArgumentError",
    "LoginError",
    "Messages",
    "MissingArgumentError",
    "ParseError",
    "Post",
    "Reaction",
    "ReplyContext",
    "RoarBot",
    "RoarBotError",
    "Slot",
    "TooManyArgumentsError",
    "__version__",
    "parse_args",
]
