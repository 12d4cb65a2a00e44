"""Declarative argument patterns and the parser that checks tokens against them.

A pattern is an ordered sequence of slots. Each slot is either a bare type
(``"string"``, ``"number"``, ``"full"`` or a :class:`Choice`) or a
:class:`Slot` carrying a name and an optional flag::

    pattern = ["number", Slot("full", name="message")]
    parse_args(pattern, ["7", "Hello,", "world!"])  # [7, "Hello, world!"]

Optional slots may only be followed by optional slots, and a ``"full"`` slot
(which swallows the rest of the message) must come last. Breaking either rule
is a bug in the command definition and is reported as :class:`DefinitionError`
no matter what the caller typed.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

from .errors import (
    DefinitionError,
    InvalidArgumentError,
    MissingArgumentError,
    TooManyArgumentsError,
)
from .messages import DEFAULT_MESSAGES, Messages

__all__ = [
    "ArgType",
    "Choice",
    "Pattern",
    "Slot",
    "as_slot",
    "parse_args",
    "validate_pattern",
]

type ArgType = Literal["string", "number", "full"]

_ARG_TYPES: frozenset[str] = frozenset({"string", "number", "full"})


@dataclass(frozen=True, slots=True, init=False)
class Choice:
    options: tuple[str, ...]

    def __init__(self, *options: str) -> None:
        if not options:
            raise ValueError("Choice requires at least one option")
        object.__setattr__(self, "options", tuple(options))

    def __contains__(self, value: object) -> bool:
        return value in self.options


@dataclass(frozen=True, slots=True)
class Slot:
    type: ArgType | Choice
    name: str | None = None
    optional: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.type, Choice) and self.type not in _ARG_TYPES:
            raise ValueError(f"unknown argument type {self.type!r}")

    @property
    def is_full(self) -> bool:
        return self.type == "full"

    @property
    def label(self) -> str:
        if self.name:
            return self.name
        if isinstance(self.type, Choice):
            return "one of " + ", ".join(self.type.options)
        return self.type


type Pattern = Sequence[Slot | ArgType | Choice]


_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)
_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def as_slot(item: Slot | ArgType | Choice) -> Slot:
    if isinstance(item, Slot):
        return item
    return Slot(type=item)


def validate_pattern(
    pattern: Pattern, messages: Messages = DEFAULT_MESSAGES
) -> tuple[Slot, ...]:
    slots = tuple(as_slot(item) for item in pattern)
    seen_optional = False
    for index, slot in enumerate(slots):
        if slot.optional:
            seen_optional = True
        elif seen_optional:
            raise DefinitionError(messages.optional_before_required)
        if slot.is_full and index != len(slots) - 1:
            raise DefinitionError(messages.full_not_last)
    return slots


def _parse_number(token: str, messages: Messages) -> int | float:
    if _INT_RE.fullmatch(token):
        return int(token)
    if _FLOAT_RE.fullmatch(token):
        return float(token)
    raise InvalidArgumentError(messages.not_a_number(token))


def _resolve(slot: Slot, token: str, messages: Messages) -> Any:
    if isinstance(slot.type, Choice):
        if token not in slot.type:
            raise InvalidArgumentError(
                messages.not_in_choices(token, slot.type.options)
            )
        return token
    if slot.type == "number":
        return _parse_number(token, messages)
    return token


def parse_args(
    pattern: Pattern,
    tokens: Sequence[str],
    messages: Messages = DEFAULT_MESSAGES,
) -> list[Any]:
    """Check ``tokens`` against ``pattern`` and return the typed values.

    The result lines up with the pattern; optional slots without a token
    yield ``None``. Raises a :class:`~roarbot.errors.ParseError` subclass
    whose message can be sent to the chat unchanged.
    """
    slots = validate_pattern(pattern, messages)
    values: list[Any] = []
    consumed = 0
    for index, slot in enumerate(slots):
        if index >= len(tokens):
            if slot.optional:
                values.append(None)
                continue
            if not slot.is_full:
                raise MissingArgumentError(messages.missing_argument(slot.label))
        if slot.is_full:
            values.append(" ".join(tokens[index:]))
            consumed = len(tokens)
            continue
        values.append(_resolve(slot, tokens[index], messages))
        consumed += 1
    has_full = any(slot.is_full for slot in slots)
    if not has_full and consumed != len(tokens):
        raise TooManyArgumentsError(messages.too_many_arguments)
    return values
