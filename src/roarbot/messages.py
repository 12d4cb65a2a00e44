from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _not_in_choices(token: str, options: Sequence[str]) -> str:
    listed = ", ".join(_quote(option) for option in options)
    return f"{_quote(token)} has to be one of {listed}."


def _not_a_number(token: str) -> str:
    return f"{_quote(token)} is not a number."


def _missing_argument(label: str) -> str:
    return f"Missing {label}."


def _unknown_command(command: str) -> str:
    return f"The command {command} doesn't exist!"


@dataclass(frozen=True, slots=True)
class Messages:
    """Wording of every notice the bot sends on its own.

    Override single entries with ``dataclasses.replace(DEFAULT_MESSAGES, ...)``.
    """

    not_in_choices: Callable[[str, Sequence[str]], str] = _not_in_choices
    not_a_number: Callable[[str], str] = _not_a_number
    missing_argument: Callable[[str], str] = _missing_argument
    too_many_arguments: str = "You have too many arguments."
    optional_before_required: str = (
        "In the command's pattern, there is a required argument after an "
        "optional one. This is an issue with the bot, not your command."
    )
    full_not_last: str = (
        "In the command's pattern, an argument taking the rest of the message "
        "isn't the last one. This is an issue with the bot, not your command."
    )
    unknown_command: Callable[[str], str] = _unknown_command
    banned: str = "You are banned from using this bot."
    admin_only: str = (
        "You can't use this command as it is limited to administrators."
    )
    handler_failed: str = "\N{COLLISION SYMBOL} There was an error!"


DEFAULT_MESSAGES = Messages()
