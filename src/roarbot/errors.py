from __future__ import annotations


class RoarBotError(RuntimeError):
    pass


class ConfigError(RoarBotError):
    pass


class LoginError(RoarBotError):
    pass


class ApiError(RoarBotError):
    def __init__(self, action: str, error_type: str | None = None) -> None:
        message = f"couldn't {action}"
        if error_type:
            message = f"{message}: {error_type}"
        super().__init__(message)
        self.action = action
        self.error_type = error_type


class CommandError(RoarBotError):
    pass


class ParseError(RoarBotError):
    """Raised when message tokens do not fit a command's pattern.

    The exception message is ready to be sent back to the chat as-is.
    """


class DefinitionError(ParseError):
    pass


class MissingArgumentError(ParseError):
    pass


class InvalidArgumentError(ParseError):
    pass


class TooManyArgumentsError(ParseError):
    pass
