from __future__ import annotations

import importlib
from pathlib import Path

import anyio
import typer

from . import __version__
from .bot import RoarBot
from .errors import ConfigError, RoarBotError
from .logging import setup_logging
from .settings import RoarBotSettings, load_settings


def _print_version_and_exit() -> None:
    typer.echo(__version__)
    raise typer.Exit()


def _version_callback(value: bool) -> None:
    if value:
        _print_version_and_exit()


def load_target(target: str, settings: RoarBotSettings) -> RoarBot:
    """Resolve ``module:attribute`` to a bot.

    The attribute is either a :class:`RoarBot`, which gets the loaded settings
    applied with :meth:`RoarBot.configure`, or a callable taking the settings
    and returning one.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"Invalid target {target!r}; expected `module:attribute`.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"Couldn't import {module_name!r}: {exc}") from exc
    try:
        value = getattr(module, attr)
    except AttributeError:
        raise ConfigError(f"{module_name!r} has no attribute {attr!r}.") from None
    if isinstance(value, RoarBot):
        value.configure(settings)
        return value
    if callable(value):
        bot = value(settings)
        if isinstance(bot, RoarBot):
            return bot
    raise ConfigError(f"{target!r} is not a RoarBot or a factory returning one.")


def _prepare(target: str, config: Path | None) -> tuple[RoarBot, str, str]:
    settings, config_path = load_settings(config)
    bot = load_target(target, settings)
    username, password = settings.require_credentials(config_path)
    return bot, username, password


async def _run_bot(bot: RoarBot, username: str, password: str) -> None:
    try:
        await bot.run(username, password)
    finally:
        await bot.close()


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Run a Meower bot built with roarbot.",
)


@app.callback()
def app_main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """roarbot CLI."""


@app.command()
def run(
    target: str = typer.Argument(..., help="Bot to run, as `module:attribute`."),
    config: Path | None = typer.Option(
        None, "--config", help="Path to roarbot.toml."
    ),
    debug: bool = typer.Option(
        False, "--debug/--no-debug", help="Log frames and API requests."
    ),
) -> None:
    """Log in and handle messages until the connection closes."""
    setup_logging(debug=debug)
    try:
        bot, username, password = _prepare(target, config)
        anyio.run(_run_bot, bot, username, password)
    except RoarBotError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from None


@app.command()
def check(
    target: str = typer.Argument(..., help="Bot to check, as `module:attribute`."),
    config: Path | None = typer.Option(
        None, "--config", help="Path to roarbot.toml."
    ),
) -> None:
    """Load the config and the bot without connecting."""
    try:
        bot, username, _ = _prepare(target, config)
    except RoarBotError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from None
    names = ", ".join(command.name for command in bot.commands) or "none"
    typer.echo(f"user: {username}")
    typer.echo(f"commands: {names}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
