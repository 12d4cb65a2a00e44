from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

from .client import MeowerClient
from .commands import Command, CommandHandler, CommandRegistry
from .context import ReplyContext
from .errors import RoarBotError
from .logging import bind_bot_context, clear_context, get_logger
from .messages import DEFAULT_MESSAGES, Messages
from .patterns import Pattern
from .router import ConnectionState, EventName, EventRouter
from .settings import RoarBotSettings
from .stream import MeowerStream
from .transport import FrameSource
from .types import Post

logger = get_logger(__name__)

__all__ = ["RoarBot"]

F = TypeVar("F", bound=Callable[..., object])


class RoarBot:
    """A bot connecting to Meower.

    Commands and event subscribers are registered before :meth:`run`::

        bot = RoarBot(admins=["mbw"])

        @bot.command("add", pattern=["number", "number"])
        async def add(reply, args, post):
            await reply(str(args[0] + args[1]))

        await bot.run("BearBot", os.environ["BEARBOT_PASSWORD"])
    """

    def __init__(
        self,
        *,
        admins: Iterable[str] = (),
        banned: Iterable[str] = (),
        messages: Messages = DEFAULT_MESSAGES,
        client: MeowerClient | None = None,
        stream: FrameSource | None = None,
    ) -> None:
        self.client = client or MeowerClient()
        self.stream: FrameSource = stream or MeowerStream()
        self._default_client = client is None
        self._default_stream = stream is None
        self._router = EventRouter(sender=self.client)
        self._registry = CommandRegistry(
            messages=messages, admins=admins, banned=banned
        )
        self._router.on("post", self._dispatch_post)

    @classmethod
    def from_settings(cls, settings: RoarBotSettings, **kwargs: Any) -> RoarBot:
        return cls(
            admins=settings.admins,
            banned=settings.banned,
            client=MeowerClient(
                api_url=settings.api_url, timeout_s=settings.http_timeout_s
            ),
            stream=MeowerStream(ws_url=settings.ws_url),
            **kwargs,
        )

    def configure(self, settings: RoarBotSettings) -> None:
        """Apply loaded settings to a bot that was built without them.

        Admins and banned users are added to the ones given at construction.
        The endpoints only replace a client or stream the bot created itself.
        """
        if self.state is not ConnectionState.DISCONNECTED:
            raise RoarBotError("Settings can't change while the bot is running.")
        self._registry.admins |= frozenset(settings.admins)
        self._registry.banned |= frozenset(settings.banned)
        if self._default_client:
            self.client = MeowerClient(
                api_url=settings.api_url, timeout_s=settings.http_timeout_s
            )
            self._router.sender = self.client
        if self._default_stream:
            self.stream = MeowerStream(ws_url=settings.ws_url)
        logger.debug(
            "bot.configured",
            admins=sorted(self._registry.admins),
            banned=sorted(self._registry.banned),
        )

    @property
    def username(self) -> str | None:
        return self._router.username

    @property
    def token(self) -> str | None:
        return self._router.token

    @property
    def state(self) -> ConnectionState:
        return self._router.state

    @property
    def commands(self) -> tuple[Command, ...]:
        return self._registry.commands

    def on(
        self, event: EventName, callback: Callable[..., object] | None = None
    ) -> Any:
        """Subscribe to ``"login"`` (called with the token) or ``"post"``
        (called with a :class:`ReplyContext` and the :class:`Post`).

        Works as a plain call or as a decorator.
        """
        if callback is not None:
            self._router.on(event, callback)
            return callback

        def decorator(func: F) -> F:
            self._router.on(event, func)
            return func

        return decorator

    def register(self, command: Command) -> Command:
        return self._registry.register(command)

    def command(
        self,
        name: str,
        *,
        pattern: Pattern = (),
        aliases: Sequence[str] = (),
        description: str | None = None,
        category: str = "None",
        admin_only: bool = False,
    ) -> Callable[[CommandHandler], CommandHandler]:
        def decorator(handler: CommandHandler) -> CommandHandler:
            self._registry.register(
                Command(
                    name=name,
                    handler=handler,
                    pattern=tuple(pattern),
                    aliases=tuple(aliases),
                    description=description,
                    category=category,
                    admin_only=admin_only,
                )
            )
            return handler

        return decorator

    async def _login(self, username: str, password: str) -> str:
        self._router.begin_login(username)
        try:
            token = await self.client.login(username, password)
        except BaseException:
            self._router.login_failed()
            raise
        logger.info("bot.login_accepted", username=username)
        return token

    async def run(self, username: str, password: str) -> None:
        """Log in and handle the stream until the server closes it."""
        token = await self._login(username, password)
        bind_bot_context(bot=username)
        try:
            await self._router.run(self.stream.frames(token))
        finally:
            clear_context()

    async def post(
        self,
        content: str,
        *,
        chat: str = "home",
        reply_to: Sequence[str] = (),
        attachments: Sequence[str] = (),
    ) -> Post:
        return await self.client.send_post(
            chat, content, reply_to=reply_to, attachments=attachments
        )

    async def delete(self, post: Post) -> None:
        """Delete one of the bot's own posts."""
        if self.token is None:
            raise RoarBotError("The bot is not logged in.")
        if post.username != self.username:
            raise RoarBotError("This post is not made by the bot.")
        await self.client.delete_post(post.id)

    async def close(self) -> None:
        await self.client.close()

    def _dispatch_post(self, reply: ReplyContext, post: Post) -> Any:
        return self._registry.dispatch(reply, post, username=self._router.username)
