from __future__ import annotations

import enum
import inspect
from collections.abc import AsyncIterable, Awaitable, Callable
from typing import Any, Literal, Protocol

import anyio
import msgspec

from .context import ReplyContext
from .errors import LoginError
from .logging import get_logger
from .schemas import AuthPacket, PostPacket, decode_packet
from .transport import PostSender
from .types import post_from_payload

logger = get_logger(__name__)

__all__ = ["EVENTS", "ConnectionState", "EventName", "EventRouter"]

type EventName = Literal["login", "post"]

EVENTS: tuple[EventName, ...] = ("login", "post")


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    AUTHENTICATING = "authenticating"
    CONNECTED = "connected"


class TaskGroup(Protocol):
    def start_soon(
        self, func: Callable[..., Awaitable[object]], *args: Any
    ) -> None: ...


class EventRouter:
    """Turns stream frames into ``login`` and ``post`` events.

    Each frame gets one task on the task group passed to :meth:`handle_frame`.
    That task calls the event's subscribers in the order they were added and
    awaits any awaitable a subscriber returns before calling the next one.
    Frames do not wait for each other.
    """

    def __init__(self, *, sender: PostSender) -> None:
        self.sender = sender
        self._subscribers: dict[EventName, list[Callable[..., object]]] = {
            event: [] for event in EVENTS
        }
        self.state = ConnectionState.DISCONNECTED
        self.token: str | None = None
        self.username: str | None = None
        self._pending_username: str | None = None

    def on(self, event: EventName, callback: Callable[..., object]) -> None:
        try:
            subscribers = self._subscribers[event]
        except KeyError:
            raise ValueError(f"unknown event {event!r}") from None
        subscribers.append(callback)

    def subscribers(self, event: EventName) -> tuple[Callable[..., object], ...]:
        return tuple(self._subscribers[event])

    def begin_login(self, username: str) -> None:
        if self.token is not None:
            raise LoginError("already logged in")
        if self.state is ConnectionState.AUTHENTICATING:
            raise LoginError("a login is already in progress")
        self.state = ConnectionState.AUTHENTICATING
        self._pending_username = username

    def login_failed(self) -> None:
        if self.state is ConnectionState.AUTHENTICATING:
            self.state = ConnectionState.DISCONNECTED
        self._pending_username = None

    def connection_closed(self) -> None:
        if self.state is not ConnectionState.DISCONNECTED:
            logger.info("router.disconnected", username=self.username)
        self.state = ConnectionState.DISCONNECTED
        self.token = None
        self.sender.bind_token(None)
        self.username = None
        self._pending_username = None

    def handle_frame(self, raw: str | bytes, task_group: TaskGroup) -> None:
        try:
            packet = decode_packet(raw)
        except (msgspec.DecodeError, msgspec.ValidationError) as exc:
            logger.debug("router.frame_ignored", error=str(exc))
            return
        if isinstance(packet, AuthPacket):
            self._handle_auth(packet, task_group)
        elif isinstance(packet, PostPacket):
            self._handle_post(packet, task_group)

    async def run(self, frames: AsyncIterable[str | bytes]) -> None:
        try:
            async with anyio.create_task_group() as task_group:
                async for raw in frames:
                    self.handle_frame(raw, task_group)
        finally:
            self.connection_closed()

    def _handle_auth(self, packet: AuthPacket, task_group: TaskGroup) -> None:
        token = packet.val.token
        self.token = token
        self.sender.bind_token(token)
        if self._pending_username is not None:
            self.username = self._pending_username
        self.state = ConnectionState.CONNECTED
        logger.info("router.login", username=self.username)
        self._fire("login", task_group, token)

    def _handle_post(self, packet: PostPacket, task_group: TaskGroup) -> None:
        try:
            post = post_from_payload(packet.val)
        except (OverflowError, OSError, ValueError) as exc:
            logger.debug("router.frame_ignored", error=str(exc))
            return
        reply = ReplyContext.for_post(post, self.sender)
        logger.debug(
            "router.post", post_id=post.id, origin=post.origin, user=post.username
        )
        self._fire("post", task_group, reply, post)

    def _fire(self, event: EventName, task_group: TaskGroup, *args: Any) -> None:
        callbacks = tuple(self._subscribers[event])
        if callbacks:
            task_group.start_soon(self._deliver, event, callbacks, args)

    async def _deliver(
        self,
        event: EventName,
        callbacks: tuple[Callable[..., object], ...],
        args: tuple[Any, ...],
    ) -> None:
        for callback in callbacks:
            try:
                result = callback(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:  # noqa: BLE001
                self._log_failure(event, callback, exc)

    @staticmethod
    def _log_failure(
        event: EventName, callback: Callable[..., object], exc: Exception
    ) -> None:
        logger.exception(
            "router.subscriber_failed",
            event_name=event,
            subscriber=getattr(callback, "__qualname__", repr(callback)),
            error=str(exc),
            error_type=exc.__class__.__name__,
        )
