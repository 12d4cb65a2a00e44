from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import msgspec

from .schemas import PostPayload

SPECIAL_CHATS = frozenset({"home", "livechat", "inbox"})


@dataclass(frozen=True, slots=True)
class Attachment:
    id: str
    filename: str
    mime: str
    size: int
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class Reaction:
    emoji: str
    count: int
    user_reacted: bool


@dataclass(frozen=True, slots=True)
class Post:
    """A post received from Meower.

    ``origin`` is a chat id or one of the special chats ``"home"``,
    ``"livechat"`` and ``"inbox"``. Entries of ``reply_to`` are ``None``
    when the referenced post was deleted or left out by the server.
    """

    id: str
    origin: str
    username: str
    content: str
    created_at: datetime
    edited_at: datetime | None = None
    is_deleted: bool = False
    attachments: tuple[Attachment, ...] = ()
    reactions: tuple[Reaction, ...] = ()
    reply_to: tuple[Post | None, ...] = ()
    raw: dict[str, Any] | None = field(default=None, compare=False, repr=False)

    @property
    def is_inbox(self) -> bool:
        return self.origin == "inbox"


def _timestamp(value: int | float) -> datetime:
    return datetime.fromtimestamp(value, tz=UTC)


def post_from_payload(payload: PostPayload, *, keep_raw: bool = True) -> Post:
    return Post(
        id=payload.post_id,
        origin=payload.post_origin,
        username=payload.u,
        content=payload.p,
        created_at=_timestamp(payload.t.e),
        edited_at=(
            _timestamp(payload.edited_at) if payload.edited_at is not None else None
        ),
        is_deleted=payload.is_deleted,
        attachments=tuple(
            Attachment(
                id=item.id,
                filename=item.filename,
                mime=item.mime,
                size=item.size,
                width=item.width,
                height=item.height,
            )
            for item in payload.attachments
        ),
        reactions=tuple(
            Reaction(
                emoji=item.emoji,
                count=item.count,
                user_reacted=item.user_reacted,
            )
            for item in payload.reactions
        ),
        reply_to=tuple(
            None if item is None else post_from_payload(item, keep_raw=False)
            for item in payload.reply_to
        ),
        raw=msgspec.to_builtins(payload) if keep_raw else None,
    )
