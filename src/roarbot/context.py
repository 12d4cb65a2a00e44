from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .transport import PostSender
from .types import Post


@dataclass(frozen=True, slots=True)
class ReplyContext:
    """Answers one inbound post in the chat it came from."""

    origin: str
    post_id: str
    sender: PostSender = field(compare=False, repr=False)

    async def __call__(
        self, content: str, *, attachments: Sequence[str] = ()
    ) -> Post:
        return await self.sender.send_post(
            self.origin,
            content,
            reply_to=(self.post_id,),
            attachments=attachments,
        )

    @classmethod
    def for_post(cls, post: Post, sender: PostSender) -> ReplyContext:
        return cls(origin=post.origin, post_id=post.id, sender=sender)
