from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Protocol

from .types import Post


class PostSender(Protocol):
    def bind_token(self, token: str | None) -> None: ...

    async def send_post(
        self,
        chat: str,
        content: str,
        *,
        reply_to: Sequence[str] = (),
        attachments: Sequence[str] = (),
    ) -> Post: ...


class FrameSource(Protocol):
    def frames(self, token: str) -> AsyncIterator[str | bytes]: ...
