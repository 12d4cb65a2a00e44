from __future__ import annotations

from collections.abc import AsyncIterator
from urllib.parse import urlencode

import websockets

from .logging import get_logger

logger = get_logger(__name__)

DEFAULT_WS_URL = "wss://server.meower.org/"


class MeowerStream:
    """Persistent connection to the Meower event stream.

    Reconnecting is left to the caller; :meth:`frames` ends when the server
    closes the connection.
    """

    def __init__(
        self,
        *,
        ws_url: str = DEFAULT_WS_URL,
        ping_interval_s: float | None = 30,
        ping_timeout_s: float | None = 10,
    ) -> None:
        self._ws_url = ws_url
        self._ping_interval_s = ping_interval_s
        self._ping_timeout_s = ping_timeout_s

    def url_for(self, token: str) -> str:
        return f"{self._ws_url}?{urlencode({'v': 1, 'token': token})}"

    async def frames(self, token: str) -> AsyncIterator[str | bytes]:
        async with websockets.connect(
            self.url_for(token),
            ping_interval=self._ping_interval_s,
            ping_timeout=self._ping_timeout_s,
        ) as ws:
            logger.info("stream.connected", url=self._ws_url)
            try:
                async for message in ws:
                    yield message
            except websockets.ConnectionClosedError as exc:
                logger.warning(
                    "stream.closed_with_error",
                    code=exc.rcvd.code if exc.rcvd else None,
                    reason=exc.rcvd.reason if exc.rcvd else None,
                )
                return
        logger.info("stream.closed")
