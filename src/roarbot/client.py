from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
import msgspec

from .errors import ApiError, LoginError, RoarBotError
from .logging import get_logger
from .schemas import ApiFailure, decode_login, decode_post_response
from .types import Post, post_from_payload

logger = get_logger(__name__)

DEFAULT_API_URL = "https://api.meower.org"


class MeowerClient:
    """The REST calls the bot needs: logging in, creating and deleting posts."""

    def __init__(
        self,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout_s: float = 30,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base = api_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._owns_client = client is None
        self._token: str | None = None

    @property
    def token(self) -> str | None:
        return self._token

    def bind_token(self, token: str | None) -> None:
        self._token = token

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self,
        action: str,
        path: str,
        *,
        method: str = "POST",
        json_data: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        url = f"{self._base}{path}"
        logger.debug("meower.request", action=action, method=method, path=path)
        try:
            return await self._client.request(
                method, url, json=json_data, params=params, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.error(
                "meower.network_error",
                action=action,
                path=path,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            raise ApiError(action, "network error") from exc

    @staticmethod
    def _bad_response(action: str, resp: httpx.Response, exc: Exception) -> ApiError:
        logger.error(
            "meower.bad_response",
            action=action,
            status=resp.status_code,
            url=str(resp.request.url),
            error=str(exc),
            body=resp.text,
        )
        return ApiError(action, f"unexpected response ({resp.status_code})")

    async def login(self, username: str, password: str) -> str:
        """Exchange credentials for a session token.

        ``password`` may also be a token; the server invalidates it once the
        login succeeds.
        """
        resp = await self._request(
            "log in",
            "/auth/login",
            json_data={"username": username, "password": password},
        )
        try:
            result = decode_login(resp.content)
        except (msgspec.DecodeError, msgspec.ValidationError) as exc:
            raise self._bad_response("log in", resp, exc) from exc
        if isinstance(result, ApiFailure):
            logger.warning("meower.login_failed", username=username, type=result.type)
            raise LoginError(
                f"Couldn't log in: {result.type}. "
                "Ensure that you have the correct password!"
            )
        return result.token

    async def send_post(
        self,
        chat: str,
        content: str,
        *,
        reply_to: Sequence[str] = (),
        attachments: Sequence[str] = (),
    ) -> Post:
        if self._token is None:
            raise RoarBotError("The bot is not logged in.")
        path = "/home" if chat == "home" else f"/posts/{chat}"
        resp = await self._request(
            "post",
            path,
            json_data={
                "content": content,
                "reply_to": list(reply_to),
                "attachments": list(attachments),
            },
            headers={"Token": self._token},
        )
        try:
            result = decode_post_response(resp.content)
        except (msgspec.DecodeError, msgspec.ValidationError) as exc:
            raise self._bad_response("post", resp, exc) from exc
        if isinstance(result, ApiFailure):
            logger.warning("meower.post_failed", chat=chat, type=result.type)
            raise ApiError("post", result.type)
        return post_from_payload(result)

    async def delete_post(self, post_id: str) -> None:
        if self._token is None:
            raise RoarBotError("The bot is not logged in.")
        resp = await self._request(
            "delete post",
            "/posts",
            method="DELETE",
            params={"id": post_id},
            headers={"Token": self._token},
        )
        if resp.status_code != 200:
            logger.warning(
                "meower.delete_failed", post_id=post_id, status=resp.status_code
            )
            raise ApiError("delete post", f"the API returned {resp.status_code}")
