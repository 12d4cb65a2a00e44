import json

import httpx
import pytest

from roarbot.client import MeowerClient
from roarbot.errors import ApiError, LoginError, RoarBotError
from roarbot.logging import setup_logging
from tests.factories import post_payload


def _client(handler) -> tuple[MeowerClient, httpx.AsyncClient]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return MeowerClient(api_url="https://api.test/", client=http_client), http_client


@pytest.mark.anyio
async def test_login_returns_token() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"error": False, "token": "tok"})

    client, http_client = _client(handler)
    try:
        token = await client.login("BearBot", "hunter2")
    finally:
        await http_client.aclose()

    assert token == "tok"
    assert str(requests[0].url) == "https://api.test/auth/login"
    assert json.loads(requests[0].content) == {
        "username": "BearBot",
        "password": "hunter2",
    }


@pytest.mark.anyio
async def test_login_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            401, json={"error": True, "type": "invalidCredentials"}
        )

    client, http_client = _client(handler)
    try:
        with pytest.raises(LoginError, match="invalidCredentials"):
            await client.login("BearBot", "wrong")
    finally:
        await http_client.aclose()


@pytest.mark.anyio
async def test_login_bad_body_raises_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    client, http_client = _client(handler)
    try:
        with pytest.raises(ApiError, match="unexpected response"):
            await client.login("BearBot", "pw")
    finally:
        await http_client.aclose()


@pytest.mark.anyio
async def test_network_error_raises_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    client, http_client = _client(handler)
    try:
        with pytest.raises(ApiError, match="network error"):
            await client.login("BearBot", "pw")
    finally:
        await http_client.aclose()


@pytest.mark.anyio
async def test_send_post_requires_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client, http_client = _client(handler)
    try:
        with pytest.raises(RoarBotError, match="not logged in"):
            await client.send_post("home", "hi")
    finally:
        await http_client.aclose()


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("chat", "path"), [("home", "/home"), ("abc-123", "/posts/abc-123")]
)
async def test_send_post(chat: str, path: str) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        body = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "error": False,
                **post_payload(body["content"], post_id="new", origin=chat),
            },
        )

    client, http_client = _client(handler)
    client.bind_token("tok")
    try:
        post = await client.send_post(chat, "hello", reply_to=["p1"])
    finally:
        await http_client.aclose()

    assert post.id == "new"
    assert post.content == "hello"
    request = requests[0]
    assert request.url.path == path
    assert request.headers["Token"] == "tok"
    assert json.loads(request.content) == {
        "content": "hello",
        "reply_to": ["p1"],
        "attachments": [],
    }


@pytest.mark.anyio
async def test_send_post_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": True, "type": "missingPermissions"})

    client, http_client = _client(handler)
    client.bind_token("tok")
    try:
        with pytest.raises(ApiError) as exc:
            await client.send_post("home", "hi")
    finally:
        await http_client.aclose()

    assert exc.value.error_type == "missingPermissions"


@pytest.mark.anyio
async def test_no_token_in_logs_on_bad_response(
    capsys: pytest.CaptureFixture[str],
) -> None:
    setup_logging(debug=True)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="token=supersecret oops")

    client, http_client = _client(handler)
    client.bind_token("supersecret")
    try:
        with pytest.raises(ApiError):
            await client.send_post("home", "hi")
    finally:
        await http_client.aclose()

    out = capsys.readouterr().out
    assert "meower.bad_response" in out
    assert "supersecret" not in out


@pytest.mark.anyio
async def test_delete_post() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"error": False})

    client, http_client = _client(handler)
    client.bind_token("tok")
    try:
        await client.delete_post("p-9")
    finally:
        await http_client.aclose()

    request = requests[0]
    assert request.method == "DELETE"
    assert request.url.path == "/posts"
    assert request.url.params["id"] == "p-9"
    assert request.headers["Token"] == "tok"


@pytest.mark.anyio
async def test_delete_post_non_200_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": True, "type": "notFound"})

    client, http_client = _client(handler)
    client.bind_token("tok")
    try:
        with pytest.raises(ApiError, match="returned 404"):
            await client.delete_post("p-9")
    finally:
        await http_client.aclose()


@pytest.mark.anyio
async def test_delete_post_requires_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client, http_client = _client(handler)
    try:
        with pytest.raises(RoarBotError, match="not logged in"):
            await client.delete_post("p-9")
    finally:
        await http_client.aclose()
