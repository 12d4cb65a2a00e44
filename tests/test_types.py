import json
from datetime import UTC, datetime

import msgspec
import pytest

from roarbot.schemas import (
    ApiFailure,
    AuthPacket,
    PostPacket,
    decode_login,
    decode_packet,
    decode_post_response,
)
from roarbot.types import Attachment, Reaction, post_from_payload
from tests.factories import post_frame, post_payload


def test_decode_packet_by_cmd() -> None:
    packet = decode_packet(json.dumps({"cmd": "auth", "val": {"token": "t"}}))
    assert isinstance(packet, AuthPacket)
    assert packet.val.token == "t"

    packet = decode_packet(post_frame("hi"))
    assert isinstance(packet, PostPacket)
    assert packet.val.p == "hi"


def test_decode_packet_rejects_unknown_cmd() -> None:
    with pytest.raises(msgspec.ValidationError):
        decode_packet(json.dumps({"cmd": "pmsg", "val": {}}))


def test_post_from_payload_maps_fields() -> None:
    payload = post_payload(
        "hello",
        post_id="p1",
        origin="inbox",
        username="alice",
        created=1_700_000_000,
        edited_at=1_700_000_100,
        attachments=[
            {
                "id": "a1",
                "filename": "cat.png",
                "mime": "image/png",
                "size": 10,
                "width": 2,
                "height": 3,
            }
        ],
        reactions=[{"emoji": "\N{CAT FACE}", "count": 2, "user_reacted": True}],
    )
    packet = decode_packet(json.dumps({"cmd": "post", "val": payload}))
    assert isinstance(packet, PostPacket)

    post = post_from_payload(packet.val)

    assert post.id == "p1"
    assert post.origin == "inbox"
    assert post.is_inbox
    assert post.username == "alice"
    assert post.content == "hello"
    assert post.created_at == datetime.fromtimestamp(1_700_000_000, tz=UTC)
    assert post.edited_at == datetime.fromtimestamp(1_700_000_100, tz=UTC)
    assert post.attachments == (
        Attachment(
            id="a1", filename="cat.png", mime="image/png", size=10, width=2, height=3
        ),
    )
    assert post.reactions == (
        Reaction(emoji="\N{CAT FACE}", count=2, user_reacted=True),
    )
    assert post.raw is not None
    assert post.raw["isDeleted"] is False


def test_post_without_edit_has_no_edited_at() -> None:
    packet = decode_packet(post_frame("hello"))
    assert isinstance(packet, PostPacket)
    post = post_from_payload(packet.val)
    assert post.edited_at is None
    assert not post.is_inbox


def test_reply_chain_is_recursive_and_keeps_missing_entries() -> None:
    inner = post_payload("inner", post_id="p0")
    middle = post_payload("middle", post_id="p1", reply_to=[inner, None])
    packet = decode_packet(
        json.dumps(
            {"cmd": "post", "val": post_payload("top", post_id="p2", reply_to=[middle])}
        )
    )
    assert isinstance(packet, PostPacket)

    post = post_from_payload(packet.val)

    (first,) = post.reply_to
    assert first is not None
    assert first.id == "p1"
    assert first.raw is None
    nested, missing = first.reply_to
    assert nested is not None
    assert nested.content == "inner"
    assert missing is None


def test_posts_compare_without_raw() -> None:
    packet = decode_packet(post_frame("same"))
    assert isinstance(packet, PostPacket)
    assert post_from_payload(packet.val) == post_from_payload(
        packet.val, keep_raw=False
    )


def test_decode_login() -> None:
    ok = decode_login(json.dumps({"error": False, "token": "abc", "account": {}}))
    assert not isinstance(ok, ApiFailure)
    assert ok.token == "abc"

    failed = decode_login(json.dumps({"error": True, "type": "invalidCredentials"}))
    assert isinstance(failed, ApiFailure)
    assert failed.type == "invalidCredentials"


def test_decode_post_response() -> None:
    ok = decode_post_response(json.dumps({"error": False, **post_payload("x")}))
    assert not isinstance(ok, ApiFailure)
    assert ok.p == "x"

    failed = decode_post_response(json.dumps({"error": True, "type": "Unauthorized"}))
    assert isinstance(failed, ApiFailure)


def test_edited_at_zero_is_kept() -> None:
    packet = decode_packet(post_frame("hello", edited_at=0))
    assert isinstance(packet, PostPacket)
    post = post_from_payload(packet.val)
    assert post.edited_at == datetime.fromtimestamp(0, tz=UTC)
