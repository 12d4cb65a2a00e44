"""Msgspec models for Meower payloads (subset used by roarbot)."""

from __future__ import annotations

from typing import Literal

import msgspec

__all__ = [
    "ApiFailure",
    "ApiPost",
    "Attachment",
    "AuthPacket",
    "AuthValue",
    "LoginResult",
    "Packet",
    "PostPacket",
    "PostPayload",
    "Reaction",
    "Timestamp",
    "decode_login",
    "decode_packet",
    "decode_post_response",
]


class Attachment(msgspec.Struct, forbid_unknown_fields=False):
    id: str
    filename: str
    mime: str
    size: int
    width: int
    height: int


class Reaction(msgspec.Struct, forbid_unknown_fields=False):
    emoji: str
    count: int
    user_reacted: bool


class Timestamp(msgspec.Struct, forbid_unknown_fields=False):
    e: int | float


class PostPayload(msgspec.Struct, forbid_unknown_fields=False):
    post_id: str
    post_origin: str
    p: str
    u: str
    t: Timestamp
    type: int = 1
    is_deleted: bool = msgspec.field(default=False, name="isDeleted")
    edited_at: int | float | None = None
    attachments: list[Attachment] = msgspec.field(default_factory=list)
    reactions: list[Reaction] = msgspec.field(default_factory=list)
    reply_to: list[PostPayload | None] = msgspec.field(default_factory=list)


class AuthValue(msgspec.Struct, forbid_unknown_fields=False):
    token: str


class AuthPacket(
    msgspec.Struct, tag_field="cmd", tag="auth", forbid_unknown_fields=False
):
    val: AuthValue


class PostPacket(
    msgspec.Struct, tag_field="cmd", tag="post", forbid_unknown_fields=False
):
    val: PostPayload


type Packet = AuthPacket | PostPacket


class LoginResult(msgspec.Struct, forbid_unknown_fields=False):
    error: Literal[False]
    token: str


class ApiFailure(msgspec.Struct, forbid_unknown_fields=False):
    error: Literal[True]
    type: str


class ApiPost(PostPayload, forbid_unknown_fields=False):
    error: Literal[False] = False


_PACKET_DECODER = msgspec.json.Decoder(AuthPacket | PostPacket)
_FAILURE_DECODER = msgspec.json.Decoder(ApiFailure)
_LOGIN_DECODER = msgspec.json.Decoder(LoginResult)
_POST_DECODER = msgspec.json.Decoder(ApiPost)


def decode_packet(payload: str | bytes) -> Packet:
    return _PACKET_DECODER.decode(payload)


def _decode_failure(payload: str | bytes) -> ApiFailure | None:
    try:
        return _FAILURE_DECODER.decode(payload)
    except msgspec.ValidationError:
        return None


def decode_login(payload: str | bytes) -> LoginResult | ApiFailure:
    failure = _decode_failure(payload)
    if failure is not None:
        return failure
    return _LOGIN_DECODER.decode(payload)


def decode_post_response(payload: str | bytes) -> ApiPost | ApiFailure:
    failure = _decode_failure(payload)
    if failure is not None:
        return failure
    return _POST_DECODER.decode(payload)
