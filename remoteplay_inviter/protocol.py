# =============================================================================
# Remote Play Inviter -- Wire Protocol Codec
# =============================================================================
#
# One JSON object per text frame. The "cmd" field selects the variant and the
# variant's fields sit beside "id" in the same object:
#
# Incoming (server -> client):
#   {"id": "1", "user": {"id": "..", "name": ".."}, "cmd": "link", "game": 730}
#   cmd: message | game | link | exit, anything else decodes to InvalidCommand
#
# Outgoing (client -> server):
#   {"id": "1", "cmd": "link", "url": "https://..."}
#   cmd: game | link | error
# =============================================================================

from __future__ import annotations

import json
from typing import Any, Callable

from .constants import MAX_MESSAGE_SIZE
from .errors import InviterProtocolError
from .types import (
    ClientMessage,
    ClientResponse,
    CreateLinkCommand,
    ErrorResponse,
    ExitCommand,
    GameIdResponse,
    InvalidCommand,
    LinkResponse,
    MessageCommand,
    QueryGameIdCommand,
    ServerCommand,
    ServerMessage,
    User,
)

try:
    import orjson

    def _json_loads(data: str | bytes) -> Any:
        return orjson.loads(data)

    def _json_dumps(obj: Any) -> str:
        return orjson.dumps(obj).decode()

except ImportError:

    def _json_loads(data: str | bytes) -> Any:
        return json.loads(data)

    def _json_dumps(obj: Any) -> str:
        return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


_U32_MAX = 0xFFFFFFFF


# -- Decoding ------------------------------------------------------------------


def decode_message(data: str | bytes) -> ServerMessage:
    """Decode one inbound frame.

    Unknown ``cmd`` values decode to :class:`InvalidCommand`; only malformed
    JSON or a missing/mistyped required field is an error.

    Raises:
        InviterProtocolError: If the frame cannot be decoded.
    """
    if len(data) > MAX_MESSAGE_SIZE:
        raise InviterProtocolError(f"Message exceeds max size ({len(data)} bytes)")

    try:
        parsed = _json_loads(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise InviterProtocolError(f"Failed to parse JSON: {exc}") from exc

    if not isinstance(parsed, dict):
        raise InviterProtocolError("Expected a JSON object")

    request_id = _require(parsed, "id", str)
    tag = _require(parsed, "cmd", str)
    decoder = _COMMAND_DECODERS.get(tag)
    command = decoder(parsed) if decoder is not None else InvalidCommand(tag)

    return ServerMessage(id=request_id, command=command, user=_decode_user(parsed))


def _decode_user(parsed: dict[str, Any]) -> User | None:
    user = parsed.get("user")
    if user is None:
        return None
    if not isinstance(user, dict):
        raise InviterProtocolError("Field 'user' must be an object")
    return User(id=_require(user, "id", str), name=_require(user, "name", str))


def _decode_message_cmd(parsed: dict[str, Any]) -> MessageCommand:
    copy = parsed.get("copy")
    if copy is not None and not isinstance(copy, str):
        raise InviterProtocolError("Field 'copy' must be a string")
    return MessageCommand(text=_require(parsed, "text", str), copy=copy)


def _decode_link_cmd(parsed: dict[str, Any]) -> CreateLinkCommand:
    game = _require(parsed, "game", int)
    if not 0 <= game <= _U32_MAX:
        raise InviterProtocolError(f"Field 'game' out of range: {game}")
    return CreateLinkCommand(game_id=game)


_COMMAND_DECODERS: dict[str, Callable[[dict[str, Any]], ServerCommand]] = {
    "message": _decode_message_cmd,
    "game": lambda _: QueryGameIdCommand(),
    "link": _decode_link_cmd,
    "exit": lambda _: ExitCommand(),
}


def _require(obj: dict[str, Any], key: str, kind: type) -> Any:
    if key not in obj:
        raise InviterProtocolError(f"Missing field '{key}'")
    value = obj[key]
    # bool is an int subclass; the wire never uses it for numbers
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise InviterProtocolError(f"Field '{key}' must be {kind.__name__}")
    return value


# -- Encoding ------------------------------------------------------------------


def encode_response(message: ClientMessage) -> str:
    """Encode an outbound response frame."""
    body: dict[str, Any] = {"id": message.id}
    body.update(_response_fields(message.response))
    return _json_dumps(body)


def _response_fields(response: ClientResponse) -> dict[str, Any]:
    if isinstance(response, GameIdResponse):
        return {"cmd": "game", "game": response.app_id}
    if isinstance(response, LinkResponse):
        return {"cmd": "link", "url": response.url}
    if isinstance(response, ErrorResponse):
        return {"cmd": "error", "code": response.code.value}
    raise TypeError(f"Unknown response type: {type(response).__name__}")
