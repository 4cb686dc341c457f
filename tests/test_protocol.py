"""Tests for the JSON wire codec."""

import json

import pytest

from remoteplay_inviter.constants import MAX_MESSAGE_SIZE
from remoteplay_inviter.errors import InviterProtocolError
from remoteplay_inviter.protocol import decode_message, encode_response
from remoteplay_inviter.types import (
    ClientMessage,
    CreateLinkCommand,
    ErrorCode,
    ErrorResponse,
    ExitCommand,
    GameIdResponse,
    InvalidCommand,
    LinkResponse,
    MessageCommand,
    QueryGameIdCommand,
    User,
)


class TestDecodeCommands:
    def test_message_with_copy(self):
        message = decode_message(
            '{"id":"1","cmd":"message","text":"Hello","copy":"code-123"}'
        )
        assert message.id == "1"
        assert message.command == MessageCommand("Hello", "code-123")
        assert message.user is None

    def test_message_without_copy(self):
        message = decode_message('{"id":"1","cmd":"message","text":"Hi"}')
        assert message.command == MessageCommand("Hi")

    def test_message_null_copy(self):
        message = decode_message('{"id":"1","cmd":"message","text":"Hi","copy":null}')
        assert message.command.copy is None

    def test_query_game(self):
        message = decode_message('{"id":"2","cmd":"game"}')
        assert message.command == QueryGameIdCommand()

    def test_link(self):
        message = decode_message('{"id":"3","cmd":"link","game":730}')
        assert message.command == CreateLinkCommand(730)

    def test_exit(self):
        assert decode_message('{"id":"4","cmd":"exit"}').command == ExitCommand()

    def test_unknown_tag_is_invalid(self):
        message = decode_message('{"id":"x","cmd":"bogus"}')
        assert message.id == "x"
        assert message.command == InvalidCommand("bogus")

    def test_bytes_input(self):
        assert decode_message(b'{"id":"5","cmd":"exit"}').command == ExitCommand()

    def test_user(self):
        message = decode_message(
            '{"id":"1","user":{"id":"u1","name":"alice"},"cmd":"game"}'
        )
        assert message.user == User("u1", "alice")
        assert message.claimant == "alice"

    def test_null_user(self):
        message = decode_message('{"id":"1","user":null,"cmd":"game"}')
        assert message.user is None
        assert message.claimant == "?"


class TestDecodeErrors:
    @pytest.mark.parametrize(
        "data",
        [
            "not json",
            "[1, 2, 3]",
            '{"cmd":"game"}',
            '{"id":1,"cmd":"game"}',
            '{"id":"1"}',
            '{"id":"1","cmd":"message"}',
            '{"id":"1","cmd":"message","text":"x","copy":5}',
            '{"id":"1","cmd":"link"}',
            '{"id":"1","cmd":"link","game":"730"}',
            '{"id":"1","cmd":"link","game":true}',
            '{"id":"1","cmd":"link","game":-1}',
            '{"id":"1","cmd":"link","game":4294967296}',
            '{"id":"1","user":"alice","cmd":"game"}',
            '{"id":"1","user":{"id":"u1"},"cmd":"game"}',
        ],
    )
    def test_malformed(self, data):
        with pytest.raises(InviterProtocolError):
            decode_message(data)

    def test_oversized(self):
        padding = "x" * MAX_MESSAGE_SIZE
        with pytest.raises(InviterProtocolError, match="max size"):
            decode_message(f'{{"id":"1","cmd":"message","text":"{padding}"}}')

    def test_max_u32_game_accepted(self):
        message = decode_message('{"id":"1","cmd":"link","game":4294967295}')
        assert message.command == CreateLinkCommand(0xFFFFFFFF)


class TestEncode:
    def test_game_id_response(self):
        data = encode_response(ClientMessage("1", GameIdResponse(730)))
        assert json.loads(data) == {"id": "1", "cmd": "game", "game": 730}

    def test_link_response(self):
        data = encode_response(ClientMessage("2", LinkResponse("https://join/abc")))
        assert json.loads(data) == {"id": "2", "cmd": "link", "url": "https://join/abc"}

    @pytest.mark.parametrize(
        "code,wire",
        [
            (ErrorCode.INVALID_CMD, "invalid_cmd"),
            (ErrorCode.INVALID_APP, "invalid_app"),
            (ErrorCode.UNSUPPORTED_APP, "unsupported_app"),
        ],
    )
    def test_error_response(self, code, wire):
        data = encode_response(ClientMessage("y", ErrorResponse(code)))
        assert json.loads(data) == {"id": "y", "cmd": "error", "code": wire}

    def test_unknown_response_type(self):
        with pytest.raises(TypeError):
            encode_response(ClientMessage("1", object()))
