"""Tests for connection failure classification."""

import asyncio
import json

from websockets.datastructures import Headers
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK, InvalidStatus
from websockets.frames import Close
from websockets.http11 import Response

from remoteplay_inviter.classifier import classify_error, classify_rejection
from remoteplay_inviter.constants import CLIENT_VERSION
from remoteplay_inviter.errors import InviterProtocolError, InviterTimeoutError
from remoteplay_inviter.types import Fatal, Recoverable


def _rejection(status, body=b"", headers=None):
    return InvalidStatus(Response(status, "Rejected", Headers(headers or {}), body))


class TestClassifyError:
    def test_timeout_is_recoverable(self):
        outcome = classify_error(asyncio.TimeoutError())
        assert outcome == Recoverable("Connection timed out")

    def test_idle_timeout_is_recoverable(self):
        outcome = classify_error(InviterTimeoutError("Connection timed out"))
        assert outcome == Recoverable("Connection timed out")

    def test_normal_close_is_recoverable(self):
        exc = ConnectionClosedOK(Close(1000, ""), Close(1000, ""), True)
        assert isinstance(classify_error(exc), Recoverable)

    def test_abnormal_close_is_recoverable(self):
        exc = ConnectionClosedError(None, None)
        assert isinstance(classify_error(exc), Recoverable)

    def test_socket_error_is_recoverable(self):
        outcome = classify_error(ConnectionRefusedError(111, "Connection refused"))
        assert isinstance(outcome, Recoverable)
        assert outcome.reason.startswith("Failed to connect to the server")

    def test_malformed_frame_is_recoverable(self):
        outcome = classify_error(InviterProtocolError("Missing field 'id'"))
        assert isinstance(outcome, Recoverable)
        assert "Missing field 'id'" in outcome.reason

    def test_unknown_error_is_fatal(self):
        assert isinstance(classify_error(RuntimeError("boom")), Fatal)

    def test_rejection_uses_header_payload(self):
        exc = _rejection(403, headers={"X-Error": json.dumps({"message": "blocked"})})
        assert classify_error(exc) == Fatal("blocked")

    def test_rejection_uses_body_payload(self):
        exc = _rejection(403, body=json.dumps({"message": "blocked"}).encode())
        assert classify_error(exc) == Fatal("blocked")


class TestClassifyRejection:
    def test_outdated_nested(self):
        payload = {
            "message": None,
            "error": {"tag": "outdated", "required": "1.3.0", "download": "https://dl"},
        }
        outcome = classify_rejection(400, json.dumps(payload))
        assert outcome.outdated
        assert outcome.required == "1.3.0"
        assert outcome.download == "https://dl"
        assert outcome.reason == f"Update required: {CLIENT_VERSION} to 1.3.0"

    def test_outdated_flattened(self):
        payload = {"error": "outdated", "required": "1.3.0", "download": "https://dl"}
        outcome = classify_rejection(400, None, json.dumps(payload).encode())
        assert outcome.outdated
        assert outcome.download == "https://dl"

    def test_message_only(self):
        assert classify_rejection(403, '{"message":"blocked"}') == Fatal("blocked")

    def test_other_tag(self):
        outcome = classify_rejection(403, '{"error":{"tag":"banned"}}')
        assert outcome == Fatal("Connection rejected by the server: banned")

    def test_message_wins_over_tag(self):
        outcome = classify_rejection(403, '{"message":"go away","error":{"tag":"banned"}}')
        assert outcome == Fatal("go away")

    def test_no_payload(self):
        assert classify_rejection(500) == Fatal("HTTP error: 500")

    def test_non_json_payload(self):
        assert classify_rejection(502, None, b"<html>Bad Gateway</html>") == Fatal(
            "HTTP error: 502"
        )

    def test_header_preferred_over_body(self):
        outcome = classify_rejection(403, '{"message":"header"}', b'{"message":"body"}')
        assert outcome == Fatal("header")

    def test_upgrade_required_with_payload(self):
        outcome = classify_rejection(426, None, b'{"required":"2.0.0","download":"https://dl"}')
        assert outcome.outdated
        assert outcome.required == "2.0.0"
        assert outcome.download == "https://dl"

    def test_upgrade_required_without_payload(self):
        outcome = classify_rejection(426)
        assert not outcome.outdated
        assert outcome.reason.startswith("Update required")
