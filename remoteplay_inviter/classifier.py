# =============================================================================
# Remote Play Inviter -- Connection Error Classifier
# =============================================================================
#
# Turns a failed connect attempt or a broken message loop into a
# Recoverable (back off and retry) or Fatal (stop the session) outcome.
#
# Handshake rejections may carry a structured payload, in the X-Error header
# or the response body:
#   {"message": "..." | null, "error": {"tag": "outdated", "required": "..",
#    "download": ".."} | {"tag": "<other>"}}
# The flattened form {"error": "outdated", "required": .., "download": ..} is
# accepted as well. HTTP 426 carries {"required": .., "download": ..}.
# =============================================================================

from __future__ import annotations

import asyncio
import json
from typing import Any

from websockets.exceptions import ConnectionClosed, InvalidStatus

from ._logging import logger
from .constants import (
    CLIENT_VERSION,
    ERROR_HEADER,
    ERROR_TAG_OUTDATED,
    HTTP_UPGRADE_REQUIRED,
)
from .errors import InviterProtocolError, InviterTimeoutError
from .types import ConnectionOutcome, Fatal, Recoverable


def classify_error(exc: BaseException) -> ConnectionOutcome:
    """Classify a connection failure.

    Args:
        exc: Exception raised while connecting or while running the
            message loop.

    Returns:
        :class:`Recoverable` for timeouts, closes, socket-level faults and
        malformed frames; :class:`Fatal` for handshake rejections and
        anything unrecognized.
    """
    if isinstance(exc, (asyncio.TimeoutError, InviterTimeoutError)):
        return Recoverable(str(exc) or "Connection timed out")
    if isinstance(exc, ConnectionClosed):
        return Recoverable(f"Connection closed: {exc}")
    if isinstance(exc, InviterProtocolError):
        return Recoverable(f"Malformed message from the server: {exc}")
    if isinstance(exc, InvalidStatus):
        return classify_rejection(
            exc.response.status_code,
            exc.response.headers.get(ERROR_HEADER),
            exc.response.body,
        )
    if isinstance(exc, OSError):
        return Recoverable(f"Failed to connect to the server: {exc}")
    return Fatal(f"Failed to connect to the server: {exc}")


def classify_rejection(
    status: int,
    header: str | None = None,
    body: bytes | str | None = None,
) -> Fatal:
    """Classify an HTTP response that refused the WebSocket upgrade."""
    payload = _parse_payload(header) or _parse_payload(body)

    if status == HTTP_UPGRADE_REQUIRED:
        if payload is not None and "required" in payload:
            return _outdated(payload)
        return Fatal("Update required: Download the latest version from the website")

    if payload is None:
        return Fatal(f"HTTP error: {status}")

    error = payload.get("error")
    if isinstance(error, dict):
        tag = error.get("tag")
        details = error
    else:
        # flattened form: the tag is the "error" value itself
        tag = error
        details = payload

    if tag == ERROR_TAG_OUTDATED:
        return _outdated(details)

    message = payload.get("message")
    if isinstance(message, str) and message:
        return Fatal(message)
    if isinstance(tag, str):
        return Fatal(f"Connection rejected by the server: {tag}")
    return Fatal(f"HTTP error: {status}")


def _outdated(details: dict[str, Any]) -> Fatal:
    required = str(details.get("required") or "?")
    download = details.get("download")
    return Fatal(
        f"Update required: {CLIENT_VERSION} to {required}",
        required=required,
        download=download if isinstance(download, str) else None,
    )


def _parse_payload(raw: bytes | str | None) -> dict[str, Any] | None:
    if not raw:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.debug("Rejection payload is not JSON: %.200s", raw)
        return None
    return parsed if isinstance(parsed, dict) else None
