# =============================================================================
# Remote Play Inviter -- Connection Manager
# =============================================================================
#
# Session lifecycle: connect with timeout, run the message loop with an idle
# timeout, classify whatever ended it, back off, reconnect. Runs until the
# server sends "exit" or a failure is classified as fatal.
# =============================================================================

from __future__ import annotations

import asyncio
import random
import time
import webbrowser
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable
from urllib.parse import urlencode, urlsplit, urlunsplit

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosedOK
from websockets.frames import Frame, Opcode

from ._logging import logger
from .backoff import Backoff
from .classifier import classify_error
from .constants import (
    CLIENT_VERSION,
    CONNECTION_TIMEOUT,
    IDLE_TIMEOUT,
    MAX_MESSAGE_SIZE,
    SESSION_PATH,
)
from .errors import InviterTimeoutError
from .protocol import decode_message, encode_response
from .types import ConnectionOutcome, ConnectionState, Fatal, Recoverable

if TYPE_CHECKING:
    from websockets.protocol import Event

    from .console import Terminal
    from .dispatcher import CommandDispatcher


class InviterConnection(ClientConnection):
    """Client connection that reports inbound PING frames.

    Pongs are still sent by the protocol layer; this only lets the session
    treat server pings as a liveness signal.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.on_ping: Callable[[], Any] | None = None

    def process_event(self, event: Event) -> None:
        if isinstance(event, Frame) and event.opcode is Opcode.PING:
            if self.on_ping is not None:
                self.on_ping()
        super().process_event(event)


@dataclass
class Session:
    """Per-process connection state, owned by :class:`ConnectionManager`."""

    url: str
    reconnect: bool = False
    backoff: Backoff = field(default_factory=Backoff)


class ConnectionManager:
    """Owns the reconnect loop and the WebSocket of the current connection.

    Args:
        url: Session URL (see :func:`build_session_url`).
        dispatcher: Executes decoded commands.
        terminal: Receives the user-visible status lines.
        backoff: Reconnect delay policy. Defaults to :class:`Backoff`.
        connect_timeout: Seconds allowed for the opening handshake.
        idle_timeout: Seconds without a frame or ping before reconnecting.
        on_state_change: Called with every new :class:`ConnectionState`.
        connector: Opens the WebSocket; defaults to ``websockets`` ``connect``.
        sleep: Awaited with the backoff delay between attempts.
        browser: Opens the download page when the client is outdated.
    """

    def __init__(
        self,
        url: str,
        dispatcher: CommandDispatcher,
        *,
        terminal: Terminal,
        backoff: Backoff | None = None,
        connect_timeout: float = CONNECTION_TIMEOUT,
        idle_timeout: float = IDLE_TIMEOUT,
        on_state_change: Callable[[ConnectionState], Any] | None = None,
        connector: Callable[..., Awaitable[Any]] = connect,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        browser: Callable[[str], Any] = webbrowser.open,
    ) -> None:
        self._session = Session(url=url, backoff=backoff or Backoff())
        self._dispatcher = dispatcher
        self._terminal = terminal
        self._connect_timeout = connect_timeout
        self._idle_timeout = idle_timeout
        self._on_state_change = on_state_change
        self._connector = connector
        self._sleep = sleep
        self._browser = browser

        self._state = ConnectionState.DISCONNECTED
        self._last_activity = time.monotonic()

    # -- Properties -----------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def session(self) -> Session:
        return self._session

    # -- Main loop ------------------------------------------------------------

    async def run(self) -> Fatal | None:
        """Serve the session until it ends.

        Returns:
            The :class:`Fatal` outcome that ended the session, or ``None``
            when the server sent an exit command.
        """
        while True:
            if self._session.reconnect:
                self._terminal.print("↪ Reconnecting to the server...")

            outcome = await self._run_connection()
            if outcome is None:
                self._set_state(ConnectionState.EXITED)
                return None
            if isinstance(outcome, Fatal):
                self._report_fatal(outcome)
                self._set_state(ConnectionState.EXITED)
                return outcome

            self._terminal.error(outcome.reason)
            delay = self._session.backoff.next()
            self._terminal.print(f"↪ Connection lost. Reconnecting in {delay} seconds...")
            logger.debug("Backing off %ds before reconnecting", delay)
            await self._sleep(delay)
            self._session.reconnect = True

    async def _run_connection(self) -> ConnectionOutcome | None:
        """One connect + message loop. ``None`` means exit was requested."""
        self._set_state(ConnectionState.CONNECTING)
        try:
            ws = await asyncio.wait_for(self._open(), timeout=self._connect_timeout)
        except asyncio.TimeoutError:
            self._set_state(ConnectionState.DISCONNECTED)
            return Recoverable("Connection timed out to the server")
        except Exception as exc:
            self._set_state(ConnectionState.DISCONNECTED)
            return classify_error(exc)

        ws.on_ping = self._on_ping
        self._set_state(ConnectionState.CONNECTED)
        if self._session.reconnect:
            self._terminal.print("✓ Reconnected!")
        else:
            self._terminal.print("✓ Connected to the server!")
        self._session.backoff.reset()

        try:
            return await self._message_loop(ws)
        except Exception as exc:
            return classify_error(exc)
        finally:
            await self._close(ws)
            self._set_state(ConnectionState.DISCONNECTED)

    async def _open(self) -> Any:
        return await self._connector(
            self._session.url,
            create_connection=InviterConnection,
            ping_interval=None,  # the server drives ping/pong
            open_timeout=None,  # asyncio.wait_for handles timeout
            max_size=MAX_MESSAGE_SIZE,
        )

    async def _close(self, ws: Any) -> None:
        try:
            await ws.close()
        except Exception as exc:
            logger.debug("Close failed: %s", exc)

    # -- Internal: message loop -----------------------------------------------

    async def _message_loop(self, ws: Any) -> ConnectionOutcome | None:
        while True:
            try:
                data = await self._next_frame(ws)
            except ConnectionClosedOK as exc:
                logger.debug("WebSocket closed normally: %s", exc)
                return Recoverable("Connection closed by the server")

            if isinstance(data, bytes):
                logger.debug("Ignoring binary frame (%d bytes)", len(data))
                continue

            message = decode_message(data)
            result = await self._dispatcher.dispatch(message)
            if result.exit:
                return None
            if result.response is not None:
                await ws.send(encode_response(result.response))
            self._session.backoff.reset()

    async def _next_frame(self, ws: Any) -> str | bytes:
        """Wait up to the idle timeout for the next data frame.

        The window starts when the read starts, so time spent dispatching the
        previous command does not count against it. Pings push it back.
        """
        self._last_activity = time.monotonic()
        while True:
            remaining = self._last_activity + self._idle_timeout - time.monotonic()
            try:
                return await asyncio.wait_for(ws.recv(), timeout=remaining)
            except asyncio.TimeoutError:
                if time.monotonic() - self._last_activity >= self._idle_timeout:
                    raise InviterTimeoutError("Connection timed out") from None

    def _on_ping(self) -> None:
        self._last_activity = time.monotonic()
        self._session.backoff.reset()

    # -- Reporting ------------------------------------------------------------

    def _report_fatal(self, outcome: Fatal) -> None:
        if not outcome.outdated:
            self._terminal.error(outcome.reason)
            return

        self._terminal.print(f"\n↑ {outcome.reason}")
        if outcome.download:
            self._terminal.print(f"  Download: {outcome.download}\n")
            try:
                self._browser(outcome.download)
            except Exception as exc:
                logger.debug("Could not open browser: %s", exc)

    # -- State management -----------------------------------------------------

    def _set_state(self, new_state: ConnectionState) -> None:
        if new_state == self._state:
            return
        old = self._state
        self._state = new_state
        logger.debug("State: %s -> %s", old.value, new_state.value)
        if self._on_state_change:
            self._on_state_change(new_state)


# -- URL building --------------------------------------------------------------


def build_session_url(
    endpoint: str,
    token: str,
    session_id: int | None = None,
    *,
    version: str = CLIENT_VERSION,
) -> str:
    """Compose the session URL: the endpoint's scheme and host, path ``/ws``.

    Query parameters: ``v`` (client version), ``token`` (persistent client
    id) and ``session`` (random per-run u32).
    """
    if session_id is None:
        session_id = random.getrandbits(32)
    parts = urlsplit(endpoint)
    query = urlencode({"v": version, "token": token, "session": session_id})
    return urlunsplit((parts.scheme, parts.netloc, SESSION_PATH, query, ""))
