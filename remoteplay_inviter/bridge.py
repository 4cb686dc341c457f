# =============================================================================
# Remote Play Inviter -- Native Event Bridge
# =============================================================================
#
# Polls the native platform on a fixed tick and moves its callbacks onto the
# event loop. Callbacks fire on the poller's worker thread; they only enqueue.
# Roster and correlator updates happen in the consumer task, on the loop.
# =============================================================================

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Callable

from ._logging import logger
from .constants import CALLBACK_INTERVAL
from .types import NativeEvent, RemoteInvited, RemoteStarted, RemoteStopped

if TYPE_CHECKING:
    from .console import Terminal
    from .correlator import InviteCorrelator
    from .native import NativePlatform
    from .roster import GuestRoster


class NativeEventBridge:
    """Runs the native poll loop and applies native events to shared state.

    Use as an async context manager: entering registers the callbacks and
    starts the poll and consumer tasks, exiting stops both.

    Args:
        native: Platform to poll and receive callbacks from.
        roster: Updated on join/leave events.
        correlator: Receives invite results.
        terminal: Shows guest activity and the active-guest status line.
        interval: Poll period in seconds (default 0.2).
    """

    def __init__(
        self,
        native: NativePlatform,
        roster: GuestRoster,
        correlator: InviteCorrelator,
        terminal: Terminal,
        *,
        interval: float = CALLBACK_INTERVAL,
    ) -> None:
        self._native = native
        self._roster = roster
        self._correlator = correlator
        self._terminal = terminal
        self._interval = interval

        self._loop: asyncio.AbstractEventLoop | None = None
        self._events: asyncio.Queue[NativeEvent] = asyncio.Queue()
        self._poll_task: asyncio.Task[None] | None = None
        self._consume_task: asyncio.Task[None] | None = None

        self._handlers: dict[type, Callable[[Any], None]] = {
            RemoteInvited: self._handle_invited,
            RemoteStarted: self._handle_started,
            RemoteStopped: self._handle_stopped,
        }

    # -- Lifecycle ------------------------------------------------------------

    async def __aenter__(self) -> NativeEventBridge:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    @property
    def running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def start(self) -> None:
        if self.running:
            return
        self._loop = asyncio.get_running_loop()
        callbacks = self._native.callbacks
        callbacks.set_on_remote_invited(
            lambda invitee, guest_id, url: self.submit(RemoteInvited(invitee, guest_id, url))
        )
        callbacks.set_on_remote_started(
            lambda invitee, guest_id: self.submit(RemoteStarted(invitee, guest_id))
        )
        callbacks.set_on_remote_stopped(
            lambda invitee, guest_id: self.submit(RemoteStopped(invitee, guest_id))
        )
        self._consume_task = asyncio.create_task(self._consume_loop())
        self._poll_task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        self._native.callbacks.clear()
        tasks = [t for t in (self._poll_task, self._consume_task) if t is not None]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._poll_task = None
        self._consume_task = None

    # -- Handoff --------------------------------------------------------------

    def submit(self, event: NativeEvent) -> None:
        """Queue a native event from any thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug("Event loop gone, dropping %s", event)
            return
        loop.call_soon_threadsafe(self._events.put_nowait, event)

    # -- Internal: loops ------------------------------------------------------

    async def _poll_loop(self) -> None:
        """Call ``run_callbacks`` every *interval* seconds, skipping missed ticks."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            try:
                await asyncio.to_thread(self._native.run_callbacks)
            except Exception:
                logger.exception("Native callback poll failed")

            next_tick += self._interval
            now = loop.time()
            if next_tick < now:
                next_tick = now
            await asyncio.sleep(next_tick - now)

    async def _consume_loop(self) -> None:
        while True:
            event = await self._events.get()
            handler = self._handlers.get(type(event))
            if handler is None:
                logger.warning("No handler for native event %r", event)
                continue
            try:
                handler(event)
            except Exception:
                logger.exception("Failed to handle native event %r", event)

    # -- Internal: event handlers ---------------------------------------------

    def _handle_invited(self, event: RemoteInvited) -> None:
        logger.debug("Invite result: guest_id=%d url=%s", event.guest_id, event.connect_url)
        self._correlator.publish(event.guest_id, event.connect_url)

    def _handle_started(self, event: RemoteStarted) -> None:
        summary = self._roster.mark_active(event.guest_id)
        name = self._roster.display_name(event.guest_id)
        self._terminal.print(
            f"-> User Joined        : claimer={name}, guest_id={event.guest_id}, "
            f"steam_id={event.invitee}"
        )
        self._terminal.status(_status_text(summary))

    def _handle_stopped(self, event: RemoteStopped) -> None:
        name = self._roster.display_name(event.guest_id)
        summary = self._roster.mark_inactive(event.guest_id)
        self._terminal.print(
            f"-> User Left          : claimer={name}, guest_id={event.guest_id}, "
            f"steam_id={event.invitee}"
        )
        self._terminal.status(_status_text(summary))


def _status_text(summary: str) -> str:
    return f"Guests: {summary}" if summary else "Guests: (none)"
