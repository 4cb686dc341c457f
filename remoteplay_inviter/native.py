# =============================================================================
# Remote Play Inviter -- Native Capability Surface
# =============================================================================
#
# What the session engine needs from the game platform, and the registry the
# platform calls back into. Concrete binding: steam_stuff.SteamStuff.
# =============================================================================

from __future__ import annotations

import threading
from typing import Callable, Protocol

from ._logging import logger
from .types import GameID

OnRemoteInvited = Callable[[int, int, str], None]
OnRemoteStarted = Callable[[int, int], None]
OnRemoteStopped = Callable[[int, int], None]


class NativeCallbacks:
    """Per-platform registry of the three Remote Play event hooks.

    The platform invokes ``remote_invited`` / ``remote_started`` /
    ``remote_stopped`` from whatever thread delivers native callbacks.
    Handlers must therefore be thread-safe and must not block; the event
    bridge's handlers only enqueue onto the event loop.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._on_invited: OnRemoteInvited | None = None
        self._on_started: OnRemoteStarted | None = None
        self._on_stopped: OnRemoteStopped | None = None

    # -- Registration ---------------------------------------------------------

    def set_on_remote_invited(self, fn: OnRemoteInvited | None) -> None:
        with self._lock:
            self._on_invited = fn

    def set_on_remote_started(self, fn: OnRemoteStarted | None) -> None:
        with self._lock:
            self._on_started = fn

    def set_on_remote_stopped(self, fn: OnRemoteStopped | None) -> None:
        with self._lock:
            self._on_stopped = fn

    def clear(self) -> None:
        with self._lock:
            self._on_invited = None
            self._on_started = None
            self._on_stopped = None

    # -- Delivery (called by the platform) ------------------------------------

    def remote_invited(self, invitee: int, guest_id: int, connect_url: str) -> None:
        with self._lock:
            fn = self._on_invited
        if fn is None:
            logger.debug("Unhandled invite result for guest %d", guest_id)
            return
        fn(invitee, guest_id, connect_url)

    def remote_started(self, invitee: int, guest_id: int) -> None:
        with self._lock:
            fn = self._on_started
        if fn is not None:
            fn(invitee, guest_id)

    def remote_stopped(self, invitee: int, guest_id: int) -> None:
        with self._lock:
            fn = self._on_stopped
        if fn is not None:
            fn(invitee, guest_id)


class NativePlatform(Protocol):
    """Operations the session engine calls on the local game platform.

    Every call may block, so the engine makes them through
    :func:`asyncio.to_thread`, never directly on the event loop.
    """

    callbacks: NativeCallbacks

    def run_callbacks(self) -> None:
        """Deliver pending native events; called on a fixed period."""
        ...

    def running_game_id(self) -> GameID:
        ...

    def can_remote_play_together(self, game: GameID) -> bool:
        ...

    def send_invite(self, invitee: int, game: GameID) -> int:
        """Issue an invite and return its guest id, or 0 if refused."""
        ...

    def cancel_invite(self, invitee: int, guest_id: int) -> None:
        ...

    def shutdown(self) -> None:
        ...
