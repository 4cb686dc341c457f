"""In-memory stand-ins for the native platform and the WebSocket transport."""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable

from remoteplay_inviter.native import NativeCallbacks
from remoteplay_inviter.types import GameID


class FakeNative:
    """NativePlatform whose events fire from ``run_callbacks``, like Steam's."""

    def __init__(self, game: GameID | None = None) -> None:
        self.callbacks = NativeCallbacks()
        self.game = game or GameID(0)
        self.supported = True
        self.next_guest_id = 1
        self.invite_url: str | None = None
        self.invites: list[tuple[int, GameID]] = []
        self.cancelled: list[tuple[int, int]] = []
        self.poll_count = 0
        self.call_threads: list[threading.Thread] = []
        self.shut_down = False
        self._lock = threading.Lock()
        self._pending: list[Callable[[], Any]] = []

    def queue(self, fire: Callable[[], Any]) -> None:
        """Deliver *fire* on the next ``run_callbacks``."""
        with self._lock:
            self._pending.append(fire)

    def run_callbacks(self) -> None:
        with self._lock:
            pending, self._pending = self._pending, []
            self.poll_count += 1
        for fire in pending:
            fire()

    def running_game_id(self) -> GameID:
        self.call_threads.append(threading.current_thread())
        return self.game

    def can_remote_play_together(self, game: GameID) -> bool:
        self.call_threads.append(threading.current_thread())
        return self.supported

    def send_invite(self, invitee: int, game: GameID) -> int:
        self.call_threads.append(threading.current_thread())
        self.invites.append((invitee, game))
        guest_id = self.next_guest_id
        if guest_id and self.invite_url is not None:
            url = self.invite_url
            self.queue(lambda: self.callbacks.remote_invited(invitee, guest_id, url))
        return guest_id

    def cancel_invite(self, invitee: int, guest_id: int) -> None:
        self.call_threads.append(threading.current_thread())
        self.cancelled.append((invitee, guest_id))

    def shutdown(self) -> None:
        self.shut_down = True


class FakeWebSocket:
    """Serves queued frames from ``recv``; queued exceptions are raised."""

    def __init__(self, *frames: Any) -> None:
        self.incoming: asyncio.Queue[Any] = asyncio.Queue()
        for frame in frames:
            self.incoming.put_nowait(frame)
        self.sent: list[str] = []
        self.closed = False
        self.on_ping = None

    async def recv(self) -> Any:
        item = await self.incoming.get()
        if isinstance(item, BaseException):
            raise item
        return item

    async def send(self, data: str) -> None:
        self.sent.append(data)

    async def close(self) -> None:
        self.closed = True


HANG = object()


class FakeConnector:
    """Replaces ``websockets.connect``; each call consumes the next outcome.

    An outcome is a :class:`FakeWebSocket` to return, an exception to raise,
    or :data:`HANG` to never complete.
    """

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def __call__(self, url: str, **kwargs: Any) -> Any:
        self.calls.append((url, kwargs))
        outcome = self.outcomes.pop(0)
        if outcome is HANG:
            await asyncio.Event().wait()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the loop until *predicate* holds, failing after *timeout*."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)
