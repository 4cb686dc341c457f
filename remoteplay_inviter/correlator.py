# =============================================================================
# Remote Play Inviter -- Invite Correlator
# =============================================================================
#
# Matches a CreateLink request to the "invited" native event that later
# carries its join URL. Invites are serialized: one is issued and awaited at
# a time, everything else queues on the lock.
# =============================================================================

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from ._logging import logger
from .constants import INVITE_QUEUE_SIZE, INVITEE_ANYONE
from .errors import InviteRejectedError, InviteTimeoutError
from .types import GameID

if TYPE_CHECKING:
    from .native import NativePlatform


class InviteCorrelator:
    """Single-flight handoff between invite requests and "invited" events.

    ``publish()`` is called on the event loop by the native event bridge;
    ``request()`` is awaited by the dispatcher. Native calls run on worker
    threads, since they wait on the poller holding the native lock.

    Args:
        native: Platform used to issue and cancel invites.
        maxsize: Invite results that may be buffered before one is claimed.
            When full, the oldest buffered result is dropped.
    """

    def __init__(self, native: NativePlatform, maxsize: int = INVITE_QUEUE_SIZE) -> None:
        self._native = native
        self._results: asyncio.Queue[tuple[int, str]] = asyncio.Queue(maxsize=maxsize)
        self._lock = asyncio.Lock()
        self._awaiting: int | None = None

    @property
    def pending(self) -> bool:
        """True while an invite is issued and waiting for its result."""
        return self._awaiting is not None

    def publish(self, guest_id: int, connect_url: str) -> None:
        """Hand over the result of a native "invited" event."""
        try:
            self._results.put_nowait((guest_id, connect_url))
        except asyncio.QueueFull:
            # Drop oldest to make room
            try:
                dropped, _ = self._results.get_nowait()
                logger.warning("Invite result queue full, dropped guest %d", dropped)
                self._results.put_nowait((guest_id, connect_url))
            except (asyncio.QueueEmpty, asyncio.QueueFull):
                pass

    async def request(
        self,
        game: GameID,
        *,
        timeout: float | None = None,
    ) -> tuple[int, str]:
        """Issue an invite for *game* and wait for its join link.

        Args:
            game: Game to invite into.
            timeout: Seconds to wait for the "invited" event. ``None`` waits
                indefinitely.

        Returns:
            ``(guest_id, connect_url)`` of the resolved invite.

        Raises:
            InviteRejectedError: The native layer refused the invite.
            InviteTimeoutError: No result within *timeout*; the native invite
                has been cancelled.
        """
        async with self._lock:
            self._discard_stale()

            guest_id = await asyncio.to_thread(self._native.send_invite, INVITEE_ANYONE, game)
            if not guest_id:
                raise InviteRejectedError(game.app_id)

            self._awaiting = guest_id
            try:
                return await asyncio.wait_for(self._wait_for(guest_id), timeout=timeout)
            except asyncio.TimeoutError:
                await asyncio.to_thread(self._native.cancel_invite, INVITEE_ANYONE, guest_id)
                raise InviteTimeoutError(guest_id, timeout or 0.0) from None
            finally:
                self._awaiting = None

    async def _wait_for(self, guest_id: int) -> tuple[int, str]:
        while True:
            result_id, connect_url = await self._results.get()
            if result_id == guest_id:
                return result_id, connect_url
            logger.warning(
                "Discarding invite result for guest %d (waiting for guest %d)",
                result_id,
                guest_id,
            )

    def _discard_stale(self) -> None:
        """Drop results that arrived while no invite was outstanding."""
        while True:
            try:
                guest_id, _ = self._results.get_nowait()
            except asyncio.QueueEmpty:
                return
            logger.debug("Discarding stale invite result for guest %d", guest_id)
