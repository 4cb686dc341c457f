# =============================================================================
# Remote Play Inviter -- Guest Roster
# =============================================================================
#
# Who claimed which invite, and which guests are currently in the session.
# Written by the dispatcher (claims) and by native events (joins/leaves).
# =============================================================================

from __future__ import annotations

import threading

from .constants import UNKNOWN_CLAIMANT


class GuestRoster:
    """Thread-safe map of guest id -> claimant name plus the active guest set.

    Every active guest has an entry; an entry may exist before its guest
    becomes active (the claim is recorded when the link is created, the join
    happens later). Entries are dropped when the guest leaves.

    The internal lock is never held while calling out of this class.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._names: dict[int, str | None] = {}
        # dict keys keep join order
        self._active: dict[int, None] = {}

    def claim(self, guest_id: int, name: str) -> None:
        """Record (or overwrite) the claimant name for *guest_id*."""
        with self._lock:
            self._names[guest_id] = name

    def mark_active(self, guest_id: int) -> str:
        """Add *guest_id* to the active set and return the active summary."""
        with self._lock:
            self._names.setdefault(guest_id, None)
            self._active[guest_id] = None
            return self._summary_unlocked()

    def mark_inactive(self, guest_id: int) -> str:
        """Remove *guest_id* from the roster and return the active summary."""
        with self._lock:
            self._active.pop(guest_id, None)
            self._names.pop(guest_id, None)
            return self._summary_unlocked()

    def display_name(self, guest_id: int) -> str:
        with self._lock:
            return self._name_unlocked(guest_id)

    def active_summary(self) -> str:
        """``[id]name, [id]name, ...`` for every active guest, in join order."""
        with self._lock:
            return self._summary_unlocked()

    def active_guests(self) -> list[int]:
        with self._lock:
            return list(self._active)

    def __contains__(self, guest_id: object) -> bool:
        with self._lock:
            return guest_id in self._names

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)

    # -- Internal (caller holds the lock) -------------------------------------

    def _name_unlocked(self, guest_id: int) -> str:
        name = self._names.get(guest_id)
        return name if name is not None else UNKNOWN_CLAIMANT

    def _summary_unlocked(self) -> str:
        return ", ".join(
            f"[{guest_id}]{self._name_unlocked(guest_id)}" for guest_id in self._active
        )
