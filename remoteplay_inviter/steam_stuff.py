# =============================================================================
# Remote Play Inviter -- SteamStuff ctypes Binding
# =============================================================================
#
# Binds the SteamStuff shared library (C ABI over the Steam client's Remote
# Play invite handler). Native calls are serialized with a lock; the poller and
# the dispatcher both reach them from worker threads.
# =============================================================================

from __future__ import annotations

import ctypes
import ctypes.util
import os
import threading
from typing import Any

from ._logging import logger
from .errors import NativeError
from .native import NativeCallbacks
from .types import GameID

LIBRARY_ENV = "STEAM_STUFF_LIBRARY"
LIBRARY_NAME = "SteamStuff"

ON_REMOTE_INVITED = ctypes.CFUNCTYPE(None, ctypes.c_uint64, ctypes.c_uint64, ctypes.c_char_p)
ON_REMOTE_STARTED = ctypes.CFUNCTYPE(None, ctypes.c_uint64, ctypes.c_uint64)
ON_REMOTE_STOPPED = ctypes.CFUNCTYPE(None, ctypes.c_uint64, ctypes.c_uint64)

# name -> (argtypes, restype)
_PROTOTYPES: dict[str, tuple[list[Any], Any]] = {
    "SteamStuff_Init": ([], ctypes.c_bool),
    "SteamStuff_Shutdown": ([], None),
    "SteamStuff_RunCallbacks": ([], None),
    "SteamStuff_GetRunningGameID": ([], ctypes.c_uint64),
    "SteamStuff_SendInvite": ([ctypes.c_uint64, ctypes.c_uint64], ctypes.c_uint64),
    "SteamStuff_CancelInvite": ([ctypes.c_uint64, ctypes.c_uint64], None),
    "SteamStuff_SetOnRemoteInvited": ([ON_REMOTE_INVITED], None),
    "SteamStuff_SetOnRemoteStarted": ([ON_REMOTE_STARTED], None),
    "SteamStuff_SetOnRemoteStopped": ([ON_REMOTE_STOPPED], None),
}

# Only exported by newer builds of the library
_OPTIONAL_PROTOTYPES: dict[str, tuple[list[Any], Any]] = {
    "SteamStuff_CanRemotePlayTogether": ([ctypes.c_uint64], ctypes.c_bool),
}


def load_library(path: str | os.PathLike[str] | None = None) -> ctypes.CDLL:
    """Locate and load the SteamStuff shared library.

    Lookup order: *path*, ``$STEAM_STUFF_LIBRARY``, then the system search
    path via :func:`ctypes.util.find_library`.

    Raises:
        NativeError: If the library cannot be found or loaded.
    """
    candidate = path or os.environ.get(LIBRARY_ENV) or ctypes.util.find_library(LIBRARY_NAME)
    if not candidate:
        raise NativeError(f"Could not find the {LIBRARY_NAME} library")
    try:
        return ctypes.CDLL(os.fspath(candidate))
    except OSError as exc:
        raise NativeError(f"Failed to load {candidate}: {exc}") from exc


class SteamStuff:
    """:class:`~remoteplay_inviter.native.NativePlatform` backed by SteamStuff.

    Initializes the Steam client context on construction and registers the
    Remote Play trampolines, which forward into :attr:`callbacks`.

    Args:
        library: Path to the shared library (see :func:`load_library`).
        lib: Already-loaded library handle; overrides *library*.

    Raises:
        NativeError: If the library is missing or Steam is not running.
    """

    def __init__(
        self,
        library: str | os.PathLike[str] | None = None,
        *,
        lib: Any | None = None,
    ) -> None:
        self._lib = lib if lib is not None else load_library(library)
        self._lock = threading.Lock()
        self._closed = False
        self.callbacks = NativeCallbacks()

        for name, (argtypes, restype) in _PROTOTYPES.items():
            fn = getattr(self._lib, name)
            fn.argtypes = argtypes
            fn.restype = restype

        self._can_remote_play = None
        for name, (argtypes, restype) in _OPTIONAL_PROTOTYPES.items():
            try:
                fn = getattr(self._lib, name)
            except AttributeError:
                logger.debug("%s not exported, skipping support check", name)
                continue
            fn.argtypes = argtypes
            fn.restype = restype
            self._can_remote_play = fn

        if not self._lib.SteamStuff_Init():
            raise NativeError("Failed to initialize SteamStuff")

        # ctypes does not keep these alive; the library holds raw pointers
        self._trampolines = (
            ON_REMOTE_INVITED(self._on_invited),
            ON_REMOTE_STARTED(self._on_started),
            ON_REMOTE_STOPPED(self._on_stopped),
        )
        self._lib.SteamStuff_SetOnRemoteInvited(self._trampolines[0])
        self._lib.SteamStuff_SetOnRemoteStarted(self._trampolines[1])
        self._lib.SteamStuff_SetOnRemoteStopped(self._trampolines[2])

    # -- NativePlatform --------------------------------------------------------

    def run_callbacks(self) -> None:
        with self._lock:
            self._lib.SteamStuff_RunCallbacks()

    def running_game_id(self) -> GameID:
        with self._lock:
            return GameID.from_uid(int(self._lib.SteamStuff_GetRunningGameID()))

    def can_remote_play_together(self, game: GameID) -> bool:
        if self._can_remote_play is None:
            return True
        with self._lock:
            return bool(self._can_remote_play(game.to_uid()))

    def send_invite(self, invitee: int, game: GameID) -> int:
        with self._lock:
            return int(self._lib.SteamStuff_SendInvite(invitee, game.to_uid()))

    def cancel_invite(self, invitee: int, guest_id: int) -> None:
        with self._lock:
            self._lib.SteamStuff_CancelInvite(invitee, guest_id)

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.callbacks.clear()
        with self._lock:
            self._lib.SteamStuff_Shutdown()

    # -- Trampolines (run inside SteamStuff_RunCallbacks) ---------------------

    def _on_invited(self, invitee: int, guest_id: int, connect_url: bytes | None) -> None:
        url = (connect_url or b"").decode("utf-8", errors="replace")
        self._guard(self.callbacks.remote_invited, invitee, guest_id, url)

    def _on_started(self, invitee: int, guest_id: int) -> None:
        self._guard(self.callbacks.remote_started, invitee, guest_id)

    def _on_stopped(self, invitee: int, guest_id: int) -> None:
        self._guard(self.callbacks.remote_stopped, invitee, guest_id)

    @staticmethod
    def _guard(fn: Any, *args: Any) -> None:
        # An exception must not unwind into the C caller
        try:
            fn(*args)
        except Exception:
            logger.exception("Native callback %s failed", fn.__name__)
