"""Tests for the SteamStuff ctypes binding (library handle mocked)."""

from unittest.mock import MagicMock, patch

import pytest

from remoteplay_inviter.errors import NativeError
from remoteplay_inviter.steam_stuff import _PROTOTYPES, SteamStuff, load_library
from remoteplay_inviter.types import GameID


def _make_lib(*, optional=True):
    names = list(_PROTOTYPES)
    if optional:
        names.append("SteamStuff_CanRemotePlayTogether")
    lib = MagicMock(spec=names)
    lib.SteamStuff_Init.return_value = True
    return lib


def _trampoline(lib, setter):
    return getattr(lib, setter).call_args.args[0]


class TestInit:
    def test_init_failure(self):
        lib = _make_lib()
        lib.SteamStuff_Init.return_value = False
        with pytest.raises(NativeError, match="Failed to initialize"):
            SteamStuff(lib=lib)

    def test_registers_trampolines(self):
        lib = _make_lib()
        SteamStuff(lib=lib)
        lib.SteamStuff_SetOnRemoteInvited.assert_called_once()
        lib.SteamStuff_SetOnRemoteStarted.assert_called_once()
        lib.SteamStuff_SetOnRemoteStopped.assert_called_once()

    def test_prototypes_applied(self):
        lib = _make_lib()
        SteamStuff(lib=lib)
        argtypes, restype = _PROTOTYPES["SteamStuff_SendInvite"]
        assert lib.SteamStuff_SendInvite.argtypes == argtypes
        assert lib.SteamStuff_SendInvite.restype == restype


class TestCalls:
    def test_running_game_id(self):
        lib = _make_lib()
        lib.SteamStuff_GetRunningGameID.return_value = 730
        assert SteamStuff(lib=lib).running_game_id() == GameID(730)

    def test_send_invite(self):
        lib = _make_lib()
        lib.SteamStuff_SendInvite.return_value = 5
        native = SteamStuff(lib=lib)

        assert native.send_invite(0, GameID(730)) == 5
        lib.SteamStuff_SendInvite.assert_called_once_with(0, 730)

    def test_cancel_invite(self):
        lib = _make_lib()
        SteamStuff(lib=lib).cancel_invite(0, 5)
        lib.SteamStuff_CancelInvite.assert_called_once_with(0, 5)

    def test_run_callbacks(self):
        lib = _make_lib()
        SteamStuff(lib=lib).run_callbacks()
        lib.SteamStuff_RunCallbacks.assert_called_once_with()

    def test_support_check(self):
        lib = _make_lib()
        lib.SteamStuff_CanRemotePlayTogether.return_value = False
        assert SteamStuff(lib=lib).can_remote_play_together(GameID(730)) is False
        lib.SteamStuff_CanRemotePlayTogether.assert_called_once_with(730)

    def test_support_check_missing_from_library(self):
        lib = _make_lib(optional=False)
        assert SteamStuff(lib=lib).can_remote_play_together(GameID(730)) is True

    def test_shutdown_is_idempotent(self):
        lib = _make_lib()
        native = SteamStuff(lib=lib)
        native.shutdown()
        native.shutdown()
        lib.SteamStuff_Shutdown.assert_called_once_with()


class TestTrampolines:
    def test_invited_decodes_url(self):
        lib = _make_lib()
        native = SteamStuff(lib=lib)
        handler = MagicMock()
        native.callbacks.set_on_remote_invited(handler)

        _trampoline(lib, "SteamStuff_SetOnRemoteInvited")(1, 5, b"https://join/abc")
        handler.assert_called_once_with(1, 5, "https://join/abc")

    def test_started_and_stopped(self):
        lib = _make_lib()
        native = SteamStuff(lib=lib)
        started, stopped = MagicMock(), MagicMock()
        native.callbacks.set_on_remote_started(started)
        native.callbacks.set_on_remote_stopped(stopped)

        _trampoline(lib, "SteamStuff_SetOnRemoteStarted")(1, 5)
        _trampoline(lib, "SteamStuff_SetOnRemoteStopped")(1, 5)
        started.assert_called_once_with(1, 5)
        stopped.assert_called_once_with(1, 5)

    def test_handler_exception_is_contained(self):
        lib = _make_lib()
        native = SteamStuff(lib=lib)
        native.callbacks.set_on_remote_started(MagicMock(side_effect=RuntimeError("boom")))

        _trampoline(lib, "SteamStuff_SetOnRemoteStarted")(1, 5)


class TestLoadLibrary:
    def test_not_found(self, monkeypatch):
        monkeypatch.delenv("STEAM_STUFF_LIBRARY", raising=False)
        with patch("ctypes.util.find_library", return_value=None):
            with pytest.raises(NativeError, match="Could not find"):
                load_library()

    def test_load_failure(self, tmp_path):
        with pytest.raises(NativeError, match="Failed to load"):
            load_library(tmp_path / "libSteamStuff.so")

    def test_env_override(self, monkeypatch, tmp_path):
        path = tmp_path / "custom.so"
        monkeypatch.setenv("STEAM_STUFF_LIBRARY", str(path))
        with patch("ctypes.CDLL") as cdll:
            load_library()
        cdll.assert_called_once_with(str(path))
