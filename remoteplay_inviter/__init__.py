"""Remote Play Inviter: bridges Discord invite requests to Steam Remote Play Together.

Command-line usage::

    remoteplay-inviter --endpoint wss://inviter.example.com

Embedding usage::

    import asyncio

    from remoteplay_inviter import SteamStuff, Terminal, build_session_url, run_client

    native = SteamStuff()
    url = build_session_url("wss://inviter.example.com", token="client-uuid")
    with Terminal() as terminal:
        outcome = asyncio.run(run_client(native, url, terminal))
    native.shutdown()
"""

from ._version import __version__
from .app import main, run_client
from .backoff import Backoff
from .bridge import NativeEventBridge
from .classifier import classify_error, classify_rejection
from .connection import ConnectionManager, build_session_url
from .console import Terminal
from .correlator import InviteCorrelator
from .dispatcher import CommandDispatcher, DispatchResult
from .errors import (
    ConfigurationLoadError,
    InviteError,
    InviteRejectedError,
    InviterConnectionError,
    InviterError,
    InviterProtocolError,
    InviterTimeoutError,
    InviteTimeoutError,
    NativeError,
)
from .native import NativeCallbacks, NativePlatform
from .protocol import decode_message, encode_response
from .roster import GuestRoster
from .steam_stuff import SteamStuff
from .types import (
    ClientMessage,
    ConnectionState,
    ErrorCode,
    Fatal,
    GameID,
    Recoverable,
    ServerMessage,
)

__all__ = [
    "__version__",
    # Entry points
    "main",
    "run_client",
    # Session engine
    "Backoff",
    "CommandDispatcher",
    "ConnectionManager",
    "DispatchResult",
    "GuestRoster",
    "InviteCorrelator",
    "NativeEventBridge",
    "Terminal",
    "build_session_url",
    "classify_error",
    "classify_rejection",
    # Codec
    "decode_message",
    "encode_response",
    # Native
    "NativeCallbacks",
    "NativePlatform",
    "SteamStuff",
    # Errors
    "ConfigurationLoadError",
    "InviteError",
    "InviteRejectedError",
    "InviteTimeoutError",
    "InviterConnectionError",
    "InviterError",
    "InviterProtocolError",
    "InviterTimeoutError",
    "NativeError",
    # Types
    "ClientMessage",
    "ConnectionState",
    "ErrorCode",
    "Fatal",
    "GameID",
    "Recoverable",
    "ServerMessage",
]
