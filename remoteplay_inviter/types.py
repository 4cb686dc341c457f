# =============================================================================
# Remote Play Inviter -- Type Definitions
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .constants import UNKNOWN_CLAIMANT


class ConnectionState(str, Enum):
    """Session lifecycle state.

    Typical flow: DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED,
    repeated for every reconnect. EXITED is terminal.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    EXITED = "exited"


class ErrorCode(str, Enum):
    """Error codes sent back to the server in an ``error`` response."""

    INVALID_CMD = "invalid_cmd"
    INVALID_APP = "invalid_app"
    UNSUPPORTED_APP = "unsupported_app"


# -- Connection outcomes -------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Recoverable:
    """A connectivity fault that is retried after a backoff delay."""

    reason: str


@dataclass(frozen=True, slots=True)
class Fatal:
    """A connectivity fault that ends the session.

    Attributes:
        reason: Human-readable cause shown to the user.
        required: Client version the server requires (outdated client only).
        download: Where the required version can be downloaded.
    """

    reason: str
    required: str | None = None
    download: str | None = None

    @property
    def outdated(self) -> bool:
        return self.required is not None


ConnectionOutcome = Union[Recoverable, Fatal]


# -- Server -> client ----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class User:
    """The platform user on whose behalf the server sent a command."""

    id: str
    name: str


@dataclass(frozen=True, slots=True)
class MessageCommand:
    """Announcement to display, optionally with text to put on the clipboard."""

    text: str
    copy: str | None = None


@dataclass(frozen=True, slots=True)
class QueryGameIdCommand:
    """Ask which game is running locally."""


@dataclass(frozen=True, slots=True)
class CreateLinkCommand:
    """Ask for a Remote Play Together join link for *game_id*."""

    game_id: int


@dataclass(frozen=True, slots=True)
class ExitCommand:
    """Ask the client to end the session."""


@dataclass(frozen=True, slots=True)
class InvalidCommand:
    """Any command tag this client does not know."""

    tag: str | None = None


ServerCommand = Union[
    MessageCommand,
    QueryGameIdCommand,
    CreateLinkCommand,
    ExitCommand,
    InvalidCommand,
]


@dataclass(frozen=True, slots=True)
class ServerMessage:
    """One decoded inbound frame.

    Attributes:
        id: Opaque request id, echoed in the response.
        command: The decoded command variant.
        user: Requesting user, when the server supplied one.
    """

    id: str
    command: ServerCommand
    user: User | None = None

    @property
    def claimant(self) -> str:
        return self.user.name if self.user is not None else UNKNOWN_CLAIMANT


# -- Client -> server ----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GameIdResponse:
    app_id: int


@dataclass(frozen=True, slots=True)
class LinkResponse:
    url: str


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    code: ErrorCode


ClientResponse = Union[GameIdResponse, LinkResponse, ErrorResponse]


@dataclass(frozen=True, slots=True)
class ClientMessage:
    """One outbound frame, echoing the id of the request it answers."""

    id: str
    response: ClientResponse


# -- Native events -------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RemoteInvited:
    """The native layer produced a join link for *guest_id*."""

    invitee: int
    guest_id: int
    connect_url: str


@dataclass(frozen=True, slots=True)
class RemoteStarted:
    """A guest joined the Remote Play session."""

    invitee: int
    guest_id: int


@dataclass(frozen=True, slots=True)
class RemoteStopped:
    """A guest left the Remote Play session."""

    invitee: int
    guest_id: int


NativeEvent = Union[RemoteInvited, RemoteStarted, RemoteStopped]


# -- Game identifiers ----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GameID:
    """Steam's packed 64-bit game id.

    Layout: ``app_id`` in bits 0-23, ``game_type`` in bits 24-31 and
    ``mod_id`` in bits 32-63. ``game_type == 0`` denotes a plain Steam app.
    """

    app_id: int
    game_type: int = 0
    mod_id: int = 0

    @classmethod
    def for_app(cls, app_id: int) -> GameID:
        return cls(app_id & 0xFFFFFF)

    @classmethod
    def from_uid(cls, uid: int) -> GameID:
        return cls(
            app_id=uid & 0xFFFFFF,
            game_type=(uid >> 24) & 0xFF,
            mod_id=(uid >> 32) & 0xFFFFFFFF,
        )

    def to_uid(self) -> int:
        return (
            (self.app_id & 0xFFFFFF)
            | ((self.game_type & 0xFF) << 24)
            | ((self.mod_id & 0xFFFFFFFF) << 32)
        )

    def is_valid_app(self) -> bool:
        return self.game_type == 0 and self.app_id != 0
