# =============================================================================
# Remote Play Inviter -- Command Dispatcher
# =============================================================================
#
# Executes decoded server commands against the native platform, the guest
# roster and the invite correlator, and builds the response to send back.
# =============================================================================

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable

import pyperclip

from ._logging import logger
from .constants import INVITE_TIMEOUT
from .errors import InviteRejectedError, InviteTimeoutError
from .types import (
    ClientMessage,
    ClientResponse,
    CreateLinkCommand,
    ErrorCode,
    ErrorResponse,
    ExitCommand,
    GameID,
    GameIdResponse,
    InvalidCommand,
    LinkResponse,
    MessageCommand,
    QueryGameIdCommand,
    ServerMessage,
)

if TYPE_CHECKING:
    from .console import Terminal
    from .correlator import InviteCorrelator
    from .native import NativePlatform
    from .roster import GuestRoster


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """What the connection manager should do after a command.

    Attributes:
        response: Frame to send back, or ``None`` for fire-and-forget commands.
        exit: The server asked the client to end the session.
    """

    response: ClientMessage | None = None
    exit: bool = False


_NO_RESPONSE = DispatchResult()


class CommandDispatcher:
    """Runs one server command and returns its :class:`DispatchResult`.

    Args:
        native: Platform queried for the running game and asked for invites.
        roster: Receives the claimant of every resolved invite.
        correlator: Issues invites and waits for their join links.
        terminal: Shows server messages and activity lines.
        invite_timeout: Seconds to wait for a join link before giving up.
            ``None`` waits indefinitely.
        clipboard: Called with text the server wants copied.
    """

    def __init__(
        self,
        native: NativePlatform,
        roster: GuestRoster,
        correlator: InviteCorrelator,
        terminal: Terminal,
        *,
        invite_timeout: float | None = INVITE_TIMEOUT,
        clipboard: Callable[[str], Any] = pyperclip.copy,
    ) -> None:
        self._native = native
        self._roster = roster
        self._correlator = correlator
        self._terminal = terminal
        self._invite_timeout = invite_timeout
        self._clipboard = clipboard

        self._handlers: dict[type, Callable[[ServerMessage], Awaitable[DispatchResult]]] = {
            MessageCommand: self._handle_message,
            QueryGameIdCommand: self._handle_query_game_id,
            CreateLinkCommand: self._handle_create_link,
            ExitCommand: self._handle_exit,
            InvalidCommand: self._handle_invalid,
        }

    async def dispatch(self, message: ServerMessage) -> DispatchResult:
        handler = self._handlers.get(type(message.command), self._handle_invalid)
        return await handler(message)

    # -- Handlers -------------------------------------------------------------

    async def _handle_message(self, message: ServerMessage) -> DispatchResult:
        command: MessageCommand = message.command  # type: ignore[assignment]
        self._terminal.message(command.text)
        if command.copy is not None:
            self._copy(command.copy)
        return _NO_RESPONSE

    async def _handle_query_game_id(self, message: ServerMessage) -> DispatchResult:
        game = await asyncio.to_thread(self._native.running_game_id)
        if not game.is_valid_app():
            return _reply(message, ErrorResponse(ErrorCode.INVALID_APP))
        if not await asyncio.to_thread(self._native.can_remote_play_together, game):
            logger.info("App %d does not support Remote Play Together", game.app_id)
            return _reply(message, ErrorResponse(ErrorCode.UNSUPPORTED_APP))

        self._terminal.print(
            f"-> Create Panel       : claimer={message.claimant}, game_id={game.app_id}"
        )
        return _reply(message, GameIdResponse(game.app_id))

    async def _handle_create_link(self, message: ServerMessage) -> DispatchResult:
        command: CreateLinkCommand = message.command  # type: ignore[assignment]
        game = GameID.for_app(command.game_id)

        try:
            guest_id, connect_url = await self._correlator.request(
                game, timeout=self._invite_timeout
            )
        except InviteRejectedError:
            logger.warning("Invite for app %d rejected by Steam", game.app_id)
            return _reply(message, ErrorResponse(ErrorCode.UNSUPPORTED_APP))
        except InviteTimeoutError as exc:
            logger.warning("%s, invite cancelled", exc)
            return _reply(message, ErrorResponse(ErrorCode.INVALID_APP))

        if message.user is not None:
            self._roster.claim(guest_id, message.user.name)

        self._terminal.print(
            f"-> Create Invite Link : claimer={message.claimant}, guest_id={guest_id}, "
            f"game_id={game.app_id}, invite_url={connect_url}"
        )
        return _reply(message, LinkResponse(connect_url))

    async def _handle_exit(self, message: ServerMessage) -> DispatchResult:
        logger.info("Exit requested by the server")
        return DispatchResult(exit=True)

    async def _handle_invalid(self, message: ServerMessage) -> DispatchResult:
        logger.debug("Invalid command in request %s: %r", message.id, message.command)
        return _reply(message, ErrorResponse(ErrorCode.INVALID_CMD))

    # -- Helpers --------------------------------------------------------------

    def _copy(self, text: str) -> None:
        try:
            self._clipboard(text)
        except Exception as exc:
            logger.warning("Failed to copy to clipboard: %s", exc)
            self._terminal.error(f"Failed to copy to clipboard: {text}")


def _reply(message: ServerMessage, response: ClientResponse) -> DispatchResult:
    return DispatchResult(response=ClientMessage(id=message.id, response=response))
