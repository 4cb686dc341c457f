# =============================================================================
# Remote Play Inviter -- Error Types
# =============================================================================


class InviterError(Exception):
    """Base exception for all inviter client errors."""


class InviterConnectionError(InviterError):
    """Connection-related errors (failed to connect, lost connection)."""


class InviterTimeoutError(InviterError):
    """The server went quiet for longer than the idle timeout."""


class InviterProtocolError(InviterError):
    """Wire protocol errors (malformed JSON, missing required fields)."""


class InviteError(InviterError):
    """An invite could not be turned into a join link."""


class InviteRejectedError(InviteError):
    """The native layer refused to issue the invite (e.g. non-Steam app)."""

    def __init__(self, app_id: int) -> None:
        self.app_id = app_id
        super().__init__(f"Invite for app {app_id} was rejected")


class InviteTimeoutError(InviteError):
    """No "invited" event arrived for an issued invite in time."""

    def __init__(self, guest_id: int, timeout: float) -> None:
        self.guest_id = guest_id
        self.timeout = timeout
        super().__init__(
            f"No invite result for guest {guest_id} after {timeout:.0f}s"
        )


class NativeError(InviterError):
    """The native SteamStuff library could not be loaded or initialized."""


class ConfigurationLoadError(InviterError):
    """A configuration file could not be read, parsed or written."""
