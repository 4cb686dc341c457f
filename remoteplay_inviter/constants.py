# =============================================================================
# Remote Play Inviter -- Protocol Constants
# =============================================================================

from ._version import __version__

CLIENT_VERSION = __version__

# -- Endpoint -----------------------------------------------------------------

DEFAULT_ENDPOINT_URL = "ws://127.0.0.1:8080"
SESSION_PATH = "/ws"

# -- Timing (seconds) ---------------------------------------------------------

CONNECTION_TIMEOUT = 10.0
IDLE_TIMEOUT = 60.0
CALLBACK_INTERVAL = 0.2
INVITE_TIMEOUT = 30.0  # must stay below IDLE_TIMEOUT

# -- Reconnection -------------------------------------------------------------

BACKOFF_INITIAL = 1
BACKOFF_CAP = 60

# -- Invites ------------------------------------------------------------------

INVITE_QUEUE_SIZE = 32
INVITEE_ANYONE = 0  # invite link usable by any Steam account

# -- Messages -----------------------------------------------------------------

MAX_MESSAGE_SIZE = 1_048_576  # 1 MB

# -- Rejection payloads -------------------------------------------------------

ERROR_HEADER = "X-Error"
HTTP_UPGRADE_REQUIRED = 426
ERROR_TAG_OUTDATED = "outdated"

# -- Guests -------------------------------------------------------------------

UNKNOWN_CLAIMANT = "?"
