# =============================================================================
# Remote Play Inviter -- Logging
# =============================================================================

from __future__ import annotations

import logging
import os

import websockets
from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger("remoteplay_inviter")


def setup_logging(console: Console, level: str | None = None) -> None:
    """Route log records through *console* so they print above the status line.

    The level defaults to ``$LOGLEVEL`` and then ``INFO``.
    """
    handler = RichHandler(
        level=level or os.environ.get("LOGLEVEL", "INFO"),
        console=console,
        rich_tracebacks=True,
        tracebacks_suppress=[websockets],
    )
    logging.basicConfig(
        level="NOTSET",
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
    )
    # websockets logs every frame at DEBUG
    logging.getLogger("websockets").setLevel(logging.INFO)
