# =============================================================================
# Remote Play Inviter -- Application Entry Point
# =============================================================================

from __future__ import annotations

import argparse
import asyncio
import time
from typing import Sequence

from ._logging import logger, setup_logging
from .bridge import NativeEventBridge
from .config import read_endpoint_config, read_or_generate_config, resolve_endpoint
from .connection import ConnectionManager, build_session_url
from .console import Terminal
from .correlator import InviteCorrelator
from .dispatcher import CommandDispatcher
from .errors import ConfigurationLoadError, NativeError
from .native import NativePlatform
from .roster import GuestRoster
from .steam_stuff import SteamStuff
from .types import Fatal

BANNER = """\
------------------------------------------------------------------------------
                        Remote Play Inviter
    Invite your friends via Discord and play Steam games together for free!
------------------------------------------------------------------------------
"""


async def run_client(
    native: NativePlatform,
    url: str,
    terminal: Terminal,
) -> Fatal | None:
    """Wire the session engine around *native* and serve *url* until it ends.

    Returns:
        The fatal outcome that ended the session, or ``None`` after the
        server asked the client to exit.
    """
    roster = GuestRoster()
    correlator = InviteCorrelator(native)
    dispatcher = CommandDispatcher(native, roster, correlator, terminal)
    manager = ConnectionManager(url, dispatcher, terminal=terminal)

    async with NativeEventBridge(native, roster, correlator, terminal):
        return await manager.run()


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="remoteplay-inviter",
        description="Bridge Discord invite requests to Steam Remote Play Together.",
    )
    parser.add_argument("--endpoint", help="Server URL (overrides the endpoint file)")
    parser.add_argument("--library", help="Path to the SteamStuff shared library")
    parser.add_argument("--log-level", help="Logging level (default: $LOGLEVEL or INFO)")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    terminal = Terminal()
    setup_logging(terminal.console, args.log_level)
    terminal.print(BANNER)

    exit_code = _run(args, terminal)

    terminal.print("□ Press Ctrl+C to exit...")
    _wait_for_interrupt()
    return exit_code


def _run(args: argparse.Namespace, terminal: Terminal) -> int:
    try:
        native = SteamStuff(args.library)
    except NativeError as exc:
        logger.debug("Native init failed: %s", exc)
        terminal.error(
            "Failed to connect to Steam Client. Please make sure Steam is running."
        )
        return 1

    try:
        try:
            config = read_or_generate_config()
            custom = None if args.endpoint else read_endpoint_config()
            if custom is not None:
                endpoint = custom.url
                terminal.print(f"✓ Using custom endpoint URL: {endpoint}")
            else:
                endpoint = resolve_endpoint(args.endpoint)
        except ConfigurationLoadError as exc:
            terminal.error(str(exc))
            return 1

        url = build_session_url(endpoint, config.uuid)
        with terminal:
            outcome = asyncio.run(run_client(native, url, terminal))
        return 1 if outcome is not None else 0
    finally:
        native.shutdown()


def _wait_for_interrupt() -> None:
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
