# =============================================================================
# Remote Play Inviter -- Terminal Output
# =============================================================================
#
# User-facing lines (connect/reconnect announcements, server messages, guest
# activity) plus one persistent status line pinned below them.
# =============================================================================

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.live import Live
from rich.text import Text


class Terminal:
    """Prints announcement lines above a persistent bottom status line.

    Args:
        console: Rich console to render on. Defaults to a new stdout console.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)
        self._status = ""
        self._live: Live | None = None

    def __enter__(self) -> Terminal:
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()

    def start(self) -> None:
        if self._live is not None:
            return
        self._live = Live(
            Text(self._status),
            console=self.console,
            auto_refresh=False,
            transient=True,
        )
        self._live.start()

    def stop(self) -> None:
        if self._live is None:
            return
        self._live.stop()
        self._live = None

    @property
    def status_line(self) -> str:
        return self._status

    def print(self, text: str) -> None:
        self.console.print(text, markup=False)

    def error(self, text: str) -> None:
        self.console.print(f"☓ {text}", style="red", markup=False)

    def message(self, text: str) -> None:
        """Show a server announcement, indented and padded by blank lines."""
        indented = "\n".join(f"  {line}" for line in text.splitlines())
        self.console.print(f"\n{indented}\n", markup=False)

    def status(self, text: str) -> None:
        """Replace the persistent status line."""
        self._status = text
        if self._live is not None:
            self._live.update(Text(text), refresh=True)
