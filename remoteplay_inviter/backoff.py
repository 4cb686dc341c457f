# =============================================================================
# Remote Play Inviter -- Reconnect Backoff
# =============================================================================

from __future__ import annotations

from .constants import BACKOFF_CAP, BACKOFF_INITIAL


class Backoff:
    """Doubling reconnect delay, in whole seconds.

    ``next()`` clamps the previous delay to *cap* before doubling, so after
    ``reset()`` the delays run 2, 4, 8, 16, 32, 64, 120. The clamp only binds
    on the way up: once the delay has reached the clamped ceiling
    (``2 * cap``) it keeps doubling, giving 240, 480, ... There is no hard
    upper bound; liveness signals call ``reset()``.

    Args:
        initial: Value restored by ``reset()`` (default 1).
        cap: Clamp applied to the previous delay (default 60).
    """

    def __init__(self, initial: int = BACKOFF_INITIAL, cap: int = BACKOFF_CAP) -> None:
        self._initial = initial
        self._cap = cap
        self._value = initial

    @property
    def current(self) -> int:
        return self._value

    def next(self) -> int:
        if self._value >= self._cap * 2:
            self._value *= 2
        else:
            self._value = min(self._value, self._cap) * 2
        return self._value

    def reset(self) -> None:
        self._value = self._initial
