"""Leading-edge throttling."""

from __future__ import annotations

import time
from collections.abc import Callable


class Throttle:
    """Lets the first event through, then drops events for ``interval`` seconds.

    A burst of coverage writes therefore triggers one refresh immediately,
    and the next one only once the window has elapsed.
    """

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic) -> None:
        if interval < 0:
            raise ValueError(f"interval must be >= 0, got {interval}")
        self.interval = interval
        self._clock = clock
        self._window_start: float | None = None

    def admit(self) -> bool:
        """Return True when an event arriving now should pass."""
        now = self._clock()
        if self._window_start is not None and now - self._window_start < self.interval:
            return False
        self._window_start = now
        return True
