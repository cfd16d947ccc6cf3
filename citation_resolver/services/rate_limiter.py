"""Minimum spacing between consecutive batch records."""

from __future__ import annotations

import time
from typing import Callable, Optional


class RateLimiter:
    """Enforce a minimum spacing between consecutive calls to :meth:`wait`.

    The first call never blocks. ``clock`` and ``sleep`` are injectable so the
    spacing can be checked without real delays.
    """

    def __init__(
        self,
        min_interval: float = 0.2,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must not be negative")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None

    def wait(self) -> None:
        if self.min_interval > 0 and self._last_call is not None:
            remaining = self.min_interval - (self._clock() - self._last_call)
            if remaining > 0:
                self._sleep(remaining)
        self._last_call = self._clock()

    def reset(self) -> None:
        self._last_call = None
