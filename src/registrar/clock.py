"""Clock sources for the registry.

The registry never reads wall-clock time directly: every operation asks an
injected ``Clock`` for "now" (integer epoch seconds). ``system_clock`` is the
production source; ``ManualClock`` lets callers step time explicitly.

Dependencies: (none — leaf module)
Wired in: registry.py → Registrar, tests/conftest.py
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], int]


def utc_now_epoch() -> int:
    """Return UTC epoch seconds."""
    return int(datetime.now(UTC).timestamp())


def system_clock() -> int:
    """Production clock: current UTC epoch seconds."""
    return utc_now_epoch()


class ManualClock:
    """Clock that only moves when told to. Never runs backwards."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("start must be >= 0")
        self._now = start
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            return self._now

    def advance(self, seconds: int) -> int:
        """Move forward by *seconds* and return the new instant."""
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        with self._lock:
            self._now += seconds
            return self._now

    def set(self, instant: int) -> None:
        """Jump to *instant*, which must not precede the current time."""
        with self._lock:
            if instant < self._now:
                raise ValueError("ManualClock cannot move backwards")
            self._now = instant
