"""Time sources for the engine.

Every operation reads the current time once, from the Clock it was built
with. Tests drive a ManualClock; deployments use SystemClock.
"""

from __future__ import annotations

import time
from typing import Protocol, final, runtime_checkable

from irswap.core.types import Timestamp


@runtime_checkable
class Clock(Protocol):
    def now(self) -> Timestamp: ...


@final
class SystemClock:
    """Wall-clock time in whole seconds."""

    def now(self) -> Timestamp:
        return int(time.time())


@final
class ManualClock:
    """Clock that only moves when told to. Never goes backwards."""

    def __init__(self, start: Timestamp = 0) -> None:
        self._now = start

    def now(self) -> Timestamp:
        return self._now

    def advance(self, seconds: int) -> Timestamp:
        if seconds < 0:
            raise ValueError(f"ManualClock cannot move backwards, got {seconds}")
        self._now += seconds
        return self._now

    def set(self, ts: Timestamp) -> None:
        if ts < self._now:
            raise ValueError(f"ManualClock cannot move backwards: {ts} < {self._now}")
        self._now = ts
