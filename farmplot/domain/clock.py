import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        """Return the current instant in epoch seconds."""
        ...


class SystemClock:
    """Wall clock used by the running server."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to. Used by tests and simulations."""

    def __init__(self, start: int = 0):
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Move the clock forward

        Args:
            seconds (int): How far to move, must not be negative

        Returns:
            int: The new instant
        """
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._now += seconds
        return self._now

    def set(self, instant: int) -> None:
        if instant < self._now:
            raise ValueError("ManualClock cannot move backwards")
        self._now = instant
