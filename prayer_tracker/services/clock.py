from __future__ import annotations

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Wall-clock source.

    Services depend on this interface rather than calling datetime.now()
    directly, so tests can move time by hand. Naive instants are read as
    device-local; mixing them with aware ones is tolerated by converting
    both to aware local time before comparing.
    """

    def now(self) -> datetime:
        """Return the current wall-clock instant."""


class SystemClock:
    """Production clock backed by datetime.now() (device local, naive)."""

    def now(self) -> datetime:
        return datetime.now()
