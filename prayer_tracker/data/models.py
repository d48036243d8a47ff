"""
Data models for the prayer tracker.

Plain dataclasses that represent persisted rows and derived results. Frozen
where the value must never change after creation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class TimerSnapshot:
    """The minimal durable state needed to rebuild a running stopwatch."""
    elapsed_seconds: int = 0
    is_running: bool = False
    last_persist: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        if self.elapsed_seconds < 0:
            raise ValueError("elapsed_seconds must be >= 0")

    @classmethod
    def cleared(cls, now: datetime) -> "TimerSnapshot":
        return cls(elapsed_seconds=0, is_running=False, last_persist=now)


@dataclass(frozen=True)
class SessionRecord:
    """One committed prayer session. Immutable once created."""
    id: str
    duration_minutes: int
    created_at: datetime
    label: str = ""

    def __post_init__(self) -> None:
        if self.duration_minutes < 1:
            raise ValueError("duration_minutes must be >= 1")


class RejectReason:
    TOO_SHORT = "too_short"
    STORAGE_FAILURE = "storage_failure"


@dataclass(frozen=True)
class Rejected:
    """A commit that did not produce a SessionRecord."""
    reason: str
    message: str


@dataclass(frozen=True)
class SessionStats:
    """Aggregates derived from the ledger. Never persisted."""
    session_count: int = 0
    total_minutes: int = 0
    streak_length: int = 0


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Defines the shapes the engine passes around.
#
# Key classes and why they exist:
#   - TimerSnapshot: three fields is all we need to survive a process kill:
#     how much time was on the clock, whether it was counting, and when we
#     wrote it down.
#   - SessionRecord: frozen so nothing downstream can quietly edit history.
#   - Rejected: a commit outcome, not an exception. Short sessions are an
#     expected user action, so the caller gets a value it can show.
#   - SessionStats: recomputed on demand from the ledger; no lifecycle.
