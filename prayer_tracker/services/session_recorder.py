"""
Session Recorder — converts a finished timer run into a SessionRecord.

Applies the minimum-duration and rounding policy, then appends the record
to the ledger.
"""

from __future__ import annotations

import logging
import math
import uuid
from typing import Optional, Union

from prayer_tracker.data.models import Rejected, RejectReason, SessionRecord
from prayer_tracker.data.repository import Repository
from prayer_tracker.services.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

DEFAULT_MIN_SESSION_SECONDS = 10


def round_minutes(elapsed_seconds: int) -> int:
    """Whole minutes, halves rounded up, never below one."""
    return max(1, math.floor(elapsed_seconds / 60 + 0.5))


class SessionRecorder:
    """Turns elapsed seconds into ledger entries."""

    def __init__(
        self,
        repo: Repository,
        clock: Optional[Clock] = None,
        min_session_seconds: int = DEFAULT_MIN_SESSION_SECONDS,
    ) -> None:
        self.repo = repo
        self.clock = clock or SystemClock()
        self.min_session_seconds = min_session_seconds

    def record(self, elapsed_seconds: int, label: str) -> Union[SessionRecord, Rejected]:
        """
        Record a session, or reject it when it is too short.

        Ledger errors (sqlite3.Error) are not caught here.
        """
        if elapsed_seconds < self.min_session_seconds:
            logger.info("Session of %ds rejected as too short.", elapsed_seconds)
            return Rejected(
                reason=RejectReason.TOO_SHORT,
                message=f"Pray for at least {self.min_session_seconds} seconds to save a session.",
            )

        record = SessionRecord(
            id=uuid.uuid4().hex,
            duration_minutes=round_minutes(elapsed_seconds),
            created_at=self.clock.now(),
            label=label,
        )
        return self.repo.append_session(record)

    @staticmethod
    def confirmation_message(record: SessionRecord) -> str:
        unit = "minute" if record.duration_minutes == 1 else "minutes"
        return f"{record.duration_minutes} {unit} of prayer recorded."
