"""
Repository — the single place where session SQL lives.

The session ledger is append-only from the engine's point of view: it adds
records and reads them back in ledger order. Deletion exists only for explicit
user action in the surrounding app.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import List, Optional

from .models import SessionRecord

logger = logging.getLogger(__name__)

# helper: parse ISO datetime strings from SQLite
_parse_dt = lambda s: datetime.fromisoformat(s) if s else None


class Repository:
    """Data-access layer for the session ledger."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    # ── Ledger ──────────────────────────────────────────────────────────────

    def append_session(self, record: SessionRecord) -> SessionRecord:
        row = self.conn.execute("SELECT MAX(seq) FROM sessions").fetchone()
        next_seq = (row[0] or 0) + 1
        self.conn.execute(
            "INSERT INTO sessions (id, duration_minutes, created_at, label, seq) "
            "VALUES (?, ?, ?, ?, ?)",
            (record.id, record.duration_minutes, record.created_at.isoformat(),
             record.label, next_seq),
        )
        self.conn.commit()
        logger.info("Appended session %s (%d min)", record.id, record.duration_minutes)
        return record

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        row = self.conn.execute(
            "SELECT * FROM sessions WHERE id = ?", (session_id,)
        ).fetchone()
        return self._row_to_session(row) if row else None

    def list_sessions(
        self,
        start_after: Optional[datetime] = None,
        start_before: Optional[datetime] = None,
    ) -> List[SessionRecord]:
        """Return sessions in ledger (insertion) order."""
        query = "SELECT * FROM sessions"
        conditions: List[str] = []
        params: list = []

        if start_after:
            conditions.append("created_at >= ?")
            params.append(start_after.isoformat())
        if start_before:
            conditions.append("created_at <= ?")
            params.append(start_before.isoformat())

        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY seq"

        rows = self.conn.execute(query, params).fetchall()
        return [self._row_to_session(r) for r in rows]

    def count_sessions(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) FROM sessions").fetchone()
        return row[0]

    def delete_session(self, session_id: str) -> bool:
        """Delete a single session. Only ever called on explicit user request."""
        cur = self.conn.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
        self.conn.commit()
        deleted = cur.rowcount > 0
        if deleted:
            logger.info("Deleted session %s", session_id)
        return deleted

    # ── Row mappers ─────────────────────────────────────────────────────────

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> SessionRecord:
        return SessionRecord(
            id=row["id"],
            duration_minutes=row["duration_minutes"],
            created_at=_parse_dt(row["created_at"]),
            label=row["label"] or "",
        )


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   The ledger of committed prayer sessions. Services call
#   repo.append_session() / repo.list_sessions() instead of writing SQL.
#
# Key methods:
#   - append_session(): stamps a monotonically increasing seq so the
#     original ledger order survives even when two sessions share a
#     created_at (the streak sort relies on that for stable tie-breaks).
#   - list_sessions(): optional date-range filters, always ledger order.
#
# Interviewer-friendly talking points:
#   1. No UPDATE statement exists for sessions. Immutability is enforced
#      by simply not offering the operation.
#   2. Repository pattern: tests swap in an in-memory SQLite connection.
