"""
Key-value store backed by the kv_store SQLite table.

A deliberately tiny surface: get bytes, set bytes. Errors from SQLite are
not caught here; callers decide whether a failure matters.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Durable byte values keyed by string."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def get(self, key: str) -> Optional[bytes]:
        row = self.conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return None
        value = row[0]
        return value.encode("utf-8") if isinstance(value, str) else bytes(value)

    def set(self, key: str, value: bytes) -> None:
        self.conn.execute(
            "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
            "updated_at = excluded.updated_at",
            (key, sqlite3.Binary(value), datetime.now().isoformat()),
        )
        self.conn.commit()
