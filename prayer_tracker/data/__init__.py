from .database import Database
from .kv_store import KeyValueStore
from .models import Rejected, RejectReason, SessionRecord, SessionStats, TimerSnapshot
from .repository import Repository

__all__ = [
    "Database", "KeyValueStore", "Rejected", "RejectReason", "Repository",
    "SessionRecord", "SessionStats", "TimerSnapshot",
]
