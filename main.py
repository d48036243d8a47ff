"""
Prayer Tracker — timer and streak engine.
Entry point: restores the persisted prayer timer and reports stats.
"""

import faulthandler
import logging
import sys

faulthandler.enable()

from PySide6.QtCore import QCoreApplication

from prayer_tracker.config import load_config
from prayer_tracker.data.database import Database
from prayer_tracker.data.kv_store import KeyValueStore
from prayer_tracker.data.repository import Repository
from prayer_tracker.services.session_recorder import SessionRecorder
from prayer_tracker.services.stats_service import compute_stats, local_today, recent_sessions
from prayer_tracker.services.timer_service import TimerService


def setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler("prayer_tracker.log", encoding="utf-8"),
        ],
    )


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Starting Prayer Tracker...")

    app = QCoreApplication(sys.argv)
    app.setApplicationName("PrayerTracker")

    config = load_config()
    db = Database()
    db.connect()
    repo = Repository(db.conn)

    recorder = SessionRecorder(repo, min_session_seconds=config["min_session_seconds"])
    timer = TimerService(
        KeyValueStore(db.conn),
        recorder,
        snapshot_key=config["snapshot_key"],
        tick_interval_ms=config["tick_interval_ms"],
        session_label=config["session_label"],
    )

    try:
        state = timer.resume_from_persisted()
        logger.info("Timer %s at %s", state, timer.formatted_elapsed())

        sessions = repo.list_sessions()
        stats = compute_stats(sessions, local_today(config["timezone"]), config["timezone"])
        logger.info(
            "Streak %d day(s), %d session(s), %d minute(s) total.",
            stats.streak_length, stats.session_count, stats.total_minutes,
        )
        for record in recent_sessions(sessions, config["recent_sessions_limit"]):
            logger.info("  %s  %d min  %s", record.created_at.isoformat(timespec="minutes"),
                        record.duration_minutes, record.label)
    finally:
        timer.shutdown()
        db.close()


if __name__ == "__main__":
    main()


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Wires the engine together: logging, config, SQLite, the timer service.
#   Resuming the timer here is exactly what the prayer screen does when it
#   regains focus.
#
# Key points:
#   - QCoreApplication: QTimer needs a Qt application object even without
#     any widgets.
#   - timer.shutdown() in `finally`: the tick stops, but the snapshot stays,
#     so a running timer keeps "running" across launches.
