"""
Engine configuration, stored as JSON and merged over built-in defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "prayer_tracker.json"

# Default engine config (used if JSON doesn't exist yet)
DEFAULT_CONFIG = {
    "tick_interval_ms": 100,
    "min_session_seconds": 10,
    "snapshot_key": "prayer_timer_state",
    "timezone": None,           # None = device local time, else an IANA name
    "recent_sessions_limit": 5,
    "session_label": "Prayer Session",
}


def load_config(path: Optional[Path] = None) -> dict:
    path = path or CONFIG_PATH
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                cfg = json.load(f)
            # Merge with defaults for any missing keys
            merged = DEFAULT_CONFIG.copy()
            merged.update(cfg)
            return merged
        except (json.JSONDecodeError, AttributeError, TypeError, ValueError):
            logger.warning("Bad engine config at %s, using defaults.", path)
    return DEFAULT_CONFIG.copy()


def save_config(config: dict, path: Optional[Path] = None) -> None:
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
    logger.info("Saved engine config to %s", path)


def reset_config(path: Optional[Path] = None) -> dict:
    config = DEFAULT_CONFIG.copy()
    save_config(config, path)
    return config
