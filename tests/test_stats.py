"""Unit tests for the streak & stats calculator and history views."""

import pytest
from datetime import date, datetime, timedelta, timezone

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from prayer_tracker.data.models import SessionRecord, SessionStats
from prayer_tracker.services.stats_service import (
    calendar_day, compute_stats, compute_streak, describe_session_time,
    local_today, practice_days, recent_sessions, sessions_on_day,
)

TODAY = date(2026, 3, 10)


class FixedClock:
    def __init__(self, instant: datetime) -> None:
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def _on_day(offset: int, hour: int = 9, minutes: int = 5, sid: str = "") -> SessionRecord:
    """A session `offset` days before TODAY."""
    created = datetime.combine(TODAY - timedelta(days=offset), datetime.min.time()) + timedelta(hours=hour)
    return SessionRecord(id=sid or f"d{offset}h{hour}", duration_minutes=minutes,
                         created_at=created, label="Prayer Session")


class TestComputeStats:
    def test_empty_ledger(self):
        assert compute_stats([], TODAY) == SessionStats(0, 0, 0)

    def test_two_sessions_today(self):
        stats = compute_stats([_on_day(0, 7), _on_day(0, 21)], TODAY)
        assert stats.streak_length == 1
        assert stats.session_count == 2
        assert stats.total_minutes == 10

    def test_total_minutes_not_deduplicated_by_day(self):
        records = [_on_day(0, 7, 3), _on_day(0, 8, 4), _on_day(1, 8, 20)]
        assert compute_stats(records, TODAY).total_minutes == 27

    def test_accepts_generator(self):
        stats = compute_stats((r for r in [_on_day(0), _on_day(1)]), TODAY)
        assert stats == SessionStats(2, 10, 2)


class TestStreak:
    def test_gap_breaks_streak(self):
        records = [_on_day(0), _on_day(1), _on_day(3)]
        assert compute_streak(records, TODAY) == 2

    def test_nothing_today_means_zero(self):
        # a session yesterday does not start a streak until today is logged
        assert compute_streak([_on_day(1), _on_day(2)], TODAY) == 0

    def test_long_run_with_duplicates(self):
        records = [_on_day(d, h) for d in range(6) for h in (6, 12, 20)]
        assert compute_streak(records, TODAY) == 6

    def test_ledger_order_does_not_matter(self):
        records = [_on_day(2), _on_day(0), _on_day(5), _on_day(1)]
        assert compute_streak(records, TODAY) == 3

    def test_future_session_counts_as_today(self):
        records = [_on_day(-2), _on_day(1)]
        assert compute_streak(records, TODAY) == 2

    def test_only_future_sessions(self):
        assert compute_streak([_on_day(-1), _on_day(-3)], TODAY) == 1

    def test_late_night_and_early_morning_are_different_days(self):
        late = SessionRecord("a", 1, datetime(2026, 3, 9, 23, 59))
        early = SessionRecord("b", 1, datetime(2026, 3, 10, 0, 1))
        assert compute_streak([late, early], TODAY) == 2

    def test_timezone_changes_bucketing(self):
        # 02:30 UTC on the 10th is still the 9th in Chicago
        rec = SessionRecord("a", 1, datetime(2026, 3, 10, 2, 30, tzinfo=timezone.utc))
        assert compute_streak([rec], TODAY, tz="UTC") == 1
        assert compute_streak([rec], TODAY, tz="America/Chicago") == 0


class TestHistoryViews:
    def test_calendar_day_discards_time(self):
        assert calendar_day(datetime(2026, 3, 10, 23, 59, 59)) == TODAY

    def test_practice_days(self):
        records = [_on_day(0, 7), _on_day(0, 9), _on_day(4)]
        assert practice_days(records) == {TODAY, TODAY - timedelta(days=4)}

    def test_recent_sessions_newest_first(self):
        records = [_on_day(d) for d in (3, 0, 7, 1, 2, 5)]
        recent = recent_sessions(records, limit=5)
        assert [r.id for r in recent] == ["d0h9", "d1h9", "d2h9", "d3h9", "d5h9"]

    def test_recent_sessions_ties_keep_ledger_order(self):
        a = _on_day(0, 9, sid="first")
        b = _on_day(0, 9, sid="second")
        assert [r.id for r in recent_sessions([a, b])] == ["first", "second"]

    def test_sessions_on_day(self):
        records = [_on_day(1, 6), _on_day(0, 7), _on_day(1, 20)]
        on_day = sessions_on_day(records, TODAY - timedelta(days=1))
        assert [r.id for r in on_day] == ["d1h20", "d1h6"]
        assert sessions_on_day(records, TODAY - timedelta(days=9)) == []

    @pytest.mark.parametrize("created, expected", [
        (datetime(2026, 3, 10, 7, 30), "Today at 07:30 AM"),
        (datetime(2026, 3, 9, 21, 15), "Yesterday at 09:15 PM"),
        (datetime(2026, 3, 3, 10, 0), "Mar 3"),
    ])
    def test_describe_session_time(self, created, expected):
        assert describe_session_time(created, TODAY) == expected

    def test_mixed_naive_and_aware_instants_sort(self):
        naive = SessionRecord("old", 1, datetime(2026, 3, 1, 9, 0))
        aware = SessionRecord("new", 1, datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc))
        assert [r.id for r in recent_sessions([naive, aware])] == ["new", "old"]


class TestLocalToday:
    def test_uses_configured_zone(self):
        clock = FixedClock(datetime(2026, 3, 10, 2, 30, tzinfo=timezone.utc))
        assert local_today("UTC", clock) == date(2026, 3, 10)
        assert local_today("America/Chicago", clock) == date(2026, 3, 9)

    @pytest.mark.parametrize("tz", ["America/Los_Angeles", "Pacific/Kiritimati", "UTC"])
    def test_session_logged_now_starts_streak(self, tz):
        # zones that straddle midnight must agree on what "today" is
        clock = FixedClock(datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc))
        rec = SessionRecord("a", 5, clock.now())
        stats = compute_stats([rec], local_today(tz, clock), tz)
        assert stats.streak_length == 1

    def test_defaults_to_system_clock(self):
        assert local_today() == date.today()
