"""Tests for streak and weekly-activity analytics."""

from __future__ import annotations

import random
from datetime import date

from atlas_study.streak import build_dashboard_stats, calculate_streak, weekly_activity

TODAY = date(2026, 3, 12)  # a Thursday


def _stamps(*days: str) -> list[str]:
    return [f"2026-03-{d}T10:00:00Z" for d in days]


class TestCalculateStreak:
    def test_empty(self):
        result = calculate_streak([], today=TODAY)
        assert (result.current_streak, result.longest_streak) == (0, 0)

    def test_run_ending_today(self):
        result = calculate_streak(_stamps("10", "11", "12"), today=TODAY)
        assert (result.current_streak, result.longest_streak) == (3, 3)

    def test_run_ending_yesterday_still_counts(self):
        result = calculate_streak(_stamps("09", "10", "11"), today=TODAY)
        assert (result.current_streak, result.longest_streak) == (3, 3)

    def test_gap_breaks_current_streak(self):
        result = calculate_streak(_stamps("01", "02", "03", "04", "09", "10"), today=TODAY)
        assert (result.current_streak, result.longest_streak) == (0, 4)

    def test_isolated_day_today_after_gap(self):
        result = calculate_streak(_stamps("09", "12"), today=TODAY)
        assert (result.current_streak, result.longest_streak) == (1, 1)

    def test_duplicates_and_order_do_not_matter(self):
        stamps = _stamps("10", "11", "11", "12") + ["2026-03-12T23:59:59+00:00"]
        expected = calculate_streak(stamps, today=TODAY)
        shuffled = stamps[:]
        random.Random(7).shuffle(shuffled)
        assert calculate_streak(shuffled, today=TODAY) == expected
        assert expected.current_streak == 3

    def test_offsets_projected_to_utc(self):
        # 23:30 at -05:00 on the 11th is the 12th in UTC.
        result = calculate_streak(["2026-03-11T23:30:00-05:00", "2026-03-11T09:00:00Z"], today=TODAY)
        assert result.current_streak == 2


class TestWeeklyActivity:
    def test_seven_points_oldest_first(self):
        points = weekly_activity(_stamps("06", "12", "12", "01"), today=TODAY)
        assert [p.day for p in points] == ["Fri", "Sat", "Sun", "Mon", "Tue", "Wed", "Thu"]
        assert [p.sessions for p in points] == [1, 0, 0, 0, 0, 0, 2]


class TestDashboardStats:
    def test_aggregate(self):
        stats = build_dashboard_stats(_stamps("01", "10", "11", "11", "12"), today=TODAY)
        assert stats.study_sessions == 5
        assert stats.weekly_study_sessions == 4
        assert stats.current_streak == 3
        assert stats.longest_streak == 3
        assert len(stats.weekly_chart) == 7

    def test_no_sessions(self):
        stats = build_dashboard_stats([], today=TODAY)
        assert stats.study_sessions == 0
        assert stats.weekly_study_sessions == 0
        assert all(p.sessions == 0 for p in stats.weekly_chart)
