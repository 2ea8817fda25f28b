"""Activity analytics from study-session timestamps.

A streak day is a UTC calendar date with at least one recorded study
session; consecutive dates form a streak. Everything here is a pure
function of the set of dates, so input order and duplicates don't matter.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone

from .models.analytics import DashboardStats, StreakResult, WeeklyChartPoint

_DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _utc_date(timestamp: str) -> date:
    """Project an ISO-8601 timestamp onto its UTC calendar date.

    Naive timestamps are taken to be UTC already.
    """
    value = timestamp.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def _today_utc() -> date:
    return datetime.now(timezone.utc).date()


def calculate_streak(timestamps: Iterable[str], *, today: date | None = None) -> StreakResult:
    """Compute current and longest consecutive-day streaks.

    The current streak survives a missing session *today* as long as there
    was one yesterday; it drops to 0 once a whole calendar day is skipped.

    Args:
        timestamps: ISO-8601 ``created_at`` values.
        today: Reference UTC date (defaults to now); injectable for tests.

    Returns:
        StreakResult; ``(0, 0)`` for no timestamps.
    """
    days = sorted({_utc_date(ts).toordinal() for ts in timestamps})
    if not days:
        return StreakResult(current_streak=0, longest_streak=0)

    longest = run = 1
    for prev, cur in zip(days, days[1:]):
        run = run + 1 if cur - prev == 1 else 1
        longest = max(longest, run)

    today_day = (today or _today_utc()).toordinal()
    if today_day - days[-1] > 1:
        return StreakResult(current_streak=0, longest_streak=longest)

    current = 1
    for i in range(len(days) - 1, 0, -1):
        if days[i] - days[i - 1] != 1:
            break
        current += 1
    return StreakResult(current_streak=current, longest_streak=longest)


def weekly_activity(
    timestamps: Iterable[str], *, today: date | None = None
) -> list[WeeklyChartPoint]:
    """Count sessions per UTC day for the seven days ending *today*, oldest first."""
    end = today or _today_utc()
    counts = Counter(_utc_date(ts) for ts in timestamps)
    points = []
    for offset in range(6, -1, -1):
        day = end - timedelta(days=offset)
        points.append(WeeklyChartPoint(day=_DAY_LABELS[day.weekday()], sessions=counts[day]))
    return points


def build_dashboard_stats(
    timestamps: Iterable[str], *, today: date | None = None
) -> DashboardStats:
    """Aggregate the dashboard view from every session timestamp of one user."""
    stamps = list(timestamps)
    today = today or _today_utc()
    streak = calculate_streak(stamps, today=today)
    chart = weekly_activity(stamps, today=today)
    return DashboardStats(
        study_sessions=len(stamps),
        weekly_study_sessions=sum(p.sessions for p in chart),
        current_streak=streak.current_streak,
        longest_streak=streak.longest_streak,
        weekly_chart=chart,
    )
