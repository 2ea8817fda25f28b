"""Dashboard analytics and persisted record models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class StreakResult(BaseModel):
    """Consecutive-day activity streaks. Derived on every request, never stored."""

    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)


class WeeklyChartPoint(BaseModel):
    """Session count for one UTC calendar day of the trailing week."""

    day: str
    sessions: int = 0


class DashboardStats(BaseModel):
    """Output schema for the dashboard_stats tool."""

    study_sessions: int = 0
    weekly_study_sessions: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    weekly_chart: list[WeeklyChartPoint] = Field(default_factory=list)


class UploadRecord(BaseModel):
    """A row of the ``uploads`` table."""

    id: str
    user_id: str
    file_url: str
    file_name: str
    created_at: str = ""
