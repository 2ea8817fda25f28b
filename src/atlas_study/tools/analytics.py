"""Dashboard analytics and session bookkeeping — 3 tools on a FastMCP sub-server."""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..errors import make_tool_error
from ..persistence import get_store
from ..streak import build_dashboard_stats
from ..types import UserId

analytics_server = FastMCP("analytics")


@analytics_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
async def dashboard_stats(user_id: UserId) -> dict:
    """Return total sessions, the trailing week's activity, and login streaks.

    Returns:
        Dict matching DashboardStats: study_sessions, weekly_study_sessions,
        current_streak, longest_streak, weekly_chart (7 points, oldest first).
    """
    try:
        timestamps = await get_store().list_session_timestamps(user_id)
        return build_dashboard_stats(timestamps).model_dump(mode="json")
    except Exception as exc:
        return make_tool_error(exc)


@analytics_server.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False, openWorldHint=True))
async def record_quiz_result(
    user_id: UserId,
    score: Annotated[int, Field(ge=0, description="Correct answers")],
    total_questions: Annotated[int, Field(gt=0, description="Questions attempted")],
    session_id: Annotated[str | None, Field(description="Quiz session id returned by study_quiz")] = None,
) -> dict:
    """Record a completed quiz attempt."""
    try:
        quiz_id = await get_store().record_quiz_result(
            user_id, score=score, total_questions=total_questions, session_id=session_id,
        )
        return {"success": True, "id": quiz_id}
    except Exception as exc:
        return make_tool_error(exc)


@analytics_server.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=True, openWorldHint=True))
async def update_session_duration(
    user_id: UserId,
    session_id: Annotated[str, Field(min_length=1)],
    duration_minutes: Annotated[float, Field(description="Minutes spent, 0-1440")],
) -> dict:
    """Store how long the user spent on a study session."""
    try:
        await get_store().update_session_duration(user_id, session_id, duration_minutes)
        return {"success": True}
    except Exception as exc:
        return make_tool_error(exc)
