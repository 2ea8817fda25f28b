"""Study artifact tools — 6 tools on a FastMCP sub-server."""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..client import get_completion_client
from ..errors import make_tool_error
from ..persistence import get_store
from ..pipeline import run_feature
from ..prompts.builder import DEFAULT_FLASHCARD_COUNT, DEFAULT_QUIZ_COUNT
from ..types import ContentParam, Feature, FileUrlParam, FlashcardCount, QuestionCount

logger = logging.getLogger(__name__)
study_server = FastMCP("study")

UserIdParam = Annotated[str | None, Field(description="User id; when set, the result is saved as a study session")]

_ANNOTATIONS = ToolAnnotations(readOnlyHint=False, destructiveHint=False, openWorldHint=True)


async def _run(
    feature: Feature,
    *,
    content: str | None,
    file_url: str | None,
    user_id: str | None,
    count: int | None = None,
) -> dict:
    """Shared tool body: run the pipeline, map fatal errors to a ToolError dict."""
    try:
        return await run_feature(
            feature,
            completion=get_completion_client(),
            content=content,
            file_url=file_url,
            count=count,
            user_id=user_id,
            store=get_store(),
        )
    except Exception as exc:
        logger.warning("%s failed: %s", feature, exc)
        return make_tool_error(exc)


@study_server.tool(annotations=_ANNOTATIONS)
async def study_summarize(
    content: ContentParam = None,
    file_url: FileUrlParam = None,
    user_id: UserIdParam = None,
) -> dict:
    """Summarize study material into an overview, key points, and topics.

    Provide pasted ``content`` or an uploaded ``file_url`` (the file wins
    when both are given).

    Returns:
        Dict with summary, key_points, topics, and session_id.
    """
    return await _run("summary", content=content, file_url=file_url, user_id=user_id)


@study_server.tool(annotations=_ANNOTATIONS)
async def study_quiz(
    content: ContentParam = None,
    file_url: FileUrlParam = None,
    count: QuestionCount = DEFAULT_QUIZ_COUNT,
    user_id: UserIdParam = None,
) -> dict:
    """Generate multiple-choice quiz questions from study material.

    Returns:
        Dict with questions (question, options, correct_answer, explanation)
        and session_id. An unparsable completion yields an empty list.
    """
    return await _run("quiz", content=content, file_url=file_url, user_id=user_id, count=count)


@study_server.tool(annotations=_ANNOTATIONS)
async def study_flashcards(
    content: ContentParam = None,
    file_url: FileUrlParam = None,
    count: FlashcardCount = DEFAULT_FLASHCARD_COUNT,
    user_id: UserIdParam = None,
) -> dict:
    """Generate question/answer flashcards from study material."""
    return await _run("flashcards", content=content, file_url=file_url, user_id=user_id, count=count)


@study_server.tool(annotations=_ANNOTATIONS)
async def study_plan(
    content: ContentParam = None,
    file_url: FileUrlParam = None,
    user_id: UserIdParam = None,
) -> dict:
    """Create a prioritised study plan with per-topic time estimates.

    Returns:
        Dict with title, topics (topic, priority, estimated_minutes,
        resources), estimated_hours, and session_id.
    """
    return await _run("study_plan", content=content, file_url=file_url, user_id=user_id)


@study_server.tool(annotations=_ANNOTATIONS)
async def study_exam_analysis(
    content: ContentParam = None,
    file_url: FileUrlParam = None,
    user_id: UserIdParam = None,
) -> dict:
    """Rank the topics of study material or past exam papers by frequency and importance."""
    return await _run("topic_analysis", content=content, file_url=file_url, user_id=user_id)


@study_server.tool(annotations=_ANNOTATIONS)
async def study_revision(
    content: ContentParam = None,
    file_url: FileUrlParam = None,
    user_id: UserIdParam = None,
) -> dict:
    """Condense study material into a sectioned revision guide with key facts and tips."""
    return await _run("revision", content=content, file_url=file_url, user_id=user_id)
