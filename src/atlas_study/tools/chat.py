"""Conversational tutor — 1 tool on a FastMCP sub-server."""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..client import get_completion_client
from ..errors import make_tool_error
from ..pipeline import run_chat
from ..types import FileUrlParam, coerce_json_param

chat_server = FastMCP("chat")


@chat_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
async def study_chat(
    question: Annotated[str, Field(description="The student's question")],
    context: Annotated[str | None, Field(
        description="Pasted study material; appended after the file text when file_url is also given",
    )] = None,
    file_url: FileUrlParam = None,
    history: Annotated[list[dict] | None, Field(
        description="Prior turns as [{role: 'user'|'assistant', content: str}], oldest first",
    )] = None,
) -> dict:
    """Ask Atlas, the study tutor, a question.

    With study material (file, pasted context, or both) the answer is
    grounded in it; without, Atlas answers as a general tutor. Earlier turns
    are replayed in order so follow-up questions keep their context.

    Returns:
        Dict with ``answer`` (plain text), or a tool error dict.
    """
    history = coerce_json_param(history, list) or []

    try:
        return await run_chat(
            question,
            completion=get_completion_client(),
            context=context,
            file_url=file_url,
            history=history,
        )
    except Exception as exc:
        return make_tool_error(exc)
