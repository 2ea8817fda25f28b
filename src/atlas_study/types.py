"""Shared type aliases and helpers for tool parameters."""

from __future__ import annotations

import json
from typing import Annotated, Literal

from pydantic import Field


def coerce_json_param(value: str | dict | list | None, expected_type: type) -> dict | list | None:
    """Parse MCP JSON-RPC string params back to dict/list.

    Some MCP hosts serialise list/dict arguments (e.g. chat ``history``) as
    JSON strings. Returns the parsed value when it has *expected_type*,
    otherwise the original value unchanged.
    """
    if not isinstance(value, str):
        return value
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return value
    return parsed if isinstance(parsed, expected_type) else value

# ── Literal enums ────────────────────────────────────────────────────────────

Feature = Literal[
    "summary", "quiz", "flashcards", "study_plan", "topic_analysis", "revision", "chat",
]
Role = Literal["system", "user", "assistant"]
ContentSource = Literal["text", "file"]
SessionContentType = Literal[
    "summary", "quiz", "flashcards", "study_plan", "exam_analysis", "revision",
]

# ── Annotated aliases ────────────────────────────────────────────────────────

UserId = Annotated[str, Field(min_length=1, description="Authenticated user id (from the identity provider)")]
ContentParam = Annotated[str | None, Field(description="Pasted study material (max 50,000 characters)")]
FileUrlParam = Annotated[str | None, Field(
    description="Public URL (or bucket-relative path) of an uploaded file; takes priority over content",
)]
QuestionCount = Annotated[int, Field(ge=1, le=50, description="Number of questions to generate")]
FlashcardCount = Annotated[int, Field(ge=1, le=100, description="Number of flashcards to generate")]
