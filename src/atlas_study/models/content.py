"""Pipeline input models — resolved study content and chat turns."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..types import ContentSource, Role


class ResolvedContent(BaseModel):
    """Normalized text payload produced by the content resolver.

    ``file_url`` is set only for file sources; it is the reference stored
    alongside the session so the material can be reopened later.
    """

    text: str = Field(min_length=1)
    source: ContentSource
    file_url: str | None = None


class ChatMessage(BaseModel):
    """One message in a completion request."""

    role: Role
    content: str
