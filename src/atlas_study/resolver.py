"""Content resolution — pasted text or an uploaded file into one text payload.

Precedence is strict: a non-empty ``file_url`` is always resolved from
storage, and a failure there is fatal (no silent fallback to pasted text).
Only the chat context combines both sources.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from .config import get_config
from .errors import AtlasError, ErrorCategory, ResolutionError
from .extraction import extract_text
from .models.content import ResolvedContent
from .storage import extract_storage_path

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n--- Additional context ---\n\n"


class ObjectStore(Protocol):
    """What the resolver needs from the object store."""

    bucket: str

    async def download(self, path: str) -> bytes: ...


def _has_text(value: str | None) -> bool:
    return isinstance(value, str) and bool(value.strip())


async def resolve_file(file_url: str, *, storage: ObjectStore) -> str:
    """Download and extract the text behind *file_url*.

    Every failure (bad locator, download, extraction) is wrapped into a
    single ResolutionError carrying the underlying message.
    """
    storage_path = extract_storage_path(file_url, storage.bucket)
    logger.info("Resolving file content from storage path %s", storage_path)

    try:
        data = await storage.download(storage_path)
    except Exception as exc:
        raise ResolutionError(
            f"Failed to download file from storage: {exc}",
            category=ErrorCategory.STORAGE_DOWNLOAD_FAILED,
        ) from exc

    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ResolutionError(
            "Failed to read the downloaded file into memory.",
            category=ErrorCategory.STORAGE_DOWNLOAD_FAILED,
        )

    try:
        return await asyncio.to_thread(extract_text, bytes(data), storage_path)
    except Exception as exc:
        raise ResolutionError(
            f"Text extraction failed: {exc}",
            category=ErrorCategory.EXTRACTION_FAILED,
        ) from exc


async def resolve_content(
    *,
    content: str | None = None,
    file_url: str | None = None,
    storage: ObjectStore | None = None,
) -> ResolvedContent:
    """Resolve a feature request's input into a :class:`ResolvedContent`.

    Args:
        content: Pasted study material.
        file_url: Public URL or storage path of an uploaded file. Wins over
            ``content`` when non-empty.
        storage: Object-store collaborator; required when ``file_url`` is set.

    Returns:
        ResolvedContent with non-empty ``text``.

    Raises:
        ResolutionError: No usable input, input too long, or file failure.
    """
    if _has_text(file_url):
        if storage is None:
            from .storage import get_storage_client

            try:
                storage = get_storage_client()
            except AtlasError as exc:
                raise ResolutionError(
                    f"Failed to download file from storage: {exc}",
                    category=ErrorCategory.STORAGE_DOWNLOAD_FAILED,
                ) from exc
        text = await resolve_file(file_url, storage=storage)
        return ResolvedContent(text=text, source="file", file_url=file_url)

    if _has_text(content):
        limit = get_config().max_content_chars
        if len(content) > limit:
            raise ResolutionError(
                f"Content is too long. Please limit to {limit:,} characters.",
                category=ErrorCategory.CONTENT_TOO_LONG,
            )
        return ResolvedContent(text=content.strip(), source="text")

    raise ResolutionError(
        "No content provided. Please paste text or select an uploaded file.",
        category=ErrorCategory.CONTENT_MISSING,
    )


async def resolve_chat_context(
    *,
    context: str | None = None,
    file_url: str | None = None,
    storage: ObjectStore | None = None,
) -> str:
    """Build the tutor's study-material context.

    A resolved file comes first, then ``CONTEXT_SEPARATOR``, then the pasted
    context. Either source alone is returned as is; neither gives ``""``
    (the tutor also works without material).
    """
    pasted = context.strip() if _has_text(context) else ""
    if not _has_text(file_url):
        if pasted:
            # Length rules for pasted text still apply.
            return (await resolve_content(content=context)).text
        return ""

    resolved = await resolve_content(file_url=file_url, storage=storage)
    if not pasted:
        return resolved.text
    return f"{resolved.text}{CONTEXT_SEPARATOR}{pasted}"
