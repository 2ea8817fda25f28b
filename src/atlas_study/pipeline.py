"""Feature pipeline — resolve, prompt, complete, normalize, persist.

Each call is independent and stateless. Collaborators (completion client,
object store, session store) are passed in; the tool layer supplies the
process-wide instances.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .client import CompletionClient, temperature_for
from .models.content import ChatMessage, ResolvedContent
from .models.study import FeatureResult
from .normalize import normalize, result_to_dict
from .persistence import SupabaseStore, build_result_data, session_title
from .prompts.builder import build_messages
from .resolver import ObjectStore, resolve_chat_context, resolve_content
from .types import Feature, SessionContentType

logger = logging.getLogger(__name__)

SESSION_CONTENT_TYPES: dict[str, SessionContentType] = {
    "summary": "summary",
    "quiz": "quiz",
    "flashcards": "flashcards",
    "study_plan": "study_plan",
    "topic_analysis": "exam_analysis",
    "revision": "revision",
}
_TITLE_KEYS = {"study_plan": "title", "revision": "revision_title"}


def _preferred_title(feature: Feature, payload: dict) -> str | None:
    """Study plans and revision guides are titled by the model's own title."""
    title = payload.get(_TITLE_KEYS.get(feature, ""))
    return title if isinstance(title, str) else None


async def generate(
    feature: Feature,
    resolved: ResolvedContent,
    *,
    completion: CompletionClient,
    count: int | None = None,
) -> FeatureResult:
    """Prompt the model for *feature* over already-resolved content."""
    messages = build_messages(feature, resolved.text, count=count)
    raw = await completion.complete(messages, temperature=temperature_for(feature))
    return normalize(feature, raw)


async def run_feature(
    feature: Feature,
    *,
    completion: CompletionClient,
    content: str | None = None,
    file_url: str | None = None,
    count: int | None = None,
    user_id: str | None = None,
    storage: ObjectStore | None = None,
    store: SupabaseStore | None = None,
) -> dict:
    """Run one study feature end to end.

    Resolution and completion errors propagate unchanged; malformed model
    output degrades to the feature default; persistence failures only cost
    the ``session_id``.

    Returns:
        The serialised feature result plus ``session_id`` (None when the
        session was not persisted).
    """
    resolved = await resolve_content(content=content, file_url=file_url, storage=storage)
    result = await generate(feature, resolved, completion=completion, count=count)
    payload = result_to_dict(result)

    session_id = None
    if store is not None and user_id:
        session_id = await store.save_session(
            user_id,
            title=session_title(resolved.text, _preferred_title(feature, payload)),
            content_type=SESSION_CONTENT_TYPES[feature],
            result_data=build_result_data(payload, resolved, keep_original=feature == "summary"),
        )
    return {**payload, "session_id": session_id}


async def run_chat(
    question: str,
    *,
    completion: CompletionClient,
    context: str | None = None,
    file_url: str | None = None,
    history: Iterable[ChatMessage | dict] = (),
    storage: ObjectStore | None = None,
) -> dict:
    """Answer one tutor question, optionally grounded in study material.

    Raises:
        ValueError: If the question is empty.
    """
    if not question or not question.strip():
        raise ValueError("Question is required.")
    material = await resolve_chat_context(context=context, file_url=file_url, storage=storage)
    messages = build_messages("chat", material, question=question, history=history)
    raw = await completion.complete(messages, temperature=temperature_for("chat"))
    return result_to_dict(normalize("chat", raw))
