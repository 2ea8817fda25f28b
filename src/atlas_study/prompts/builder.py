"""Message builders — deterministic ``[system, (history...), user]`` sequences."""

from __future__ import annotations

from collections.abc import Iterable

from ..models.content import ChatMessage
from ..types import Feature
from .study import (
    CHAT_SYSTEM,
    CHAT_SYSTEM_WITH_CONTEXT,
    FLASHCARD_SYSTEM,
    QUIZ_SYSTEM,
    REVISION_SYSTEM,
    STUDY_PLAN_SYSTEM,
    SUMMARY_SYSTEM,
    TOPIC_ANALYSIS_SYSTEM,
    USER_INSTRUCTIONS,
)

DEFAULT_QUIZ_COUNT = 5
DEFAULT_FLASHCARD_COUNT = 10


def _two_turn(system: str, feature: str, text: str) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=system),
        ChatMessage(role="user", content=f"{USER_INSTRUCTIONS[feature]}:\n\n{text}"),
    ]


def build_summary_prompt(text: str) -> list[ChatMessage]:
    return _two_turn(SUMMARY_SYSTEM, "summary", text)


def build_quiz_prompt(text: str, count: int = DEFAULT_QUIZ_COUNT) -> list[ChatMessage]:
    return _two_turn(QUIZ_SYSTEM.format(count=count), "quiz", text)


def build_flashcard_prompt(text: str, count: int = DEFAULT_FLASHCARD_COUNT) -> list[ChatMessage]:
    return _two_turn(FLASHCARD_SYSTEM.format(count=count), "flashcards", text)


def build_study_plan_prompt(text: str) -> list[ChatMessage]:
    return _two_turn(STUDY_PLAN_SYSTEM, "study_plan", text)


def build_topic_prompt(text: str) -> list[ChatMessage]:
    return _two_turn(TOPIC_ANALYSIS_SYSTEM, "topic_analysis", text)


def build_revision_prompt(text: str) -> list[ChatMessage]:
    return _two_turn(REVISION_SYSTEM, "revision", text)


def build_chat_prompt(
    context: str,
    question: str,
    history: Iterable[ChatMessage | dict] = (),
) -> list[ChatMessage]:
    """Build the tutor conversation.

    Prior turns are carried forward verbatim and in order; only ``user``
    and ``assistant`` roles are accepted there.

    Raises:
        ValueError: If a history turn has any other role.
    """
    system = CHAT_SYSTEM_WITH_CONTEXT.format(context=context) if context else CHAT_SYSTEM
    messages = [ChatMessage(role="system", content=system)]
    for turn in history:
        msg = turn if isinstance(turn, ChatMessage) else ChatMessage.model_validate(turn)
        if msg.role not in ("user", "assistant"):
            raise ValueError(f"Chat history may only contain user/assistant turns, got '{msg.role}'")
        messages.append(msg)
    messages.append(ChatMessage(role="user", content=question))
    return messages


def build_messages(
    feature: Feature,
    text: str,
    *,
    count: int | None = None,
    question: str | None = None,
    history: Iterable[ChatMessage | dict] = (),
) -> list[ChatMessage]:
    """Dispatch to the feature's builder.

    Args:
        feature: Which study feature the prompt is for.
        text: Resolved study material (chat: the context, may be empty).
        count: Quiz question / flashcard count; feature default when None.
        question: The chat question (chat only, required there).
        history: Prior chat turns (chat only).

    Raises:
        ValueError: Unknown feature, or chat without a question.
    """
    if feature == "summary":
        return build_summary_prompt(text)
    if feature == "quiz":
        return build_quiz_prompt(text, count or DEFAULT_QUIZ_COUNT)
    if feature == "flashcards":
        return build_flashcard_prompt(text, count or DEFAULT_FLASHCARD_COUNT)
    if feature == "study_plan":
        return build_study_plan_prompt(text)
    if feature == "topic_analysis":
        return build_topic_prompt(text)
    if feature == "revision":
        return build_revision_prompt(text)
    if feature == "chat":
        if not question:
            raise ValueError("Question is required.")
        return build_chat_prompt(text, question, history)
    raise ValueError(f"Unknown feature '{feature}'")
