"""Result normalization — raw completion text into a typed feature result.

A completion that does not parse is absorbed into the feature's empty
default instead of failing the request: the model call has already been
paid for, and an empty quiz is recoverable where an error mid-flow is not.
The summarizer keeps the raw text as its ``summary``; every other feature
falls back to a structurally empty value.
"""

from __future__ import annotations

import json
import logging

from pydantic import BaseModel

from .models.study import (
    ChatAnswer,
    FeatureResult,
    FlashcardResult,
    QuizResult,
    RevisionResult,
    StudyPlanResult,
    SummaryResult,
    TopicAnalysisResult,
)
from .types import Feature

logger = logging.getLogger(__name__)

RESULT_MODELS: dict[str, type[BaseModel]] = {
    "summary": SummaryResult,
    "quiz": QuizResult,
    "flashcards": FlashcardResult,
    "study_plan": StudyPlanResult,
    "topic_analysis": TopicAnalysisResult,
    "revision": RevisionResult,
    "chat": ChatAnswer,
}


def default_result(feature: Feature, raw_text: str = "") -> FeatureResult:
    """Return the documented fallback value for *feature*."""
    try:
        model = RESULT_MODELS[feature]
    except KeyError:
        raise ValueError(f"Unknown feature '{feature}'") from None
    return model.empty(raw_text)


def normalize(feature: Feature, raw_text: str) -> FeatureResult:
    """Parse *raw_text* into the result model for *feature*.

    Chat answers are plain text and are passed through. For JSON features,
    a top-level object is carried verbatim: values are neither coerced nor
    checked against the item shapes, and missing keys stay missing.
    Anything else yields :func:`default_result`. Never raises on malformed
    model output.

    Raises:
        ValueError: Only for an unknown feature name.
    """
    if feature == "chat":
        return ChatAnswer(answer=raw_text)

    model = RESULT_MODELS.get(feature)
    if model is None:
        raise ValueError(f"Unknown feature '{feature}'")

    try:
        parsed = json.loads(raw_text)
    except (json.JSONDecodeError, TypeError):
        logger.warning("%s: completion is not valid JSON, using default result", feature)
        return default_result(feature, raw_text)

    if not isinstance(parsed, dict):
        logger.warning("%s: completion JSON is %s, not an object", feature, type(parsed).__name__)
        return default_result(feature, raw_text)

    return model.model_construct(_fields_set=set(parsed), **parsed)


def result_to_dict(result: BaseModel) -> dict:
    """Serialise a feature result for a tool response or ``result_data``.

    Only keys the completion actually produced (or the default set) are
    emitted, with their original values.
    """
    return result.model_dump(mode="json", exclude_unset=True, warnings=False)
