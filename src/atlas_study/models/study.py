"""Study feature models — one result variant per feature.

Each model mirrors the JSON contract embedded in the feature's system prompt
and exposes ``empty()``, the value used when the completion does not parse.
Parsed completions are built with ``model_construct``: the completion is
trusted, not re-verified, so values and extra keys reach the caller as the
model wrote them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ResultModel(BaseModel):
    """Base for completion-derived records — tolerant of extra fields."""

    model_config = ConfigDict(extra="allow")


class SummaryResult(_ResultModel):
    """Output schema for the summarizer."""

    summary: str = ""
    key_points: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)

    @classmethod
    def empty(cls, raw_text: str = "") -> SummaryResult:
        # The raw completion is kept as the summary itself.
        return cls(summary=raw_text, key_points=[], topics=[])


class QuizQuestion(_ResultModel):
    """A single multiple-choice question."""

    question: str
    options: list[str] = Field(default_factory=list, description="Four options, e.g. 'A) ...'")
    correct_answer: str = ""
    explanation: str | None = None


class QuizResult(_ResultModel):
    """Output schema for the quiz generator."""

    questions: list[QuizQuestion] = Field(default_factory=list)

    @classmethod
    def empty(cls, raw_text: str = "") -> QuizResult:
        return cls(questions=[])


class Flashcard(_ResultModel):
    question: str
    answer: str


class FlashcardResult(_ResultModel):
    """Output schema for the flashcard generator."""

    flashcards: list[Flashcard] = Field(default_factory=list)

    @classmethod
    def empty(cls, raw_text: str = "") -> FlashcardResult:
        return cls(flashcards=[])


class StudyPlanTopic(_ResultModel):
    topic: str
    priority: str = Field(default="medium", description="high | medium | low")
    estimated_minutes: int | float = 0
    resources: list[str] = Field(default_factory=list)


class StudyPlanResult(_ResultModel):
    """Output schema for the study planner."""

    title: str = "Study Plan"
    topics: list[StudyPlanTopic] = Field(default_factory=list)
    estimated_hours: int | float = 0

    @classmethod
    def empty(cls, raw_text: str = "") -> StudyPlanResult:
        return cls(title="Study Plan", topics=[], estimated_hours=0)


class DetectedTopic(_ResultModel):
    topic: str
    frequency: int | float = 0
    importance: str = Field(default="medium", description="high | medium | low")


class TopicAnalysisResult(_ResultModel):
    """Output schema for exam-topic analysis."""

    detected_topics: list[DetectedTopic] = Field(default_factory=list)
    frequency_map: dict[str, int | float] = Field(default_factory=dict)

    @classmethod
    def empty(cls, raw_text: str = "") -> TopicAnalysisResult:
        return cls(detected_topics=[], frequency_map={})


class RevisionSection(_ResultModel):
    heading: str
    key_facts: list[str] = Field(default_factory=list)
    tips: str = ""


class RevisionResult(_ResultModel):
    """Output schema for the revision guide."""

    revision_title: str = "Revision Guide"
    sections: list[RevisionSection] = Field(default_factory=list)

    @classmethod
    def empty(cls, raw_text: str = "") -> RevisionResult:
        return cls(revision_title="Revision Guide", sections=[])


class ChatAnswer(BaseModel):
    """Plain-text tutor answer — the completion is passed through untouched."""

    answer: str = ""

    @classmethod
    def empty(cls, raw_text: str = "") -> ChatAnswer:
        return cls(answer=raw_text)


FeatureResult = (
    SummaryResult
    | QuizResult
    | FlashcardResult
    | StudyPlanResult
    | TopicAnalysisResult
    | RevisionResult
    | ChatAnswer
)
