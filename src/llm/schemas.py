"""
Validated Generator Output.

The content generator answers with best-effort JSON. Everything that comes
back from a model passes through this module before the rest of the system
sees it:

1. parse_json_object(): strip markdown fences and surrounding chatter,
   then json.loads the outermost object
2. validate_payload(): pydantic validation into one of the models below

Both steps raise ContentValidationError, so callers only ever handle a
typed validation error or a fully validated value. Wire keys are camelCase
(keyPoints, correctAnswer, dayNumber); Python attributes are snake_case.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.core.exceptions import ContentValidationError

QUIZ_OPTION_COUNT = 4

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


class WireModel(BaseModel):
    """Base for generator payloads: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# =============================================================================
# Lesson
# =============================================================================


@dataclass
class LessonContext:
    """Optional learner context injected into lesson prompts."""

    previous_errors: list[str] = field(default_factory=list)
    mastery_level: float | None = None


class GeneratedLesson(WireModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    key_points: list[str] = Field(min_length=1)
    estimated_minutes: int = Field(gt=0)


# =============================================================================
# Quiz
# =============================================================================


class QuizQuestion(WireModel):
    id: str = ""
    question: str = Field(min_length=1)
    options: list[str]
    correct_answer: int = Field(ge=0, le=QUIZ_OPTION_COUNT - 1)
    explanation: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        if isinstance(value, int | float):
            return str(value)
        return value

    @field_validator("options")
    @classmethod
    def _exactly_four_options(cls, value: list[str]) -> list[str]:
        if len(value) != QUIZ_OPTION_COUNT:
            raise ValueError(f"question must have exactly {QUIZ_OPTION_COUNT} options, got {len(value)}")
        return value


class GeneratedQuiz(WireModel):
    title: str = Field(min_length=1)
    questions: list[QuizQuestion] = Field(min_length=1)

    @model_validator(mode="after")
    def _number_questions(self) -> GeneratedQuiz:
        for index, question in enumerate(self.questions, start=1):
            if not question.id:
                question.id = f"q{index}"
        return self


# =============================================================================
# Flashcards
# =============================================================================


class Flashcard(WireModel):
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)


class GeneratedFlashcards(WireModel):
    topic: str = ""
    cards: list[Flashcard] = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _unwrap(cls, data: Any) -> Any:
        # Models often answer {"flashcards": {"topic": ..., "cards": [...]}}
        if isinstance(data, dict) and isinstance(data.get("flashcards"), dict):
            return data["flashcards"]
        return data


# =============================================================================
# Roadmap
# =============================================================================


class RoadmapDayOutline(WireModel):
    day_number: int = Field(ge=1)
    topic: str = Field(min_length=1)
    description: str = Field(min_length=1)
    objectives: list[str] = Field(default_factory=list)


class GeneratedRoadmap(WireModel):
    topic: str = Field(min_length=1)
    total_days: int = Field(ge=1)
    days: list[RoadmapDayOutline] = Field(min_length=1)

    def check_day_count(self, expected_days: int) -> None:
        """Require exactly one outline entry for each day 1..expected_days."""
        problems = []
        if len(self.days) != expected_days:
            problems.append(f"expected {expected_days} days, got {len(self.days)}")
        numbers = sorted(day.day_number for day in self.days)
        if numbers != list(range(1, len(self.days) + 1)):
            problems.append("day numbers must run 1..totalDays without gaps or repeats")
        if problems:
            raise ContentValidationError("roadmap", problems)


# =============================================================================
# Parsing / Validation
# =============================================================================

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_json_object(raw: str, kind: str) -> dict[str, Any]:
    """Extract the outermost JSON object from a model response."""
    cleaned = _FENCE_PATTERN.sub("", raw or "").replace("```", "").strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end <= start:
        raise ContentValidationError(kind, ["response contains no JSON object"])

    try:
        data = json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError as e:
        raise ContentValidationError(kind, [f"invalid JSON: {e.msg}"]) from e

    if not isinstance(data, dict):
        raise ContentValidationError(kind, ["top-level JSON value is not an object"])
    return data


def validate_payload(model: type[ModelT], payload: Any, kind: str) -> ModelT:
    """Validate a parsed payload into `model`, raising ContentValidationError."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(part) for part in error['loc']) or kind}: {error['msg']}"
            for error in e.errors()
        ]
        raise ContentValidationError(kind, problems) from e


def parse_generated(raw: str, model: type[ModelT], kind: str) -> ModelT:
    """parse_json_object + validate_payload in one step."""
    return validate_payload(model, parse_json_object(raw, kind), kind)


def parse_recommendations(raw: str) -> list[str]:
    """Parse a JSON array of recommendation strings."""
    cleaned = _FENCE_PATTERN.sub("", raw or "").replace("```", "").strip()
    start = cleaned.find("[")
    end = cleaned.rfind("]")
    if start == -1 or end <= start:
        raise ContentValidationError("recommendations", ["response contains no JSON array"])
    try:
        data = json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError as e:
        raise ContentValidationError("recommendations", [f"invalid JSON: {e.msg}"]) from e
    items = [str(item).strip() for item in data if str(item).strip()] if isinstance(data, list) else []
    if not items:
        raise ContentValidationError("recommendations", ["no recommendations returned"])
    return items
