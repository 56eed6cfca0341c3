"""
LLM Content Generator.

Implements the content-generator boundary on top of a chat backend:

    prompt -> backend.complete() (bounded by a timeout)
           -> parse_generated() (JSON extraction + pydantic validation)

Lesson, quiz and flashcard generation never raise for generation or
validation failures: they log and substitute deterministic fallback
content, so callers always receive a well-formed object. Roadmap
generation raises RoadmapGenerationError instead, because a broken
curriculum outline cannot be patched.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

from src.core.exceptions import ContentValidationError, GenerationError, RoadmapGenerationError
from src.llm.backends import IChatBackend
from src.llm.prompts import (
    ERROR_ANALYSIS_SYSTEM_PROMPT,
    get_error_analysis_user_prompt,
    get_flashcard_system_prompt,
    get_flashcard_user_prompt,
    get_lesson_system_prompt,
    get_lesson_user_prompt,
    get_quiz_system_prompt,
    get_quiz_user_prompt,
    get_roadmap_system_prompt,
    get_roadmap_user_prompt,
)
from src.llm.schemas import (
    Flashcard,
    GeneratedFlashcards,
    GeneratedLesson,
    GeneratedQuiz,
    GeneratedRoadmap,
    LessonContext,
    QuizQuestion,
    parse_generated,
    parse_recommendations,
)

T = TypeVar("T")

DEFAULT_RECOMMENDATIONS = [
    "Review the fundamental concepts",
    "Practice with more examples",
    "Focus on understanding rather than memorization",
]


# =============================================================================
# Fallback Content
# =============================================================================


def fallback_lesson(topic: str) -> GeneratedLesson:
    """Placeholder lesson used when generation fails."""
    return GeneratedLesson(
        title=f"Introduction to {topic}",
        content=(
            f"# {topic}\n\n"
            "AI-generated content is temporarily unavailable, so this is a short starter lesson.\n\n"
            "## Overview\n\n"
            f"This topic covers important concepts in {topic}.\n\n"
            "## Key Concepts\n\n"
            "- Fundamental principles\n"
            "- Practical applications\n"
            "- Best practices\n\n"
            "## Summary\n\n"
            "Revisit this day later for a full lesson."
        ),
        key_points=[
            "Understand the basics",
            "Apply concepts practically",
            "Follow best practices",
        ],
        estimated_minutes=10,
    )


def fallback_quiz(topic: str) -> GeneratedQuiz:
    """Single-question placeholder quiz used when generation fails."""
    return GeneratedQuiz(
        title=f"{topic} Quiz",
        questions=[
            QuizQuestion(
                id="q1",
                question=f"Which of these is the best first step when learning {topic}?",
                options=[
                    "Understand the core concepts",
                    "Memorize edge cases first",
                    "Skip the fundamentals",
                    "Avoid practice exercises",
                ],
                correct_answer=0,
                explanation="Solid fundamentals make every later topic easier.",
            )
        ],
    )


def fallback_flashcards(topic: str) -> GeneratedFlashcards:
    """Minimal placeholder deck used when generation fails."""
    return GeneratedFlashcards(
        topic=topic,
        cards=[
            Flashcard(
                front=f"What is {topic}?",
                back=f"Write your own one-sentence definition of {topic} after today's lesson.",
                tags=["review"],
            ),
            Flashcard(
                front=f"Name one practical use of {topic}.",
                back="Connect the concept to a problem you have seen before.",
                tags=["application"],
            ),
        ],
    )


# =============================================================================
# Generator
# =============================================================================


class LLMContentGenerator:
    """Content generator backed by a chat-completion model."""

    def __init__(self, backend: IChatBackend, timeout_seconds: float = 45.0):
        self.backend = backend
        self.timeout_seconds = timeout_seconds

    async def close(self) -> None:
        await self.backend.close()

    async def _complete(
        self,
        kind: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        start = time.perf_counter()
        try:
            raw = await asyncio.wait_for(
                self.backend.complete(
                    system_prompt,
                    user_prompt,
                    temperature=temperature,
                    max_tokens=max_tokens,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise GenerationError(
                f"{kind} generation timed out after {self.timeout_seconds}s", kind=kind
            ) from e
        logger.debug("{} generation completed in {:.0f}ms", kind, (time.perf_counter() - start) * 1000)
        return raw

    async def _with_fallback(
        self,
        kind: str,
        topic: str,
        produce: Callable[[], Awaitable[T]],
        fallback: Callable[[str], T],
    ) -> T:
        try:
            return await produce()
        except ContentValidationError as e:
            logger.warning("Invalid {} for '{}', using fallback: {}", kind, topic, e)
        except GenerationError as e:
            logger.warning("{} generation failed for '{}', using fallback: {}", kind, topic, e)
        return fallback(topic)

    # ------------------------------------------------------------------
    # Lesson
    # ------------------------------------------------------------------

    async def generate_lesson(
        self,
        topic: str,
        difficulty: int,
        context: LessonContext | None = None,
    ) -> GeneratedLesson:
        logger.info("Generating lesson: '{}' (difficulty {})", topic, difficulty)

        async def produce() -> GeneratedLesson:
            raw = await self._complete(
                "lesson",
                get_lesson_system_prompt(difficulty),
                get_lesson_user_prompt(topic, context),
                temperature=0.7,
                max_tokens=2000,
            )
            return parse_generated(raw, GeneratedLesson, "lesson")

        return await self._with_fallback("lesson", topic, produce, fallback_lesson)

    # ------------------------------------------------------------------
    # Quiz
    # ------------------------------------------------------------------

    async def generate_quiz(self, topic: str, difficulty: int, question_count: int) -> GeneratedQuiz:
        logger.info("Generating quiz: '{}' ({} questions, difficulty {})", topic, question_count, difficulty)

        async def produce() -> GeneratedQuiz:
            raw = await self._complete(
                "quiz",
                get_quiz_system_prompt(difficulty, question_count),
                get_quiz_user_prompt(topic, difficulty, question_count),
                temperature=0.8,
                max_tokens=1500 + 200 * question_count,
            )
            return parse_generated(raw, GeneratedQuiz, "quiz")

        return await self._with_fallback("quiz", topic, produce, fallback_quiz)

    # ------------------------------------------------------------------
    # Flashcards
    # ------------------------------------------------------------------

    async def generate_flashcards(self, topic: str, difficulty: int, count: int) -> GeneratedFlashcards:
        logger.info("Generating {} flashcards: '{}' (difficulty {})", count, topic, difficulty)

        async def produce() -> GeneratedFlashcards:
            raw = await self._complete(
                "flashcards",
                get_flashcard_system_prompt(difficulty, count),
                get_flashcard_user_prompt(topic, count),
                temperature=0.7,
                max_tokens=2000,
            )
            deck = parse_generated(raw, GeneratedFlashcards, "flashcards")
            if not deck.topic:
                deck.topic = topic
            return deck

        return await self._with_fallback("flashcards", topic, produce, fallback_flashcards)

    # ------------------------------------------------------------------
    # Roadmap
    # ------------------------------------------------------------------

    async def generate_roadmap(self, topic: str, total_days: int, daily_minutes: int) -> GeneratedRoadmap:
        logger.info("Generating roadmap: '{}' ({} days, {} min/day)", topic, total_days, daily_minutes)

        try:
            raw = await self._complete(
                "roadmap",
                get_roadmap_system_prompt(),
                get_roadmap_user_prompt(topic, total_days, daily_minutes),
                temperature=0.7,
                max_tokens=max(4000, 150 * total_days),
            )
            roadmap = parse_generated(raw, GeneratedRoadmap, "roadmap")
            roadmap.check_day_count(total_days)
        except GenerationError as e:
            logger.error("Roadmap generation failed for '{}': {}", topic, e)
            raise RoadmapGenerationError(f"Could not generate a roadmap for '{topic}': {e}") from e

        logger.info("Roadmap generated with {} days", len(roadmap.days))
        return roadmap

    # ------------------------------------------------------------------
    # Error analysis
    # ------------------------------------------------------------------

    async def analyze_errors(self, errors: list[str], topic: str) -> list[str]:
        """Turn a learner's mistakes into 3-5 study recommendations."""
        if not errors:
            return list(DEFAULT_RECOMMENDATIONS)
        try:
            raw = await self._complete(
                "recommendations",
                ERROR_ANALYSIS_SYSTEM_PROMPT,
                get_error_analysis_user_prompt(errors, topic),
                temperature=0.6,
                max_tokens=500,
            )
            return parse_recommendations(raw)[:5]
        except GenerationError as e:
            logger.warning("Error analysis failed for '{}', using defaults: {}", topic, e)
            return list(DEFAULT_RECOMMENDATIONS)
