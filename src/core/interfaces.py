"""
Core Interfaces.

Contracts between the agent/roadmap logic and its collaborators. The
SQLAlchemy repositories in src/db/repositories and the LLM adapter in
src/llm implement these; tests substitute in-memory fakes.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from src.core.types import (
    Decision,
    DayStatus,
    FlashcardRecord,
    LearnerMemory,
    LearnerState,
    LessonRecord,
    QuizRecord,
    Roadmap,
    RoadmapDay,
    RoadmapStatus,
)

if TYPE_CHECKING:
    from src.llm.schemas import (
        GeneratedFlashcards,
        GeneratedLesson,
        GeneratedQuiz,
        GeneratedRoadmap,
        LessonContext,
    )


# =============================================================================
# Content Generator
# =============================================================================


class IContentGenerator(Protocol):
    """Produces lesson, quiz, flashcard and roadmap content."""

    async def generate_lesson(
        self,
        topic: str,
        difficulty: int,
        context: LessonContext | None = None,
    ) -> GeneratedLesson: ...

    async def generate_quiz(
        self,
        topic: str,
        difficulty: int,
        question_count: int,
    ) -> GeneratedQuiz: ...

    async def generate_flashcards(
        self,
        topic: str,
        difficulty: int,
        count: int,
    ) -> GeneratedFlashcards: ...

    async def generate_roadmap(
        self,
        topic: str,
        total_days: int,
        daily_minutes: int,
    ) -> GeneratedRoadmap: ...


# =============================================================================
# State Store
# =============================================================================


class ILearnerStateRepository(Protocol):
    async def find_learners_needing_attention(self) -> list[LearnerState]: ...

    async def get_learner_state(self, learner_id: str) -> LearnerState | None: ...

    async def update_mastery_level(self, learner_id: str, topic: str, new_level: float) -> None: ...

    async def record_activity(self, learner_id: str, activity_type: str) -> None: ...

    async def record_quiz_score(self, learner_id: str, score: float) -> None: ...


class IMemoryRepository(Protocol):
    async def get_memory(self, learner_id: str) -> LearnerMemory | None: ...

    async def get_or_create_memory(self, learner_id: str) -> LearnerMemory: ...

    async def update_memory(self, memory: LearnerMemory) -> None: ...

    async def add_performance_record(self, learner_id: str, topic: str, score: float) -> None: ...

    async def reset_memory(self, learner_id: str) -> None: ...


class ILessonRepository(Protocol):
    async def save_lesson(
        self,
        lesson: GeneratedLesson,
        learner_id: str,
        topic: str,
        difficulty: int,
        day_id: str | None = None,
    ) -> LessonRecord: ...

    async def find_for_day(self, day_id: str, learner_id: str | None = None) -> LessonRecord | None: ...

    async def mark_completed_for_day(self, day_id: str, completed_at: datetime) -> int: ...

    async def delete_for_day(self, day_id: str) -> int: ...


class IQuizRepository(Protocol):
    async def save_quiz(
        self,
        quiz: GeneratedQuiz,
        learner_id: str,
        topic: str,
        difficulty: int,
        day_id: str | None = None,
    ) -> QuizRecord: ...

    async def find_for_day(self, day_id: str, learner_id: str | None = None) -> QuizRecord | None: ...

    async def delete_for_day(self, day_id: str) -> int: ...


class IFlashcardRepository(Protocol):
    async def save_flashcards(
        self,
        flashcards: GeneratedFlashcards,
        learner_id: str,
        difficulty: int,
        day_id: str | None = None,
    ) -> list[FlashcardRecord]: ...

    async def find_for_day(self, day_id: str, learner_id: str | None = None) -> list[FlashcardRecord]: ...

    async def delete_for_day(self, day_id: str) -> int: ...


class IRoadmapRepository(Protocol):
    async def create_roadmap(self, roadmap: Roadmap, days: list[RoadmapDay]) -> None: ...

    async def get_roadmap(self, roadmap_id: str) -> Roadmap | None: ...

    async def list_roadmaps(self, owner_id: str) -> list[Roadmap]: ...

    async def get_days(self, roadmap_id: str) -> list[RoadmapDay]: ...

    async def get_day(self, day_id: str) -> RoadmapDay | None: ...

    async def set_day_status(
        self,
        roadmap_id: str,
        day_number: int,
        status: DayStatus,
        only_if: DayStatus | None = None,
    ) -> int: ...

    async def set_current_day(self, roadmap_id: str, current_day: int) -> None: ...

    async def set_status(self, roadmap_id: str, status: RoadmapStatus) -> None: ...

    async def delete_days(self, roadmap_id: str) -> int: ...

    async def delete_roadmap(self, roadmap_id: str) -> int: ...


class IDecisionLogRepository(Protocol):
    async def log_decision(
        self,
        tick_id: str,
        learner_id: str | None,
        decision: Decision | None,
        success: bool,
        error: str | None = None,
        execution_ms: int | None = None,
    ) -> None: ...
