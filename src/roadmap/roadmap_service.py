"""
Roadmap Progression Service.

Day-by-day curriculum state machine:

    Day:      locked -> available -> completed
    Roadmap:  active -> completed (once the last day is completed)

- create_roadmap(): one generator call for the full outline; day 1 is
  available, all others locked. Generator failure creates nothing.
- generate_day_lesson(): just-in-time lesson/quiz/flashcards for a day,
  generated concurrently and memoized per (day, learner).
- complete_day(): completes a day, unlocks the next and advances
  current_day. Serialised per roadmap.
- delete_roadmap(): removes day content, days, then the roadmap.
"""

from __future__ import annotations

import asyncio
import uuid

from loguru import logger

from src.core.exceptions import (
    ContentValidationError,
    DayNotFoundError,
    InvalidDayTransitionError,
    RoadmapGenerationError,
    RoadmapNotFoundError,
)
from src.core.interfaces import (
    IContentGenerator,
    IFlashcardRepository,
    ILessonRepository,
    IQuizRepository,
    IRoadmapRepository,
)
from src.core.locks import KeyedLock
from src.core.types import (
    DayBundle,
    DayCompletion,
    DayStatus,
    LessonRecord,
    Roadmap,
    RoadmapDay,
    RoadmapDetails,
    RoadmapStatus,
    RoadmapSummary,
    utcnow,
)
from src.llm.content_generator import fallback_lesson
from src.roadmap.progression import plan_for_day


class RoadmapService:
    """Creates roadmaps and moves learners through their days."""

    def __init__(
        self,
        generator: IContentGenerator,
        roadmap_repo: IRoadmapRepository,
        lesson_repo: ILessonRepository,
        quiz_repo: IQuizRepository,
        flashcard_repo: IFlashcardRepository,
    ):
        self.generator = generator
        self.roadmap_repo = roadmap_repo
        self.lesson_repo = lesson_repo
        self.quiz_repo = quiz_repo
        self.flashcard_repo = flashcard_repo

        self._roadmap_locks = KeyedLock()
        self._generation_locks = KeyedLock()

    # ========================================
    # Creation
    # ========================================

    async def create_roadmap(
        self,
        owner_id: str,
        topic: str,
        total_days: int,
        daily_minutes: int,
    ) -> str:
        """
        Generate an outline and persist the roadmap with its days.

        Returns:
            The new roadmap id

        Raises:
            ValueError: If total_days or daily_minutes is not positive
            RoadmapGenerationError: If the outline cannot be produced
        """
        if total_days < 1:
            raise ValueError("total_days must be at least 1")
        if daily_minutes < 1:
            raise ValueError("daily_minutes must be positive")

        outline = await self.generator.generate_roadmap(topic, total_days, daily_minutes)
        try:
            outline.check_day_count(total_days)
        except ContentValidationError as e:
            raise RoadmapGenerationError(f"Could not generate a roadmap for '{topic}': {e}") from e

        roadmap = Roadmap(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            topic=topic,
            total_days=total_days,
            daily_minutes=daily_minutes,
            status=RoadmapStatus.ACTIVE,
            current_day=1,
            created_at=utcnow(),
        )
        days = [
            RoadmapDay(
                id=str(uuid.uuid4()),
                roadmap_id=roadmap.id,
                day_number=entry.day_number,
                topic=entry.topic,
                status=DayStatus.AVAILABLE if entry.day_number == 1 else DayStatus.LOCKED,
                description=entry.description,
                objectives=list(entry.objectives),
            )
            for entry in sorted(outline.days, key=lambda d: d.day_number)
        ]

        await self.roadmap_repo.create_roadmap(roadmap, days)
        logger.info("Roadmap '{}' created for {} ({} days)", topic, owner_id, total_days)
        return roadmap.id

    # ========================================
    # Queries
    # ========================================

    async def get_user_roadmaps(self, owner_id: str) -> list[RoadmapSummary]:
        """All roadmaps of an owner, oldest first, with progress."""
        roadmaps = await self.roadmap_repo.list_roadmaps(owner_id)
        day_lists = await asyncio.gather(*(self.roadmap_repo.get_days(r.id) for r in roadmaps))

        summaries = []
        for roadmap, days in zip(roadmaps, day_lists):
            completed = sum(1 for day in days if day.status == DayStatus.COMPLETED)
            progress = round(completed / roadmap.total_days * 100) if roadmap.total_days else 0
            summaries.append(RoadmapSummary(roadmap=roadmap, completed_days=completed, progress=progress))
        return summaries

    async def get_roadmap_details(self, roadmap_id: str) -> RoadmapDetails | None:
        roadmap = await self.roadmap_repo.get_roadmap(roadmap_id)
        if roadmap is None:
            return None
        return RoadmapDetails(roadmap=roadmap, days=await self.roadmap_repo.get_days(roadmap_id))

    async def get_active_roadmap(self, owner_id: str) -> Roadmap | None:
        for roadmap in await self.roadmap_repo.list_roadmaps(owner_id):
            if roadmap.status == RoadmapStatus.ACTIVE:
                return roadmap
        return None

    async def get_day_with_lesson(self, day_id: str, learner_id: str | None = None) -> DayBundle | None:
        """A day with its roadmap and any generated content; None if the day does not exist."""
        day = await self.roadmap_repo.get_day(day_id)
        if day is None:
            return None

        roadmap, lesson, quiz, flashcards = await asyncio.gather(
            self.roadmap_repo.get_roadmap(day.roadmap_id),
            self.lesson_repo.find_for_day(day_id, learner_id),
            self.quiz_repo.find_for_day(day_id, learner_id),
            self.flashcard_repo.find_for_day(day_id, learner_id),
        )
        if roadmap is None:
            return None
        return DayBundle(day=day, roadmap=roadmap, lesson=lesson, quiz=quiz, flashcards=flashcards)

    # ========================================
    # Just-in-time Content
    # ========================================

    async def generate_day_lesson(self, day_id: str, learner_id: str) -> LessonRecord:
        """
        Materialize a day's lesson, quiz and flashcards for a learner.

        Idempotent: if a lesson already exists for (day, learner) it is
        returned without calling the generator.

        Raises:
            DayNotFoundError: If the day does not exist
        """
        async with self._generation_locks.hold((day_id, learner_id)):
            existing = await self.lesson_repo.find_for_day(day_id, learner_id)
            if existing is not None:
                logger.debug("Lesson for day {} already generated for {}", day_id, learner_id)
                return existing

            day = await self.roadmap_repo.get_day(day_id)
            if day is None:
                raise DayNotFoundError(day_id)

            plan = plan_for_day(day.day_number)
            logger.info(
                "Generating day {} '{}' (difficulty {}, {} questions, {} flashcards)",
                day.day_number,
                day.topic,
                plan.difficulty,
                plan.question_count,
                plan.flashcard_count,
            )

            try:
                lesson, quiz, flashcards = await asyncio.gather(
                    self.generator.generate_lesson(day.topic, plan.difficulty),
                    self.generator.generate_quiz(day.topic, plan.difficulty, plan.question_count),
                    self.generator.generate_flashcards(day.topic, plan.difficulty, plan.flashcard_count),
                )
            except Exception as e:
                logger.warning("Day {} generation failed, saving fallback lesson: {}", day.day_number, e)
                return await self.lesson_repo.save_lesson(
                    fallback_lesson(day.topic), learner_id, day.topic, plan.difficulty, day_id=day_id
                )

            # The lesson is saved last; its presence means the bundle is complete.
            if await self.quiz_repo.find_for_day(day_id, learner_id) is None:
                await self.quiz_repo.save_quiz(quiz, learner_id, day.topic, plan.difficulty, day_id=day_id)
            if not await self.flashcard_repo.find_for_day(day_id, learner_id):
                await self.flashcard_repo.save_flashcards(flashcards, learner_id, plan.difficulty, day_id=day_id)
            return await self.lesson_repo.save_lesson(lesson, learner_id, day.topic, plan.difficulty, day_id=day_id)

    # ========================================
    # Progression
    # ========================================

    async def complete_day(self, roadmap_id: str, day_id: str) -> DayCompletion:
        """
        Complete a day and unlock the next one.

        Raises:
            RoadmapNotFoundError: If the roadmap does not exist
            DayNotFoundError: If the day does not exist in this roadmap
            InvalidDayTransitionError: If the day is still locked
        """
        async with self._roadmap_locks.hold(roadmap_id):
            roadmap = await self.roadmap_repo.get_roadmap(roadmap_id)
            if roadmap is None:
                raise RoadmapNotFoundError(roadmap_id)

            day = await self.roadmap_repo.get_day(day_id)
            if day is None or day.roadmap_id != roadmap_id:
                raise DayNotFoundError(day_id)
            if day.status == DayStatus.LOCKED:
                raise InvalidDayTransitionError(day.id, day.status.value, DayStatus.COMPLETED.value)

            await self.lesson_repo.mark_completed_for_day(day_id, utcnow())
            return await self._unlock_next_day(roadmap, day.day_number)

    async def _unlock_next_day(self, roadmap: Roadmap, day_number: int) -> DayCompletion:
        await self.roadmap_repo.set_day_status(roadmap.id, day_number, DayStatus.COMPLETED)

        next_day = day_number + 1
        unlocked = await self.roadmap_repo.set_day_status(
            roadmap.id, next_day, DayStatus.AVAILABLE, only_if=DayStatus.LOCKED
        )

        # current_day never moves backwards
        current_day = max(roadmap.current_day, next_day)
        if current_day != roadmap.current_day:
            await self.roadmap_repo.set_current_day(roadmap.id, current_day)

        roadmap_completed = current_day > roadmap.total_days
        if roadmap_completed and roadmap.status == RoadmapStatus.ACTIVE:
            await self.roadmap_repo.set_status(roadmap.id, RoadmapStatus.COMPLETED)
            logger.info("🎉 Roadmap {} completed", roadmap.id)

        logger.info(
            "Day {} completed on roadmap {} (next day {}, unlocked: {})",
            day_number,
            roadmap.id,
            next_day,
            bool(unlocked),
        )
        return DayCompletion(
            completed_day=day_number,
            unlocked_day=next_day if next_day <= roadmap.total_days else None,
            roadmap_completed=roadmap_completed,
        )

    # ========================================
    # Deletion
    # ========================================

    async def delete_roadmap(self, roadmap_id: str) -> None:
        """
        Delete a roadmap with its days and all day content.

        Raises:
            RoadmapNotFoundError: If the roadmap does not exist
        """
        async with self._roadmap_locks.hold(roadmap_id):
            if await self.roadmap_repo.get_roadmap(roadmap_id) is None:
                raise RoadmapNotFoundError(roadmap_id)

            days = await self.roadmap_repo.get_days(roadmap_id)
            for day in days:
                await self.lesson_repo.delete_for_day(day.id)
                await self.flashcard_repo.delete_for_day(day.id)
                await self.quiz_repo.delete_for_day(day.id)

            await self.roadmap_repo.delete_days(roadmap_id)
            await self.roadmap_repo.delete_roadmap(roadmap_id)
            logger.info("🗑️  Deleted roadmap {} ({} days)", roadmap_id, len(days))
