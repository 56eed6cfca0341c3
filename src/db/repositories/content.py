"""
Generated Content Repositories.

Lessons, quizzes and flashcards. Rows are tagged to (learner, topic) and,
for roadmap content, to a day through the day_id column.
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.types import FlashcardRecord, LessonRecord, QuizRecord, ensure_utc
from src.db.database import async_session_scope
from src.db.models import FlashcardModel, LessonModel, QuizModel
from src.llm.schemas import GeneratedFlashcards, GeneratedLesson, GeneratedQuiz


def _utc_or_none(value: datetime | None) -> datetime | None:
    return ensure_utc(value) if value is not None else None


# =============================================================================
# Lessons
# =============================================================================


class SqlLessonRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def save_lesson(
        self,
        lesson: GeneratedLesson,
        learner_id: str,
        topic: str,
        difficulty: int,
        day_id: str | None = None,
    ) -> LessonRecord:
        row = LessonModel(
            learner_id=learner_id,
            topic=topic,
            title=lesson.title,
            content=lesson.content,
            key_points=list(lesson.key_points),
            difficulty=difficulty,
            estimated_minutes=lesson.estimated_minutes,
            day_id=day_id,
        )
        async with async_session_scope(self.session_factory) as session:
            session.add(row)
            await session.flush()
            logger.debug("💾 Saved lesson {} for learner {}", row.id, learner_id)
            return self._to_record(row)

    async def find_for_day(self, day_id: str, learner_id: str | None = None) -> LessonRecord | None:
        query = select(LessonModel).where(LessonModel.day_id == day_id)
        if learner_id is not None:
            query = query.where(LessonModel.learner_id == learner_id)
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(query.order_by(LessonModel.created_at).limit(1))
            row = result.scalar_one_or_none()
            return self._to_record(row) if row else None

    async def mark_completed_for_day(self, day_id: str, completed_at: datetime) -> int:
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(
                update(LessonModel)
                .where(LessonModel.day_id == day_id)
                .values(completed=True, completed_at=completed_at)
            )
            return result.rowcount

    async def delete_for_day(self, day_id: str) -> int:
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(delete(LessonModel).where(LessonModel.day_id == day_id))
            return result.rowcount

    @staticmethod
    def _to_record(row: LessonModel) -> LessonRecord:
        return LessonRecord(
            id=row.id,
            learner_id=row.learner_id,
            topic=row.topic,
            title=row.title,
            content=row.content,
            key_points=list(row.key_points or []),
            difficulty=row.difficulty,
            estimated_minutes=row.estimated_minutes,
            day_id=row.day_id,
            completed=bool(row.completed),
            completed_at=_utc_or_none(row.completed_at),
            created_at=_utc_or_none(row.created_at),
        )


# =============================================================================
# Quizzes
# =============================================================================


class SqlQuizRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def save_quiz(
        self,
        quiz: GeneratedQuiz,
        learner_id: str,
        topic: str,
        difficulty: int,
        day_id: str | None = None,
    ) -> QuizRecord:
        row = QuizModel(
            learner_id=learner_id,
            topic=topic,
            title=quiz.title,
            questions=[question.to_wire() for question in quiz.questions],
            difficulty=difficulty,
            total_questions=len(quiz.questions),
            day_id=day_id,
        )
        async with async_session_scope(self.session_factory) as session:
            session.add(row)
            await session.flush()
            logger.debug("💾 Saved quiz {} ({} questions) for learner {}", row.id, row.total_questions, learner_id)
            return self._to_record(row)

    async def find_for_day(self, day_id: str, learner_id: str | None = None) -> QuizRecord | None:
        query = select(QuizModel).where(QuizModel.day_id == day_id)
        if learner_id is not None:
            query = query.where(QuizModel.learner_id == learner_id)
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(query.order_by(QuizModel.created_at).limit(1))
            row = result.scalar_one_or_none()
            return self._to_record(row) if row else None

    async def delete_for_day(self, day_id: str) -> int:
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(delete(QuizModel).where(QuizModel.day_id == day_id))
            return result.rowcount

    @staticmethod
    def _to_record(row: QuizModel) -> QuizRecord:
        return QuizRecord(
            id=row.id,
            learner_id=row.learner_id,
            topic=row.topic,
            title=row.title,
            questions=list(row.questions or []),
            difficulty=row.difficulty,
            total_questions=row.total_questions,
            day_id=row.day_id,
            completed=bool(row.completed),
            score=row.score,
            completed_at=_utc_or_none(row.completed_at),
        )


# =============================================================================
# Flashcards
# =============================================================================


class SqlFlashcardRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def save_flashcards(
        self,
        flashcards: GeneratedFlashcards,
        learner_id: str,
        difficulty: int,
        day_id: str | None = None,
    ) -> list[FlashcardRecord]:
        """Persist one row per card."""
        rows = [
            FlashcardModel(
                learner_id=learner_id,
                topic=flashcards.topic,
                front=card.front,
                back=card.back,
                tags=list(card.tags),
                difficulty=difficulty,
                day_id=day_id,
            )
            for card in flashcards.cards
        ]
        async with async_session_scope(self.session_factory) as session:
            session.add_all(rows)
            await session.flush()
            return [self._to_record(row) for row in rows]

    async def find_for_day(self, day_id: str, learner_id: str | None = None) -> list[FlashcardRecord]:
        query = select(FlashcardModel).where(FlashcardModel.day_id == day_id)
        if learner_id is not None:
            query = query.where(FlashcardModel.learner_id == learner_id)
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(query.order_by(FlashcardModel.created_at))
            return [self._to_record(row) for row in result.scalars()]

    async def delete_for_day(self, day_id: str) -> int:
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(delete(FlashcardModel).where(FlashcardModel.day_id == day_id))
            return result.rowcount

    @staticmethod
    def _to_record(row: FlashcardModel) -> FlashcardRecord:
        return FlashcardRecord(
            id=row.id,
            learner_id=row.learner_id,
            topic=row.topic,
            front=row.front,
            back=row.back,
            tags=list(row.tags or []),
            difficulty=row.difficulty,
            day_id=row.day_id,
        )
