"""
Learner State & Activity Repository.

SQLAlchemy implementation of ILearnerStateRepository over
learner_learning_state and learner_activity.
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.types import LearnerState, clamp_mastery, ensure_utc, utcnow
from src.db.database import async_session_scope
from src.db.models import LearnerActivity, LearnerLearningState


class SqlLearnerStateRepository:
    """Learner state backed by the learner_learning_state table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], recent_scores_window: int = 5):
        self.session_factory = session_factory
        self.recent_scores_window = recent_scores_window

    async def find_learners_needing_attention(self) -> list[LearnerState]:
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(
                select(LearnerLearningState)
                .where(LearnerLearningState.needs_attention.is_(True))
                .order_by(LearnerLearningState.last_activity)
            )
            return [self._to_state(row) for row in result.scalars()]

    async def get_learner_state(self, learner_id: str) -> LearnerState | None:
        async with async_session_scope(self.session_factory) as session:
            row = await self._get_row(session, learner_id)
            return self._to_state(row) if row else None

    async def save_learner_state(self, state: LearnerState) -> None:
        """Insert or replace a learner's state row."""
        async with async_session_scope(self.session_factory) as session:
            row = await self._get_row(session, state.learner_id)
            if row is None:
                row = LearnerLearningState(learner_id=state.learner_id)
                session.add(row)
            row.current_topic = state.current_topic
            row.mastery_level = clamp_mastery(state.mastery_level)
            row.last_activity = state.last_activity
            row.recent_scores = list(state.recent_scores[-self.recent_scores_window :])
            row.needs_attention = state.needs_attention

    async def update_mastery_level(self, learner_id: str, topic: str, new_level: float) -> None:
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(
                update(LearnerLearningState)
                .where(
                    LearnerLearningState.learner_id == learner_id,
                    LearnerLearningState.current_topic == topic,
                )
                .values(mastery_level=clamp_mastery(new_level), updated_at=utcnow())
            )
            if result.rowcount == 0:
                logger.warning("No state row for learner {} on topic '{}'", learner_id, topic)

    async def record_activity(self, learner_id: str, activity_type: str) -> None:
        now = utcnow()
        async with async_session_scope(self.session_factory) as session:
            session.add(LearnerActivity(learner_id=learner_id, activity_type=activity_type, created_at=now))
            await session.execute(
                update(LearnerLearningState)
                .where(LearnerLearningState.learner_id == learner_id)
                .values(last_activity=now)
            )

    async def record_quiz_score(self, learner_id: str, score: float) -> None:
        """Append a score to the bounded window and flag the learner."""
        async with async_session_scope(self.session_factory) as session:
            row = await self._get_row(session, learner_id)
            if row is None:
                logger.warning("Cannot record quiz score: no state for learner {}", learner_id)
                return
            scores = [*(row.recent_scores or []), float(score)]
            row.recent_scores = scores[-self.recent_scores_window :]
            row.needs_attention = True

    @staticmethod
    async def _get_row(session: AsyncSession, learner_id: str) -> LearnerLearningState | None:
        result = await session.execute(
            select(LearnerLearningState).where(LearnerLearningState.learner_id == learner_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _to_state(row: LearnerLearningState) -> LearnerState:
        return LearnerState(
            learner_id=row.learner_id,
            current_topic=row.current_topic,
            mastery_level=float(row.mastery_level or 0.0),
            last_activity=ensure_utc(row.last_activity),
            recent_scores=[float(s) for s in (row.recent_scores or [])],
            needs_attention=bool(row.needs_attention),
        )
