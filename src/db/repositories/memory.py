"""
Agent Memory Repository.

Stores LearnerMemory as JSON documents in agent_memory. Memory is created
lazily by get_or_create_memory(); get_memory() never creates.
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.types import LearnerMemory, LearningPatterns, TopicPerformance, ensure_utc, utcnow
from src.db.database import async_session_scope
from src.db.models import AgentMemory


class SqlMemoryRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_memory(self, learner_id: str) -> LearnerMemory | None:
        async with async_session_scope(self.session_factory) as session:
            row = await self._get_row(session, learner_id)
            return self._to_memory(row) if row else None

    async def get_or_create_memory(self, learner_id: str) -> LearnerMemory:
        async with async_session_scope(self.session_factory) as session:
            row = await self._get_row(session, learner_id)
            if row is not None:
                return self._to_memory(row)

            memory = LearnerMemory(learner_id=learner_id)
            session.add(self._new_row(memory))
            logger.info("🆕 Created memory for learner {}", learner_id)
            return memory

    async def update_memory(self, memory: LearnerMemory) -> None:
        """Upsert the memory document."""
        async with async_session_scope(self.session_factory) as session:
            row = await self._get_row(session, memory.learner_id)
            if row is None:
                session.add(self._new_row(memory))
                return
            row.learning_patterns = memory.learning_patterns.to_dict()
            row.historical_performance = self._performance_to_json(memory)
            row.last_updated = memory.last_updated

    async def add_performance_record(self, learner_id: str, topic: str, score: float) -> None:
        memory = await self.get_or_create_memory(learner_id)
        record = memory.add_performance(topic, score)
        memory.last_updated = utcnow()
        await self.update_memory(memory)
        logger.debug(
            "📊 Performance for {} on '{}': avg {:.1f} over {} attempt(s)",
            learner_id,
            topic,
            record.average_score,
            record.attempts,
        )

    async def reset_memory(self, learner_id: str) -> None:
        await self.update_memory(LearnerMemory(learner_id=learner_id))
        logger.info("🔄 Reset memory for learner {}", learner_id)

    # ========================================
    # Mapping
    # ========================================

    @staticmethod
    async def _get_row(session: AsyncSession, learner_id: str) -> AgentMemory | None:
        result = await session.execute(select(AgentMemory).where(AgentMemory.learner_id == learner_id))
        return result.scalar_one_or_none()

    @staticmethod
    def _performance_to_json(memory: LearnerMemory) -> list[dict]:
        return [
            {"topic": r.topic, "averageScore": r.average_score, "attempts": r.attempts}
            for r in memory.historical_performance
        ]

    def _new_row(self, memory: LearnerMemory) -> AgentMemory:
        return AgentMemory(
            learner_id=memory.learner_id,
            learning_patterns=memory.learning_patterns.to_dict(),
            historical_performance=self._performance_to_json(memory),
            last_updated=memory.last_updated,
        )

    @staticmethod
    def _to_memory(row: AgentMemory) -> LearnerMemory:
        return LearnerMemory(
            learner_id=row.learner_id,
            learning_patterns=LearningPatterns.from_dict(row.learning_patterns),
            historical_performance=[
                TopicPerformance(
                    topic=item["topic"],
                    average_score=float(item.get("averageScore", 0.0)),
                    attempts=int(item.get("attempts", 0)),
                )
                for item in (row.historical_performance or [])
            ],
            last_updated=ensure_utc(row.last_updated),
        )
