"""Decision log repository (agent_logs table)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.types import Decision, describe_decision
from src.db.database import async_session_scope
from src.db.models import AgentLog


class SqlDecisionLogRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def log_decision(
        self,
        tick_id: str,
        learner_id: str | None,
        decision: Decision | None,
        success: bool,
        error: str | None = None,
        execution_ms: int | None = None,
    ) -> None:
        async with async_session_scope(self.session_factory) as session:
            session.add(
                AgentLog(
                    tick_id=tick_id,
                    learner_id=learner_id,
                    decision_type=decision.kind if decision is not None else None,
                    decision_data=describe_decision(decision) if decision is not None else None,
                    success=success,
                    error=error,
                    execution_time_ms=execution_ms,
                )
            )

    async def recent(self, limit: int = 20) -> list[AgentLog]:
        """Most recent log rows, newest first."""
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(select(AgentLog).order_by(AgentLog.created_at.desc()).limit(limit))
            return list(result.scalars())
