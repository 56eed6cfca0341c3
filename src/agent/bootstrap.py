"""
Dependency wiring.

Builds the orchestrator and the roadmap service from settings: chat
backend -> LLMContentGenerator, async session factory -> SQL repositories.
Each builder returns the component plus an async close() for the
resources it opened.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config import Settings, get_settings
from src.agent.decision_engine import DecisionEngine, DecisionThresholds
from src.agent.orchestrator import AgentOrchestrator
from src.db.database import dispose_engine, get_session_factory
from src.db.repositories import (
    SqlDecisionLogRepository,
    SqlFlashcardRepository,
    SqlLearnerStateRepository,
    SqlLessonRepository,
    SqlMemoryRepository,
    SqlQuizRepository,
    SqlRoadmapRepository,
)
from src.llm.backends import create_chat_backend
from src.llm.content_generator import LLMContentGenerator
from src.roadmap.roadmap_service import RoadmapService

Closer = Callable[[], Awaitable[None]]


def build_generator(settings: Settings | None = None) -> LLMContentGenerator:
    settings = settings or get_settings()
    return LLMContentGenerator(create_chat_backend(settings), timeout_seconds=settings.llm_timeout_seconds)


def build_orchestrator(
    generator: LLMContentGenerator,
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings | None = None,
) -> AgentOrchestrator:
    settings = settings or get_settings()
    return AgentOrchestrator(
        engine=DecisionEngine(DecisionThresholds.from_settings(settings)),
        generator=generator,
        learner_repo=SqlLearnerStateRepository(session_factory, settings.recent_scores_window),
        memory_repo=SqlMemoryRepository(session_factory),
        lesson_repo=SqlLessonRepository(session_factory),
        quiz_repo=SqlQuizRepository(session_factory),
        decision_log=SqlDecisionLogRepository(session_factory),
    )


def build_roadmap_service(
    generator: LLMContentGenerator,
    session_factory: async_sessionmaker[AsyncSession],
) -> RoadmapService:
    return RoadmapService(
        generator=generator,
        roadmap_repo=SqlRoadmapRepository(session_factory),
        lesson_repo=SqlLessonRepository(session_factory),
        quiz_repo=SqlQuizRepository(session_factory),
        flashcard_repo=SqlFlashcardRepository(session_factory),
    )


def _closer(generator: LLMContentGenerator) -> Closer:
    async def close() -> None:
        await generator.close()
        await dispose_engine()

    return close


def build_agent(settings: Settings | None = None) -> tuple[AgentOrchestrator, Closer]:
    """Orchestrator wired to the configured database and LLM provider."""
    settings = settings or get_settings()
    generator = build_generator(settings)
    orchestrator = build_orchestrator(generator, get_session_factory(), settings)
    return orchestrator, _closer(generator)


def build_roadmaps(settings: Settings | None = None) -> tuple[RoadmapService, Closer]:
    """RoadmapService wired to the configured database and LLM provider."""
    settings = settings or get_settings()
    generator = build_generator(settings)
    service = build_roadmap_service(generator, get_session_factory())
    return service, _closer(generator)
