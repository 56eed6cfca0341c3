"""
End-to-end flows over the SQL repositories with a scripted generator.
"""

import pytest

from config import Settings
from src.agent.bootstrap import build_orchestrator, build_roadmap_service
from src.core.types import DayStatus, GenerateLesson, LearnerState, RoadmapStatus, utcnow
from src.db.repositories import SqlDecisionLogRepository, SqlLearnerStateRepository, SqlMemoryRepository
from tests.fakes import ScriptedGenerator


@pytest.fixture
def scripted():
    return ScriptedGenerator()


class TestRoadmapFlow:
    @pytest.mark.asyncio
    async def test_five_day_roadmap(self, session_factory, scripted):
        service = build_roadmap_service(scripted, session_factory)

        roadmap_id = await service.create_roadmap("user-1", "PostgreSQL", 5, 60)
        details = await service.get_roadmap_details(roadmap_id)
        assert [d.status for d in details.days] == [DayStatus.AVAILABLE] + [DayStatus.LOCKED] * 4

        for day in details.days:
            lesson = await service.generate_day_lesson(day.id, "learner-1")
            again = await service.generate_day_lesson(day.id, "learner-1")
            assert again.id == lesson.id

            bundle = await service.get_day_with_lesson(day.id, "learner-1")
            assert bundle.quiz is not None
            assert len(bundle.flashcards) == (5 if day.day_number < 4 else 6)

            completion = await service.complete_day(roadmap_id, day.id)
            assert completion.completed_day == day.day_number

        assert scripted.count("lesson") == 5
        assert completion.roadmap_completed is True

        [summary] = await service.get_user_roadmaps("user-1")
        assert summary.progress == 100
        assert summary.roadmap.status == RoadmapStatus.COMPLETED
        assert summary.roadmap.current_day == 6
        assert await service.get_active_roadmap("user-1") is None

        bundle = await service.get_day_with_lesson(details.days[0].id, "learner-1")
        assert bundle.lesson.completed is True

    @pytest.mark.asyncio
    async def test_delete_removes_everything(self, session_factory, scripted):
        service = build_roadmap_service(scripted, session_factory)
        roadmap_id = await service.create_roadmap("user-1", "PostgreSQL", 3, 60)
        days = (await service.get_roadmap_details(roadmap_id)).days
        await service.generate_day_lesson(days[0].id, "learner-1")

        await service.delete_roadmap(roadmap_id)

        assert await service.get_roadmap_details(roadmap_id) is None
        assert await service.get_day_with_lesson(days[0].id) is None
        assert await service.lesson_repo.find_for_day(days[0].id) is None
        assert await service.quiz_repo.find_for_day(days[0].id) is None
        assert await service.flashcard_repo.find_for_day(days[0].id) == []


class TestAgentTick:
    @pytest.mark.asyncio
    async def test_tick_over_sql_store(self, session_factory, scripted):
        learners = SqlLearnerStateRepository(session_factory)
        memories = SqlMemoryRepository(session_factory)
        await learners.save_learner_state(
            LearnerState(
                learner_id="learner-1",
                current_topic="Indexes",
                mastery_level=15,
                last_activity=utcnow(),
                needs_attention=True,
            )
        )
        await memories.get_or_create_memory("learner-1")
        await learners.save_learner_state(
            LearnerState(
                learner_id="no-memory",
                current_topic="Indexes",
                mastery_level=15,
                last_activity=utcnow(),
                needs_attention=True,
            )
        )

        orchestrator = build_orchestrator(scripted, session_factory, Settings(_env_file=None))
        result = await orchestrator.step()

        assert result.errors == []
        assert result.decisions == [GenerateLesson(topic="Indexes", difficulty=1)]

        memory = await memories.get_memory("learner-1")
        assert memory.learning_patterns.best_time_of_day is not None
        assert await memories.get_memory("no-memory") is None

        logs = await SqlDecisionLogRepository(session_factory).recent()
        assert [log.learner_id for log in logs] == ["learner-1"]
        assert logs[0].tick_id == result.tick_id
