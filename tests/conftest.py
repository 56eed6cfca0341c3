"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import timedelta
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.types import LearnerMemory, LearnerState, utcnow  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeDecisionLog,
    FakeFlashcardRepository,
    FakeLearnerStateRepository,
    FakeLessonRepository,
    FakeMemoryRepository,
    FakeQuizRepository,
    FakeRoadmapRepository,
    ScriptedGenerator,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite via aiosqlite)")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


# ========================================
# Domain Samples
# ========================================


@pytest.fixture
def make_state():
    """Factory for learner states (active one hour ago by default)."""

    def _make(
        learner_id="learner-1",
        mastery=50.0,
        topic="Python basics",
        recent_scores=None,
        hours_inactive=1.0,
        needs_attention=True,
    ):
        return LearnerState(
            learner_id=learner_id,
            current_topic=topic,
            mastery_level=mastery,
            last_activity=utcnow() - timedelta(hours=hours_inactive),
            recent_scores=list(recent_scores or []),
            needs_attention=needs_attention,
        )

    return _make


@pytest.fixture
def generator():
    return ScriptedGenerator()


@pytest.fixture
def learner_repo():
    return FakeLearnerStateRepository()


@pytest.fixture
def memory_repo():
    return FakeMemoryRepository()


@pytest.fixture
def lesson_repo():
    return FakeLessonRepository()


@pytest.fixture
def quiz_repo():
    return FakeQuizRepository()


@pytest.fixture
def flashcard_repo():
    return FakeFlashcardRepository()


@pytest.fixture
def roadmap_repo():
    return FakeRoadmapRepository()


@pytest.fixture
def decision_log():
    return FakeDecisionLog()


@pytest.fixture
def seed_learner(learner_repo, memory_repo):
    """Store a learner state (and memory unless with_memory=False)."""

    def _seed(state: LearnerState, with_memory: bool = True) -> LearnerState:
        learner_repo.states[state.learner_id] = state
        if with_memory:
            memory_repo.memories[state.learner_id] = LearnerMemory(learner_id=state.learner_id)
        return state

    return _seed


# ========================================
# SQLite (integration)
# ========================================


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path):
    """Async SQLite engine with all tables created."""
    from src.db.database import create_engine_for, init_db

    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'eduagent.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    from src.db.database import create_session_factory

    return create_session_factory(sqlite_engine)
