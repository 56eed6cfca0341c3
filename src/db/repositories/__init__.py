"""
SQLAlchemy implementations of the State Store protocols.

Every repository is constructed with an async_sessionmaker and runs each
method in its own transaction (see src.db.database.async_session_scope).
"""

from src.db.repositories.content import SqlFlashcardRepository, SqlLessonRepository, SqlQuizRepository
from src.db.repositories.decision_log import SqlDecisionLogRepository
from src.db.repositories.learner_state import SqlLearnerStateRepository
from src.db.repositories.memory import SqlMemoryRepository
from src.db.repositories.roadmap import SqlRoadmapRepository

__all__ = [
    "SqlLearnerStateRepository",
    "SqlMemoryRepository",
    "SqlLessonRepository",
    "SqlQuizRepository",
    "SqlFlashcardRepository",
    "SqlRoadmapRepository",
    "SqlDecisionLogRepository",
]
