# SQLAlchemy models
from .base import Base, new_id
from .content import FlashcardModel, LessonModel, QuizModel
from .learner import AgentLog, AgentMemory, LearnerActivity, LearnerLearningState
from .roadmap import RoadmapDayModel, RoadmapModel

__all__ = [
    "Base",
    "new_id",
    # Learner / agent
    "LearnerLearningState",
    "LearnerActivity",
    "AgentMemory",
    "AgentLog",
    # Roadmaps
    "RoadmapModel",
    "RoadmapDayModel",
    # Generated content
    "LessonModel",
    "QuizModel",
    "FlashcardModel",
]
