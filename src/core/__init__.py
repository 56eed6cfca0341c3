"""
Core Module - Shared domain types, interfaces and errors.

Components:
- types: learner state/memory, decisions, roadmaps, content records
- interfaces: repository and content-generator protocols
- exceptions: generation, validation and not-found errors
- locks: keyed asyncio locks
"""

from src.core.exceptions import (
    ContentValidationError,
    DayNotFoundError,
    EduAgentError,
    GenerationError,
    InvalidDayTransitionError,
    LearnerNotFoundError,
    NotFoundError,
    RoadmapGenerationError,
    RoadmapNotFoundError,
)
from src.core.types import (
    Decision,
    DayStatus,
    GenerateLesson,
    GenerateQuiz,
    LearnerMemory,
    LearnerState,
    QuizAnalysis,
    Roadmap,
    RoadmapDay,
    RoadmapStatus,
    TickResult,
    UpdateMastery,
    Wait,
)

__all__ = [
    # Errors
    "EduAgentError",
    "GenerationError",
    "ContentValidationError",
    "RoadmapGenerationError",
    "NotFoundError",
    "LearnerNotFoundError",
    "RoadmapNotFoundError",
    "DayNotFoundError",
    "InvalidDayTransitionError",
    # Types
    "Decision",
    "GenerateLesson",
    "GenerateQuiz",
    "UpdateMastery",
    "Wait",
    "LearnerState",
    "LearnerMemory",
    "QuizAnalysis",
    "TickResult",
    "Roadmap",
    "RoadmapDay",
    "RoadmapStatus",
    "DayStatus",
]
