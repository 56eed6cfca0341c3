"""
Core Domain Types.

Plain dataclasses shared by the agent loop, the roadmap service and the
storage layer. Nothing here performs I/O.

Design:
- LearnerState / LearnerMemory: what the agent senses and remembers
- Decision variants: the closed set of pedagogical actions
- Roadmap / RoadmapDay: the day-by-day curriculum state machine
- Lesson / Quiz / Flashcard records: persisted generated content
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Union


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by some drivers) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def clamp_mastery(value: float) -> float:
    """Clamp a mastery level to the 0-100 scale."""
    return max(0.0, min(100.0, value))


# =============================================================================
# Learner State & Memory
# =============================================================================


@dataclass
class LearnerState:
    """Current measured state of one learner."""

    learner_id: str
    current_topic: str
    mastery_level: float  # 0-100
    last_activity: datetime
    recent_scores: list[float] = field(default_factory=list)  # oldest first, bounded
    needs_attention: bool = False

    @property
    def average_recent_score(self) -> float:
        """Mean of recent quiz scores; 0 when there are none."""
        if not self.recent_scores:
            return 0.0
        return sum(self.recent_scores) / len(self.recent_scores)


@dataclass
class LearningPatterns:
    """Observed learning-pattern hints. None means not yet observed."""

    best_time_of_day: str | None = None  # "HH:00"
    average_session_length: float | None = None  # minutes
    preferred_difficulty: int | None = None

    def to_dict(self) -> dict:
        return {
            "bestTimeOfDay": self.best_time_of_day,
            "averageSessionLength": self.average_session_length,
            "preferredDifficulty": self.preferred_difficulty,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> LearningPatterns:
        data = data or {}
        return cls(
            best_time_of_day=data.get("bestTimeOfDay"),
            average_session_length=data.get("averageSessionLength"),
            preferred_difficulty=data.get("preferredDifficulty"),
        )


@dataclass
class TopicPerformance:
    """Running performance for one topic."""

    topic: str
    average_score: float
    attempts: int

    def record(self, score: float) -> None:
        """Fold one more score into the running mean."""
        total = self.average_score * self.attempts + score
        self.attempts += 1
        self.average_score = max(0.0, total / self.attempts)


@dataclass
class LearnerMemory:
    """Long-term memory the agent keeps about a learner."""

    learner_id: str
    learning_patterns: LearningPatterns = field(default_factory=LearningPatterns)
    historical_performance: list[TopicPerformance] = field(default_factory=list)
    last_updated: datetime = field(default_factory=utcnow)

    def performance_for(self, topic: str) -> TopicPerformance | None:
        for record in self.historical_performance:
            if record.topic == topic:
                return record
        return None

    def add_performance(self, topic: str, score: float) -> TopicPerformance:
        """Record a score for a topic, keeping one record per topic."""
        score = max(0.0, score)
        record = self.performance_for(topic)
        if record is None:
            record = TopicPerformance(topic=topic, average_score=score, attempts=1)
            self.historical_performance.append(record)
        else:
            record.record(score)
        return record

    def topics_by_performance(self) -> list[TopicPerformance]:
        """Weakest topics first."""
        return sorted(self.historical_performance, key=lambda r: r.average_score)


# =============================================================================
# Decisions
# =============================================================================


@dataclass(frozen=True)
class GenerateLesson:
    topic: str
    difficulty: int

    kind = "GENERATE_LESSON"


@dataclass(frozen=True)
class GenerateQuiz:
    topic: str
    difficulty: int
    question_count: int

    kind = "GENERATE_QUIZ"


@dataclass(frozen=True)
class UpdateMastery:
    learner_id: str
    topic: str
    adjustment: float

    kind = "UPDATE_MASTERY"


@dataclass(frozen=True)
class Wait:
    reason: str

    kind = "WAIT"


Decision = Union[GenerateLesson, GenerateQuiz, UpdateMastery, Wait]


def describe_decision(decision: Decision) -> dict:
    """Serializable view of a decision for logs and API responses."""
    payload = {"type": decision.kind}
    if isinstance(decision, GenerateLesson):
        payload.update(topic=decision.topic, difficulty=decision.difficulty)
    elif isinstance(decision, GenerateQuiz):
        payload.update(
            topic=decision.topic,
            difficulty=decision.difficulty,
            questionCount=decision.question_count,
        )
    elif isinstance(decision, UpdateMastery):
        payload.update(
            learnerId=decision.learner_id,
            topic=decision.topic,
            adjustment=decision.adjustment,
        )
    elif isinstance(decision, Wait):
        payload.update(reason=decision.reason)
    return payload


class RecommendedAction(str, Enum):
    REVIEW = "review"
    ADVANCE = "advance"
    PRACTICE = "practice"


@dataclass
class QuizAnalysis:
    """Derived read-model of a scored quiz."""

    score: float
    total_questions: int
    weak_topics: list[str] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    recommended_action: RecommendedAction = RecommendedAction.PRACTICE

    @property
    def percentage(self) -> float:
        if self.total_questions <= 0:
            return 0.0
        return self.score / self.total_questions * 100


@dataclass
class TickResult:
    """
    Outcome of one orchestrator step.

    decisions holds every decision made this tick, including ones whose
    action failed; processed counts only the ones that completed.
    """

    processed: int = 0
    decisions: list[Decision] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    tick_id: str = ""
    timestamp: datetime = field(default_factory=utcnow)


# =============================================================================
# Roadmaps
# =============================================================================


class RoadmapStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class DayStatus(str, Enum):
    LOCKED = "locked"
    AVAILABLE = "available"
    COMPLETED = "completed"


@dataclass
class Roadmap:
    id: str
    owner_id: str
    topic: str
    total_days: int
    daily_minutes: int
    status: RoadmapStatus = RoadmapStatus.ACTIVE
    current_day: int = 1
    created_at: datetime | None = None


@dataclass
class RoadmapDay:
    id: str
    roadmap_id: str
    day_number: int
    topic: str
    status: DayStatus
    description: str | None = None
    objectives: list[str] = field(default_factory=list)


# =============================================================================
# Persisted Generated Content
# =============================================================================


@dataclass
class LessonRecord:
    id: str
    learner_id: str
    topic: str
    title: str
    content: str
    key_points: list[str]
    difficulty: int
    estimated_minutes: int
    day_id: str | None = None
    completed: bool = False
    completed_at: datetime | None = None
    created_at: datetime | None = None


@dataclass
class QuizRecord:
    id: str
    learner_id: str
    topic: str
    title: str
    questions: list[dict]
    difficulty: int
    total_questions: int
    day_id: str | None = None
    completed: bool = False
    score: float | None = None
    completed_at: datetime | None = None


@dataclass
class FlashcardRecord:
    id: str
    learner_id: str
    topic: str
    front: str
    back: str
    tags: list[str] = field(default_factory=list)
    difficulty: int = 1
    day_id: str | None = None


@dataclass
class DayBundle:
    """A day with its roadmap and whatever content exists for it."""

    day: RoadmapDay
    roadmap: Roadmap
    lesson: LessonRecord | None = None
    quiz: QuizRecord | None = None
    flashcards: list[FlashcardRecord] = field(default_factory=list)


@dataclass
class RoadmapSummary:
    """Roadmap with progress info for listing."""

    roadmap: Roadmap
    completed_days: int
    progress: int  # percent


@dataclass
class RoadmapDetails:
    roadmap: Roadmap
    days: list[RoadmapDay]


@dataclass
class DayCompletion:
    completed_day: int
    unlocked_day: int | None
    roadmap_completed: bool = False
