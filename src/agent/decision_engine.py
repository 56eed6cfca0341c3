"""
Decision Engine.

Maps a learner's measured state (plus long-term memory) to exactly one
pedagogical decision. Pure: no I/O, deterministic given its inputs.

Rules (first match wins):
1. Inactive longer than the inactivity threshold -> lesson at mastery difficulty
2. Mastery below LOW -> remedial lesson at difficulty 1
3. Mastery in [LOW, HIGH) and recent average >= QUIZ_PASS -> 5-question quiz
4. Mastery >= HIGH -> wait (learner self-directs)
5. Otherwise -> lesson at mastery difficulty

Difficulty buckets: <40 -> 1, <70 -> 2, <90 -> 3, else 4.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from src.core.types import (
    Decision,
    GenerateLesson,
    GenerateQuiz,
    LearnerMemory,
    LearnerState,
    QuizAnalysis,
    UpdateMastery,
    Wait,
    ensure_utc,
    utcnow,
)

if TYPE_CHECKING:
    from config import Settings

READINESS_QUIZ_QUESTIONS = 5
PRACTICE_QUIZ_QUESTIONS = 3


@dataclass(frozen=True)
class DecisionThresholds:
    """Mastery/score thresholds (0-100 scale) and the inactivity window."""

    low: float = 40
    medium: float = 70
    high: float = 90
    quiz_pass: float = 70
    inactivity_hours: float = 24

    @classmethod
    def from_settings(cls, settings: Settings) -> DecisionThresholds:
        values = settings.get_thresholds()
        return cls(
            low=values["mastery_low"],
            medium=values["mastery_medium"],
            high=values["mastery_high"],
            quiz_pass=values["quiz_pass_score"],
            inactivity_hours=values["inactivity_hours"],
        )


class DecisionEngine:
    """Rule-based decision policy for the agent loop."""

    def __init__(self, thresholds: DecisionThresholds | None = None):
        self.thresholds = thresholds or DecisionThresholds()

    def calculate_difficulty(self, mastery_level: float) -> int:
        """Difficulty bucket (1-4) for a mastery level."""
        t = self.thresholds
        if mastery_level < t.low:
            return 1
        elif mastery_level < t.medium:
            return 2
        elif mastery_level < t.high:
            return 3
        return 4

    def decide(
        self,
        state: LearnerState,
        memory: LearnerMemory | None = None,
        now: datetime | None = None,
    ) -> Decision:
        """
        Choose the next action for a learner.

        Args:
            state: Current learner state
            memory: Long-term memory (not consulted by the current rules)
            now: Reference time, defaults to the current UTC time

        Returns:
            One Decision variant
        """
        t = self.thresholds
        now = now or utcnow()
        mastery = state.mastery_level
        hours_inactive = (ensure_utc(now) - ensure_utc(state.last_activity)).total_seconds() / 3600

        if hours_inactive > t.inactivity_hours:
            return GenerateLesson(
                topic=state.current_topic,
                difficulty=self.calculate_difficulty(mastery),
            )

        if mastery < t.low:
            return GenerateLesson(topic=state.current_topic, difficulty=1)

        if t.low <= mastery < t.high and state.average_recent_score >= t.quiz_pass:
            return GenerateQuiz(
                topic=state.current_topic,
                difficulty=self.calculate_difficulty(mastery),
                question_count=READINESS_QUIZ_QUESTIONS,
            )

        if mastery >= t.high:
            return Wait(reason="Learner has high mastery, allowing self-directed learning")

        return GenerateLesson(
            topic=state.current_topic,
            difficulty=self.calculate_difficulty(mastery),
        )

    def analyze_quiz_results(self, analysis: QuizAnalysis, state: LearnerState) -> Decision:
        """
        Choose a follow-up action for a scored quiz.

        Passing quizzes raise mastery (+10 at >= HIGH percent, else +5).
        Failing quizzes target the weakest topic with a remedial lesson, or
        fall back to a lighter practice quiz one bucket below the current one.
        """
        t = self.thresholds
        percentage = analysis.percentage

        if percentage >= t.quiz_pass:
            return UpdateMastery(
                learner_id=state.learner_id,
                topic=state.current_topic,
                adjustment=10 if percentage >= t.high else 5,
            )

        if analysis.weak_topics:
            return GenerateLesson(topic=analysis.weak_topics[0], difficulty=1)

        return GenerateQuiz(
            topic=state.current_topic,
            difficulty=max(1, self.calculate_difficulty(state.mastery_level) - 1),
            question_count=PRACTICE_QUIZ_QUESTIONS,
        )
