"""
Unit tests for the rule-based DecisionEngine.
"""

from datetime import timedelta

import pytest

from src.agent.decision_engine import DecisionEngine, DecisionThresholds
from src.core.types import (
    GenerateLesson,
    GenerateQuiz,
    QuizAnalysis,
    UpdateMastery,
    Wait,
    utcnow,
)


@pytest.fixture
def engine():
    return DecisionEngine()


class TestCalculateDifficulty:
    """Difficulty buckets at and around the thresholds."""

    @pytest.mark.parametrize(
        "mastery,expected",
        [
            (0, 1),
            (39.9, 1),
            (40, 2),
            (69.9, 2),
            (70, 3),
            (89.9, 3),
            (90, 4),
            (100, 4),
        ],
    )
    def test_buckets(self, engine, mastery, expected):
        assert engine.calculate_difficulty(mastery) == expected

    def test_custom_thresholds(self):
        engine = DecisionEngine(DecisionThresholds(low=20, medium=50, high=80))
        assert engine.calculate_difficulty(25) == 2
        assert engine.calculate_difficulty(79) == 3
        assert engine.calculate_difficulty(80) == 4


class TestDecide:
    """Rule ordering for decide()."""

    def test_low_mastery_gets_remedial_lesson(self, engine, make_state):
        decision = engine.decide(make_state(mastery=20))

        assert decision == GenerateLesson(topic="Python basics", difficulty=1)

    def test_mid_mastery_with_good_scores_gets_quiz(self, engine, make_state):
        decision = engine.decide(make_state(mastery=60, recent_scores=[80, 75, 90]))

        assert isinstance(decision, GenerateQuiz)
        assert decision.difficulty == 2
        assert decision.question_count == 5

    def test_mid_mastery_with_weak_scores_gets_lesson(self, engine, make_state):
        decision = engine.decide(make_state(mastery=60, recent_scores=[40, 50]))

        assert decision == GenerateLesson(topic="Python basics", difficulty=2)

    def test_mid_mastery_without_scores_gets_lesson(self, engine, make_state):
        decision = engine.decide(make_state(mastery=75))

        assert decision == GenerateLesson(topic="Python basics", difficulty=3)

    def test_quiz_readiness_at_exact_pass_score(self, engine, make_state):
        decision = engine.decide(make_state(mastery=40, recent_scores=[70]))

        assert isinstance(decision, GenerateQuiz)

    def test_high_mastery_waits(self, engine, make_state):
        decision = engine.decide(make_state(mastery=95, recent_scores=[100]))

        assert isinstance(decision, Wait)
        assert "high mastery" in decision.reason

    def test_inactivity_overrides_high_mastery(self, engine, make_state):
        decision = engine.decide(make_state(mastery=95, hours_inactive=30))

        assert decision == GenerateLesson(topic="Python basics", difficulty=4)

    def test_inactivity_overrides_quiz_readiness(self, engine, make_state):
        decision = engine.decide(make_state(mastery=60, recent_scores=[90], hours_inactive=25))

        assert decision == GenerateLesson(topic="Python basics", difficulty=2)

    def test_exactly_24_hours_is_not_inactive(self, engine, make_state):
        state = make_state(mastery=95)
        now = state.last_activity + timedelta(hours=24)

        assert isinstance(engine.decide(state, now=now), Wait)

    def test_naive_last_activity_treated_as_utc(self, engine, make_state):
        state = make_state(mastery=95)
        state.last_activity = (utcnow() - timedelta(hours=48)).replace(tzinfo=None)

        assert isinstance(engine.decide(state), GenerateLesson)

    def test_memory_does_not_change_outcome(self, engine, make_state):
        from src.core.types import LearnerMemory

        state = make_state(mastery=20)
        assert engine.decide(state, LearnerMemory(learner_id=state.learner_id)) == engine.decide(state)


class TestAnalyzeQuizResults:
    """Follow-up decisions after a scored quiz."""

    def test_excellent_score_adds_ten(self, engine, make_state):
        state = make_state(mastery=60)
        decision = engine.analyze_quiz_results(QuizAnalysis(score=19, total_questions=20), state)

        assert decision == UpdateMastery(learner_id="learner-1", topic="Python basics", adjustment=10)

    def test_passing_score_adds_five(self, engine, make_state):
        decision = engine.analyze_quiz_results(QuizAnalysis(score=4, total_questions=5), make_state())

        assert isinstance(decision, UpdateMastery)
        assert decision.adjustment == 5

    def test_failing_with_weak_topics_targets_first(self, engine, make_state):
        analysis = QuizAnalysis(score=1, total_questions=5, weak_topics=["loops", "functions"])

        decision = engine.analyze_quiz_results(analysis, make_state(mastery=80))

        assert decision == GenerateLesson(topic="loops", difficulty=1)

    def test_failing_without_weak_topics_gets_easier_quiz(self, engine, make_state):
        decision = engine.analyze_quiz_results(
            QuizAnalysis(score=2, total_questions=5), make_state(mastery=75)
        )

        assert decision == GenerateQuiz(topic="Python basics", difficulty=2, question_count=3)

    def test_practice_quiz_difficulty_never_below_one(self, engine, make_state):
        decision = engine.analyze_quiz_results(
            QuizAnalysis(score=0, total_questions=5), make_state(mastery=10)
        )

        assert decision.difficulty == 1

    def test_zero_questions_counts_as_failure(self, engine, make_state):
        decision = engine.analyze_quiz_results(QuizAnalysis(score=0, total_questions=0), make_state())

        assert isinstance(decision, GenerateQuiz)


class TestThresholdsFromSettings:
    def test_maps_settings_fields(self):
        from config import Settings

        settings = Settings(mastery_low=30, mastery_medium=60, mastery_high=85, quiz_pass_score=65, inactivity_hours=12)

        thresholds = DecisionThresholds.from_settings(settings)

        assert thresholds == DecisionThresholds(low=30, medium=60, high=85, quiz_pass=65, inactivity_hours=12)
