"""
Unit tests for core domain helpers and keyed locks.
"""

import asyncio
from datetime import datetime

import pytest

from src.core.locks import KeyedLock
from src.core.types import (
    GenerateQuiz,
    LearnerMemory,
    QuizAnalysis,
    UpdateMastery,
    Wait,
    clamp_mastery,
    describe_decision,
    ensure_utc,
)


class TestLearnerMemory:
    def test_running_average_per_topic(self):
        memory = LearnerMemory(learner_id="l1")

        memory.add_performance("SQL", 50)
        memory.add_performance("SQL", 100)
        memory.add_performance("Git", 30)

        assert len(memory.historical_performance) == 2
        sql = memory.performance_for("SQL")
        assert sql.attempts == 2
        assert sql.average_score == 75
        assert [r.topic for r in memory.topics_by_performance()] == ["Git", "SQL"]

    def test_negative_scores_floor_at_zero(self):
        memory = LearnerMemory(learner_id="l1")

        record = memory.add_performance("SQL", -20)

        assert record.average_score == 0


def test_clamp_mastery():
    assert clamp_mastery(-5) == 0
    assert clamp_mastery(42.5) == 42.5
    assert clamp_mastery(120) == 100


def test_ensure_utc_on_naive_datetime():
    value = ensure_utc(datetime(2026, 1, 1, 12, 0))

    assert value.tzinfo is not None
    assert value.hour == 12


def test_quiz_percentage():
    assert QuizAnalysis(score=3, total_questions=4).percentage == 75
    assert QuizAnalysis(score=3, total_questions=0).percentage == 0


def test_describe_decision():
    assert describe_decision(GenerateQuiz("SQL", 2, 5)) == {
        "type": "GENERATE_QUIZ",
        "topic": "SQL",
        "difficulty": 2,
        "questionCount": 5,
    }
    assert describe_decision(UpdateMastery("l1", "SQL", 5))["learnerId"] == "l1"
    assert describe_decision(Wait("later")) == {"type": "WAIT", "reason": "later"}


class TestKeyedLock:
    @pytest.mark.asyncio
    async def test_same_key_is_serialised(self):
        locks = KeyedLock()
        order = []

        async def worker(name):
            async with locks.hold("roadmap-1"):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order == ["a-in", "a-out", "b-in", "b-out"]

    @pytest.mark.asyncio
    async def test_different_keys_run_concurrently(self):
        locks = KeyedLock()
        inside = []

        async def worker(key):
            async with locks.hold(key):
                inside.append(key)
                await asyncio.sleep(0.01)
                assert len(inside) == 2

        await asyncio.gather(worker("a"), worker("b"))

    @pytest.mark.asyncio
    async def test_idle_locks_are_dropped(self):
        locks = KeyedLock()

        async with locks.hold("k"):
            assert locks.is_locked("k")

        assert not locks.is_locked("k")
        assert locks._locks == {}
