"""
Day Progression Ramps.

Content for later roadmap days is harder and larger, but every ramp is
capped so a 90-day roadmap never asks for unbounded content.

    difficulty      1 + (day - 1) // 7      capped at 4
    quiz questions  base + (day - 1) // 2   capped at 10
    flashcards      base + (day - 1) // 3   capped at 15
"""

from __future__ import annotations

from dataclasses import dataclass

MAX_DIFFICULTY = 4
MAX_QUIZ_QUESTIONS = 10
MAX_FLASHCARDS = 15

BASE_QUIZ_QUESTIONS = 3
BASE_FLASHCARDS = 5


@dataclass(frozen=True)
class DayPlan:
    """Generation parameters for one roadmap day."""

    day_number: int
    difficulty: int
    question_count: int
    flashcard_count: int


def day_difficulty(day_number: int) -> int:
    return min(MAX_DIFFICULTY, 1 + (max(day_number, 1) - 1) // 7)


def quiz_question_count(day_number: int) -> int:
    return min(MAX_QUIZ_QUESTIONS, BASE_QUIZ_QUESTIONS + (max(day_number, 1) - 1) // 2)


def flashcard_count(day_number: int) -> int:
    return min(MAX_FLASHCARDS, BASE_FLASHCARDS + (max(day_number, 1) - 1) // 3)


def plan_for_day(day_number: int) -> DayPlan:
    return DayPlan(
        day_number=day_number,
        difficulty=day_difficulty(day_number),
        question_count=quiz_question_count(day_number),
        flashcard_count=flashcard_count(day_number),
    )
