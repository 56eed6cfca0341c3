"""
Unit tests for parsing and validating generator output.
"""

import json

import pytest

from src.core.exceptions import ContentValidationError
from src.llm.schemas import (
    GeneratedFlashcards,
    GeneratedLesson,
    GeneratedQuiz,
    GeneratedRoadmap,
    parse_generated,
    parse_json_object,
    parse_recommendations,
)


def quiz_payload(**overrides):
    question = {
        "id": "q1",
        "question": "What does len([1, 2]) return?",
        "options": ["0", "1", "2", "3"],
        "correctAnswer": 2,
        "explanation": "Two elements.",
    }
    question.update(overrides)
    return {"title": "Lists", "questions": [question]}


def roadmap_payload(days):
    return {
        "topic": "SQL",
        "totalDays": len(days),
        "days": [
            {"dayNumber": n, "topic": f"Topic {n}", "description": f"Day {n}", "objectives": ["learn"]}
            for n in days
        ],
    }


class TestParseJsonObject:
    def test_plain_json(self):
        assert parse_json_object('{"a": 1}', "lesson") == {"a": 1}

    def test_markdown_fences_are_stripped(self):
        raw = '```json\n{"title": "x"}\n```'
        assert parse_json_object(raw, "lesson") == {"title": "x"}

    def test_surrounding_chatter_is_ignored(self):
        raw = 'Sure! Here is your lesson:\n{"title": "x"}\nHope this helps.'
        assert parse_json_object(raw, "lesson") == {"title": "x"}

    def test_no_object(self):
        with pytest.raises(ContentValidationError) as exc_info:
            parse_json_object("I cannot help with that.", "lesson")
        assert exc_info.value.kind == "lesson"

    def test_broken_json(self):
        with pytest.raises(ContentValidationError):
            parse_json_object('{"title": "x",}', "quiz")


class TestLesson:
    def test_camel_case_keys(self):
        raw = json.dumps({"title": "Loops", "content": "# Loops", "keyPoints": ["for"], "estimatedMinutes": 12})

        lesson = parse_generated(raw, GeneratedLesson, "lesson")

        assert lesson.key_points == ["for"]
        assert lesson.estimated_minutes == 12

    def test_missing_key_points(self):
        raw = json.dumps({"title": "Loops", "content": "# Loops", "estimatedMinutes": 12})

        with pytest.raises(ContentValidationError) as exc_info:
            parse_generated(raw, GeneratedLesson, "lesson")
        assert any("keyPoints" in problem for problem in exc_info.value.problems)


class TestQuiz:
    def test_valid_quiz(self):
        quiz = parse_generated(json.dumps(quiz_payload()), GeneratedQuiz, "quiz")

        assert quiz.questions[0].correct_answer == 2
        assert quiz.questions[0].to_wire()["correctAnswer"] == 2

    def test_three_options_rejected(self):
        raw = json.dumps(quiz_payload(options=["a", "b", "c"]))

        with pytest.raises(ContentValidationError):
            parse_generated(raw, GeneratedQuiz, "quiz")

    def test_answer_out_of_range_rejected(self):
        raw = json.dumps(quiz_payload(correctAnswer=4))

        with pytest.raises(ContentValidationError):
            parse_generated(raw, GeneratedQuiz, "quiz")

    def test_missing_ids_are_numbered(self):
        payload = quiz_payload(id="")
        payload["questions"].append(dict(payload["questions"][0]))

        quiz = parse_generated(json.dumps(payload), GeneratedQuiz, "quiz")

        assert [q.id for q in quiz.questions] == ["q1", "q2"]

    def test_numeric_ids_become_text(self):
        quiz = parse_generated(json.dumps(quiz_payload(id=7)), GeneratedQuiz, "quiz")

        assert quiz.questions[0].id == "7"


class TestFlashcards:
    def test_wrapped_payload(self):
        raw = json.dumps({"flashcards": {"topic": "Git", "cards": [{"front": "rebase?", "back": "replay commits"}]}})

        deck = parse_generated(raw, GeneratedFlashcards, "flashcards")

        assert deck.topic == "Git"
        assert deck.cards[0].tags == []

    def test_empty_deck_rejected(self):
        with pytest.raises(ContentValidationError):
            parse_generated(json.dumps({"topic": "Git", "cards": []}), GeneratedFlashcards, "flashcards")


class TestRoadmap:
    def test_day_count_matches(self):
        roadmap = parse_generated(json.dumps(roadmap_payload([1, 2, 3])), GeneratedRoadmap, "roadmap")

        roadmap.check_day_count(3)

    def test_wrong_day_count(self):
        roadmap = parse_generated(json.dumps(roadmap_payload([1, 2])), GeneratedRoadmap, "roadmap")

        with pytest.raises(ContentValidationError):
            roadmap.check_day_count(3)

    def test_gap_in_day_numbers(self):
        roadmap = parse_generated(json.dumps(roadmap_payload([1, 2, 4])), GeneratedRoadmap, "roadmap")

        with pytest.raises(ContentValidationError) as exc_info:
            roadmap.check_day_count(3)
        assert "without gaps" in str(exc_info.value)

    def test_duplicate_day_numbers(self):
        roadmap = parse_generated(json.dumps(roadmap_payload([1, 1, 2])), GeneratedRoadmap, "roadmap")

        with pytest.raises(ContentValidationError):
            roadmap.check_day_count(3)


class TestRecommendations:
    def test_json_array(self):
        assert parse_recommendations('["Review loops", "Practice slicing"]') == ["Review loops", "Practice slicing"]

    def test_fenced_array_with_blanks(self):
        raw = '```json\n["Review loops", "  ", "Practice"]\n```'
        assert parse_recommendations(raw) == ["Review loops", "Practice"]

    def test_no_array(self):
        with pytest.raises(ContentValidationError):
            parse_recommendations("Keep practicing!")
