"""
LLM Prompts for Lesson, Quiz, Flashcard and Roadmap Generation.

Each content kind has a system prompt (role, output contract, difficulty
calibration) and a user prompt (topic and request parameters). All output
contracts demand a single JSON object; src/llm/schemas.py validates it.
"""
from __future__ import annotations

from src.llm.schemas import LessonContext

# =============================================================================
# Difficulty Calibration (1-4)
# =============================================================================

LESSON_DIFFICULTY = {
    1: "beginner-friendly, using simple language and clear examples",
    2: "intermediate level, introducing some technical concepts",
    3: "advanced, assuming prior knowledge and diving deep",
    4: "expert level, covering edge cases and best practices",
}

QUIZ_DIFFICULTY = {
    1: "basic understanding and recall",
    2: "application of concepts and problem-solving",
    3: "deep understanding and critical thinking",
    4: "expert-level analysis and edge cases",
}

QUIZ_CALIBRATION = {
    1: "- Focus on definitions and basic concepts\n- Use straightforward scenarios",
    2: "- Test application of concepts\n- Include simple problem-solving",
    3: "- Test deeper understanding\n- Include code analysis",
    4: "- Test edge cases and best practices\n- Include complex scenarios",
}

FLASHCARD_LEVEL = {
    1: "Beginner",
    2: "Intermediate",
    3: "Advanced",
    4: "Expert",
}


def _level(table: dict[int, str], difficulty: int) -> str:
    return table.get(difficulty, table[2])


# =============================================================================
# Lesson
# =============================================================================

LESSON_SYSTEM_PROMPT = """You are an expert educational content creator.

Your task is to generate high-quality, engaging lessons that are {difficulty_desc}.

CRITICAL INSTRUCTIONS:
1. Your response MUST be ONLY valid JSON - no other text, no markdown code blocks
2. Use this EXACT structure:
{{
  "title": "Clear, descriptive lesson title",
  "content": "Full lesson content in markdown. Escape newlines as \\n and quotes as \\".",
  "keyPoints": ["Key point 1", "Key point 2", "Key point 3"],
  "estimatedMinutes": 10
}}

CONTENT GUIDELINES:
- Start with a brief introduction explaining why this topic matters
- Use code examples where appropriate
- Break down complex concepts into digestible parts
- End with a summary of key takeaways
- Estimated time should be realistic (5-30 minutes)

Remember: Output ONLY the JSON object, nothing else."""


def get_lesson_system_prompt(difficulty: int) -> str:
    return LESSON_SYSTEM_PROMPT.format(difficulty_desc=_level(LESSON_DIFFICULTY, difficulty))


def get_lesson_user_prompt(topic: str, context: LessonContext | None = None) -> str:
    prompt = f'Generate a comprehensive lesson about: "{topic}"'

    if context and context.previous_errors:
        struggles = "\n".join(f"- {error}" for error in context.previous_errors)
        prompt += (
            f"\n\nThe student struggled with these concepts previously:\n{struggles}\n\n"
            "Please address these areas in your lesson."
        )

    if context and context.mastery_level is not None:
        if context.mastery_level < 30:
            prompt += "\n\nNote: This student is just starting out - use simple explanations."
        elif context.mastery_level > 70:
            prompt += "\n\nNote: This student has strong fundamentals - you can go deeper."

    return prompt


# =============================================================================
# Quiz
# =============================================================================

QUIZ_SYSTEM_PROMPT = """You are an expert educational assessment creator.

Your task is to generate {question_count} high-quality quiz questions that test {difficulty_desc}.

CRITICAL INSTRUCTIONS:
1. Your response MUST be ONLY valid JSON - no other text, no markdown code blocks
2. Use this EXACT structure:
{{
  "title": "Quiz title",
  "questions": [
    {{
      "id": "q1",
      "question": "The question text?",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswer": 0,
      "explanation": "Why this answer is correct and others are wrong"
    }}
  ]
}}

QUESTION GUIDELINES:
- Generate EXACTLY {question_count} questions
- Each question has exactly 4 options (never more, never less)
- correctAnswer is the INDEX (0, 1, 2, or 3) of the correct option
- Make distractors plausible but clearly incorrect
- Explanation should teach, not just state the answer

DIFFICULTY CALIBRATION:
{calibration}

Remember: Output ONLY the JSON object, nothing else."""


def get_quiz_system_prompt(difficulty: int, question_count: int) -> str:
    return QUIZ_SYSTEM_PROMPT.format(
        question_count=question_count,
        difficulty_desc=_level(QUIZ_DIFFICULTY, difficulty),
        calibration=_level(QUIZ_CALIBRATION, difficulty),
    )


def get_quiz_user_prompt(topic: str, difficulty: int, question_count: int) -> str:
    return (
        f'Generate a {question_count}-question quiz about: "{topic}"\n\n'
        f"Difficulty level: {difficulty}/4\n\n"
        "Focus on practical understanding that helps students apply this knowledge."
    )


# =============================================================================
# Flashcards
# =============================================================================

FLASHCARD_SYSTEM_PROMPT = """You are an expert educator creating flashcards for a {level} level student.
Create {count} high-quality flashcards to help the student memorize key concepts.
Each flashcard has a concise "front" (question/term) and a clear "back" (answer/definition).

Return ONLY valid JSON in the following format:
{{
  "topic": "Topic Name",
  "cards": [
    {{"front": "Question or Term", "back": "Answer or Definition", "tags": ["tag1", "tag2"]}}
  ]
}}"""


def get_flashcard_system_prompt(difficulty: int, count: int) -> str:
    return FLASHCARD_SYSTEM_PROMPT.format(level=_level(FLASHCARD_LEVEL, difficulty), count=count)


def get_flashcard_user_prompt(topic: str, count: int) -> str:
    return (
        f'Create {count} flashcards for the topic: "{topic}".\n'
        "Focus on key definitions, core concepts, and important facts.\n"
        "Keep the content concise and easy to memorize."
    )


# =============================================================================
# Roadmap
# =============================================================================

ROADMAP_SYSTEM_PROMPT = """You are an expert educational curriculum designer. Your task is to create
structured, day-by-day learning roadmaps for any topic.

RULES:
1. Break the topic into logical, progressive daily lessons
2. Each day builds on the previous one
3. Start with fundamentals and progress to advanced concepts
4. Each day must be achievable in the given daily time commitment
5. Include clear learning objectives for each day
6. Make topics specific and actionable, not vague

Return ONLY valid JSON in the exact format specified. No markdown, no extra text."""

ROADMAP_USER_PROMPT = """Create a {total_days}-day learning roadmap for: "{topic}"

Daily study time: {daily_minutes} minutes per day

Return a JSON object with this EXACT structure:
{{
  "topic": "{topic}",
  "totalDays": {total_days},
  "days": [
    {{
      "dayNumber": 1,
      "topic": "Day 1 specific topic title",
      "description": "Brief description of what will be covered",
      "objectives": ["objective 1", "objective 2", "objective 3"]
    }}
  ]
}}

IMPORTANT:
- Generate exactly {total_days} days, numbered 1 to {total_days}
- Each day should have 2-4 clear learning objectives
- Topics should progress logically from beginner to advanced
- Descriptions are concise (1-2 sentences)
- Return ONLY the JSON, no other text"""


def get_roadmap_system_prompt() -> str:
    return ROADMAP_SYSTEM_PROMPT


def get_roadmap_user_prompt(topic: str, total_days: int, daily_minutes: int) -> str:
    return ROADMAP_USER_PROMPT.format(topic=topic, total_days=total_days, daily_minutes=daily_minutes)


# =============================================================================
# Error Analysis
# =============================================================================

ERROR_ANALYSIS_SYSTEM_PROMPT = (
    "You are an educational expert. Analyze student errors and provide 3-5 specific, "
    "actionable recommendations for improvement. Return ONLY a JSON array of strings."
)


def get_error_analysis_user_prompt(errors: list[str], topic: str) -> str:
    listed = "\n".join(f"{i}. {error}" for i, error in enumerate(errors, start=1))
    return (
        f"Topic: {topic}\n\nStudent errors:\n{listed}\n\n"
        'Provide recommendations as JSON array: ["recommendation 1", "recommendation 2", ...]'
    )
