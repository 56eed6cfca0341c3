"""
LLM Module - Content generation over chat-completion backends.

Components:
- schemas: pydantic models for validated generator output
- prompts: system/user prompt builders
- backends: Groq (httpx) and Gemini chat transports
- content_generator: LLMContentGenerator with fallback content
"""

from src.llm.backends import GeminiChatBackend, GroqChatBackend, IChatBackend, create_chat_backend
from src.llm.content_generator import (
    LLMContentGenerator,
    fallback_flashcards,
    fallback_lesson,
    fallback_quiz,
)
from src.llm.schemas import (
    GeneratedFlashcards,
    GeneratedLesson,
    GeneratedQuiz,
    GeneratedRoadmap,
    LessonContext,
)

__all__ = [
    "IChatBackend",
    "GroqChatBackend",
    "GeminiChatBackend",
    "create_chat_backend",
    "LLMContentGenerator",
    "fallback_lesson",
    "fallback_quiz",
    "fallback_flashcards",
    "GeneratedLesson",
    "GeneratedQuiz",
    "GeneratedFlashcards",
    "GeneratedRoadmap",
    "LessonContext",
]
