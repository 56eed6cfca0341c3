"""
Chat-completion backends for content generation.

- GroqChatBackend: OpenAI-compatible /chat/completions over httpx, with
  exponential-backoff retries for timeouts, transport errors and 5xx
- GeminiChatBackend: Google Gemini via google.generativeai (lazy client)

Both return the raw assistant text; parsing and validation happen in
src/llm/schemas.py. Failures surface as GenerationError.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx
from loguru import logger

from config import Settings, get_settings
from src.core.exceptions import GenerationError


class IChatBackend(Protocol):
    """Single-turn chat completion."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> str: ...

    async def close(self) -> None: ...


class GroqChatBackend:
    """HTTP client for Groq's OpenAI-compatible chat completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = "llama-3.3-70b-versatile",
        base_url: str = "https://api.groq.com/openai/v1",
        timeout_seconds: float = 45.0,
        retry_attempts: int = 3,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the backend.

        Args:
            api_key: Groq API key
            model: Chat model name
            base_url: OpenAI-compatible API root
            timeout_seconds: Per-request HTTP timeout
            retry_attempts: Attempts for retryable failures
            client: Pre-built httpx client (tests)
        """
        if not api_key:
            raise ValueError("GROQ_API_KEY is required")

        self.model = model
        self.base_url = base_url.rstrip("/")
        self.retry_attempts = max(1, retry_attempts)
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Authorization": f"Bearer {api_key}"},
        )
        logger.info("Groq chat backend initialized (model={})", self.model)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "top_p": 1,
            "stream": False,
        }
        last_error: Exception | None = None

        for attempt in range(self.retry_attempts):
            try:
                response = await self.client.post(f"{self.base_url}/chat/completions", json=payload)
                response.raise_for_status()
                return self._extract_text(self._decode(response))

            except httpx.TimeoutException as e:
                last_error = e
                logger.warning(
                    "LLM timeout on attempt {}/{}", attempt + 1, self.retry_attempts
                )

            except httpx.HTTPStatusError as e:
                last_error = e
                if e.response.status_code < 500:
                    # Client errors (bad key, bad request) will not fix themselves
                    raise GenerationError(
                        f"LLM request rejected with status {e.response.status_code}"
                    ) from e
                logger.warning(
                    "LLM server error {} on attempt {}/{}",
                    e.response.status_code,
                    attempt + 1,
                    self.retry_attempts,
                )

            except httpx.RequestError as e:
                last_error = e
                logger.warning(
                    "LLM request error on attempt {}/{}: {}", attempt + 1, self.retry_attempts, e
                )

            if attempt < self.retry_attempts - 1:
                await self._backoff(attempt)

        raise GenerationError(
            f"LLM request failed after {self.retry_attempts} attempts: {last_error}"
        ) from last_error

    async def _backoff(self, attempt: int) -> None:
        await asyncio.sleep(2**attempt)  # 1s, 2s, 4s

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise GenerationError(
                f"LLM response is not JSON (status {response.status_code})"
            ) from e

    @staticmethod
    def _extract_text(data: dict[str, Any]) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError("LLM response has no message content") from e
        return content or ""


class GeminiChatBackend:
    """Google Gemini backend using google.generativeai."""

    def __init__(self, api_key: str, model_name: str = "gemini-2.0-flash"):
        if not api_key:
            raise ValueError("Gemini API key required")
        self.api_key = api_key
        self.model_name = model_name
        self._configured = False

    def _model(self, system_prompt: str):
        import google.generativeai as genai

        if not self._configured:
            genai.configure(api_key=self.api_key)
            self._configured = True
        return genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=system_prompt,
        )

    async def close(self) -> None:
        return None

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> str:
        try:
            response = await self._model(system_prompt).generate_content_async(
                user_prompt,
                generation_config={
                    "temperature": temperature,
                    "top_p": 0.95,
                    "max_output_tokens": max_tokens,
                },
            )
            return response.text or ""
        except Exception as e:  # SDK raises many unrelated types; normalize them
            raise GenerationError(f"Gemini generation failed: {e}") from e


def attempt_timeout(total_seconds: float, retry_attempts: int) -> float:
    """Per-request timeout so every attempt and its backoff fit in total_seconds."""
    attempts = max(1, retry_attempts)
    backoff_total = 2 ** (attempts - 1) - 1
    return max(1.0, (total_seconds - backoff_total) / attempts)


def create_chat_backend(settings: Settings | None = None) -> IChatBackend:
    """Build the backend selected by settings.llm_provider."""
    settings = settings or get_settings()

    if settings.llm_provider == "gemini":
        return GeminiChatBackend(
            api_key=settings.gemini_api_key or "",
            model_name=settings.ai_model,
        )

    return GroqChatBackend(
        api_key=settings.groq_api_key or "",
        model=settings.groq_model,
        base_url=settings.groq_base_url,
        timeout_seconds=attempt_timeout(settings.llm_timeout_seconds, settings.llm_retry_attempts),
        retry_attempts=settings.llm_retry_attempts,
    )
