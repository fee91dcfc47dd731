"""
LLM Adapter - Streaming interface and implementations for generation providers.

This module provides:
- Abstract LLMAdapter interface (streaming text deltas)
- GeminiAdapter backed by google-generativeai
- MockLLMAdapter with scripted deltas for tests and local runs
"""
import asyncio
import os
from abc import ABC, abstractmethod
from typing import AsyncGenerator

import structlog

from transcript_relay.config import get_settings
from transcript_relay.exceptions import ConfigurationError, UpstreamError

logger = structlog.get_logger()


class LLMAdapter(ABC):
    """
    Abstract base class for streaming LLM adapters.

    A call to ``stream`` is lazy, finite and not restartable. It may fail
    before the first delta or in the middle of the stream.
    """

    @abstractmethod
    def stream(self, prompt: str) -> AsyncGenerator[str, None]:
        """
        Stream a completion for a single prompt string.

        Args:
            prompt: Fully built prompt

        Yields:
            Non-empty text deltas in generation order

        Raises:
            UpstreamError: if the provider call fails
        """

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if the LLM service is available."""


class MockLLMAdapter(LLMAdapter):
    """
    Mock LLM adapter for testing.

    Yields a scripted list of deltas. ``fail_after`` makes the stream raise
    after that many deltas (0 fails before the first one).
    """

    def __init__(
        self,
        deltas: list[str] | None = None,
        fail_after: int | None = None,
        error_message: str = "Mock upstream failure",
        delay: float = 0.0,
    ) -> None:
        self.deltas = list(deltas) if deltas is not None else ["This is ", "a mock ", "response."]
        self.fail_after = fail_after
        self.error_message = error_message
        self.delay = delay
        self.call_count = 0
        self.prompts: list[str] = []

    @property
    def last_prompt(self) -> str | None:
        return self.prompts[-1] if self.prompts else None

    async def stream(self, prompt: str) -> AsyncGenerator[str, None]:
        """Yield the scripted deltas."""
        self.call_count += 1
        self.prompts.append(prompt)

        for index, delta in enumerate(self.deltas):
            if self.fail_after is not None and index >= self.fail_after:
                break
            if self.delay:
                await asyncio.sleep(self.delay)
            yield delta

        if self.fail_after is not None:
            logger.debug("mock_llm_failure", after=self.fail_after)
            raise UpstreamError(details={"error": self.error_message})

    async def is_available(self) -> bool:
        """Mock LLM is always available."""
        return True
# Finish reasons that mean the candidate was cut off by a content filter
BLOCKED_FINISH_REASONS = frozenset({
    "SAFETY",
    "RECITATION",
    "BLOCKLIST",
    "PROHIBITED_CONTENT",
    "SPII",
})


def _enum_name(value) -> str:
    return getattr(value, "name", str(value))


def extract_delta(chunk) -> str:
    """
    Text carried by one streamed ``GenerateContentResponse`` chunk.

    Chunks without parts (e.g. the final chunk that only carries a
    ``finish_reason``) yield an empty delta.

    Raises:
        UpstreamError: if the prompt or the candidate was blocked
    """
    candidates = chunk.candidates
    if not candidates:
        feedback = getattr(chunk, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback else None
        if block_reason:
            raise UpstreamError(details={"error": f"Prompt blocked: {_enum_name(block_reason)}"})
        return ""

    candidate = candidates[0]
    finish_reason = _enum_name(candidate.finish_reason)
    if finish_reason in BLOCKED_FINISH_REASONS:
        raise UpstreamError(details={"error": f"Response blocked: {finish_reason}"})

    return "".join(part.text for part in candidate.content.parts if part.text)


class GeminiAdapter(LLMAdapter):
    """
    Google Gemini adapter using the google-generativeai client.

    Streams with ``generate_content_async(..., stream=True)``.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = None

    def _get_client(self):
        """Get or create the Gemini client."""
        if self._client is None:
            try:
                import google.generativeai as genai
            except ImportError:
                raise RuntimeError("google-generativeai not installed. Run: pip install google-generativeai")
            genai.configure(api_key=self.api_key)
            self._client = genai.GenerativeModel(self.model)
        return self._client

    def _generation_config(self) -> dict:
        generation_config = {}
        if self.max_tokens is not None:
            generation_config["max_output_tokens"] = self.max_tokens
        if self.temperature is not None:
            generation_config["temperature"] = self.temperature
        return generation_config

    async def stream(self, prompt: str) -> AsyncGenerator[str, None]:
        """Stream a completion from Google Gemini."""
        chunk_count = 0
        try:
            client = self._get_client()
            response = await client.generate_content_async(
                prompt,
                generation_config=self._generation_config(),
                stream=True,
            )
            async for chunk in response:
                text = extract_delta(chunk)
                if not text:
                    continue
                chunk_count += 1
                yield text

        except UpstreamError as e:
            logger.error(
                "gemini_stream_blocked",
                model=self.model,
                chunk_count=chunk_count,
                error=e.details.get("error"),
            )
            raise

        except Exception as e:
            logger.error(
                "gemini_stream_error",
                model=self.model,
                chunk_count=chunk_count,
                error=str(e),
            )
            raise UpstreamError(details={"error": str(e)}) from e

        logger.debug("gemini_stream_complete", model=self.model, chunk_count=chunk_count)

    async def is_available(self) -> bool:
        """Check if the Gemini client can be created."""
        try:
            return self._get_client() is not None
        except Exception as e:
            logger.warning("gemini_unavailable", error=str(e))
            return False


def create_llm_adapter(provider: str | None = None) -> LLMAdapter:
    """
    Factory function to create an LLM adapter.

    Args:
        provider: LLM provider name ("mock", "gemini").
                  If None, uses setting from config.

    Returns:
        Configured LLMAdapter instance

    Raises:
        ConfigurationError: if the provider is unknown or lacks credentials

    Environment variables required per provider:
        - gemini: GOOGLE_API_KEY
    """
    settings = get_settings()
    provider = provider or settings.llm_provider

    if provider == "mock":
        logger.warning("using_mock_llm_adapter")
        return MockLLMAdapter()

    if provider == "gemini":
        api_key = settings.google_api_key or os.getenv("GOOGLE_API_KEY")
        if not api_key:
            raise ConfigurationError(
                "GOOGLE_API_KEY is required when LLM_PROVIDER is 'gemini'. "
                "Set LLM_PROVIDER=mock to run without a model."
            )
        return GeminiAdapter(
            api_key=api_key,
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        )

    raise ConfigurationError(f"Unknown LLM provider: {provider}")
