"""Adapters for external services (LLM generation)."""
from .llm_adapter import GeminiAdapter, LLMAdapter, MockLLMAdapter, create_llm_adapter

__all__ = [
    "LLMAdapter",
    "GeminiAdapter",
    "MockLLMAdapter",
    "create_llm_adapter",
]
