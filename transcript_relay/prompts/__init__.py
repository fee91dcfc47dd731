"""Prompt construction."""

from transcript_relay.prompts.builder import (
    DEFAULT_LANG,
    SYSTEM_INSTRUCTIONS,
    PromptSpec,
    build_prompt,
    resolve_lang,
    select_instruction,
)

__all__ = [
    "DEFAULT_LANG",
    "SYSTEM_INSTRUCTIONS",
    "PromptSpec",
    "build_prompt",
    "resolve_lang",
    "select_instruction",
]
