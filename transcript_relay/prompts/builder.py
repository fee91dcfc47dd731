"""Prompt builder for the relay's system instructions.

Instruction text lives on the server only. The client supplies the transcript
and a language tag; the tag picks one of the fixed instructions below.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

MAX_RESPONSE_WORDS = 100

DEFAULT_LANG = "en-US"

PROMPT_TEMPLATE = '{instruction}\n\nUser: "{transcript}"\nAnswer:'

SYSTEM_INSTRUCTIONS: Mapping[str, str] = MappingProxyType({
    "en-US": (
        "You are Gemini, a conversational assistant.\n"
        f"Answer exactly what the user asks, in English, in at most {MAX_RESPONSE_WORDS} words.\n"
        "- Be clear, direct and concise.\n"
        "- Do not add extra information or personal comments.\n"
        "- Keep the answer coherent and grammatically correct.\n"
        "- Always end the answer with a complete sentence."
    ),
    "es-ES": (
        "Eres Gemini, un asistente conversacional.\n"
        f"Responde exactamente a lo que el usuario pide, en español, en máximo {MAX_RESPONSE_WORDS} palabras.\n"
        "- Sé claro, directo y conciso.\n"
        "- No agregues información extra ni comentarios personales.\n"
        "- Mantén coherencia y buena gramática.\n"
        "- Termina la respuesta siempre con una oración completa."
    ),
    "pt-BR": (
        "Você é o Gemini, um assistente conversacional.\n"
        f"Responda exatamente ao que o usuário pede, em português, em no máximo {MAX_RESPONSE_WORDS} palavras.\n"
        "- Seja claro, direto e conciso.\n"
        "- Não acrescente informações extras nem comentários pessoais.\n"
        "- Mantenha coerência e boa gramática.\n"
        "- Termine a resposta sempre com uma frase completa."
    ),
    "fr-FR": (
        "Tu es Gemini, un assistant conversationnel.\n"
        f"Réponds exactement à ce que l'utilisateur demande, en français, en {MAX_RESPONSE_WORDS} mots maximum.\n"
        "- Sois clair, direct et concis.\n"
        "- N'ajoute ni informations supplémentaires ni commentaires personnels.\n"
        "- Garde une réponse cohérente et grammaticalement correcte.\n"
        "- Termine toujours la réponse par une phrase complète."
    ),
})


@dataclass(frozen=True)
class PromptSpec:
    """Fully resolved prompt for one inbound request."""
    lang: str
    system_instruction: str
    full_prompt: str


def resolve_lang(lang: Optional[str]) -> str:
    """Return the table key used for ``lang``, falling back to the default."""
    if isinstance(lang, str):
        key = lang.strip()
        if key in SYSTEM_INSTRUCTIONS:
            return key
    return DEFAULT_LANG


def select_instruction(lang: Optional[str]) -> str:
    """Select the system instruction for a language tag.

    Unknown, empty and missing tags get the ``DEFAULT_LANG`` instruction.
    """
    return SYSTEM_INSTRUCTIONS[resolve_lang(lang)]


def build_prompt(transcript: str, lang: Optional[str] = None) -> PromptSpec:
    """Build the full prompt sent to the generation service."""
    resolved = resolve_lang(lang)
    instruction = SYSTEM_INSTRUCTIONS[resolved]
    return PromptSpec(
        lang=resolved,
        system_instruction=instruction,
        full_prompt=PROMPT_TEMPLATE.format(instruction=instruction, transcript=transcript),
    )
