"""Tests for the prompt builder."""
import pytest

from transcript_relay.prompts import (
    DEFAULT_LANG,
    SYSTEM_INSTRUCTIONS,
    build_prompt,
    resolve_lang,
    select_instruction,
)


class TestSelectInstruction:
    """Tests for select_instruction."""

    @pytest.mark.parametrize("lang", sorted(SYSTEM_INSTRUCTIONS))
    def test_supported_tags_have_instructions(self, lang):
        instruction = select_instruction(lang)

        assert instruction
        assert instruction == SYSTEM_INSTRUCTIONS[lang]

    def test_instructions_differ_across_languages(self):
        assert select_instruction("en-US") != select_instruction("es-ES")
        assert len(set(SYSTEM_INSTRUCTIONS.values())) == len(SYSTEM_INSTRUCTIONS)

    def test_default_is_a_table_entry(self):
        assert DEFAULT_LANG == "en-US"
        assert DEFAULT_LANG in SYSTEM_INSTRUCTIONS

    @pytest.mark.parametrize("lang", [None, "", "   ", "xx-YY", "klingon", "EN_us"])
    def test_unknown_tags_fall_back_to_default(self, lang):
        assert select_instruction(lang) == SYSTEM_INSTRUCTIONS[DEFAULT_LANG]
        assert resolve_lang(lang) == DEFAULT_LANG

    def test_surrounding_whitespace_is_ignored(self):
        assert resolve_lang(" es-ES ") == "es-ES"

    def test_instruction_fixes_word_budget_and_tone(self):
        instruction = select_instruction("en-US")

        assert "100 words" in instruction
        assert "clear, direct and concise" in instruction

    def test_spanish_instruction(self):
        assert "máximo 100 palabras" in select_instruction("es-ES")


class TestBuildPrompt:
    """Tests for build_prompt."""

    def test_full_prompt_template(self):
        spec = build_prompt("What is 2+2?", "en-US")

        assert spec.lang == "en-US"
        assert spec.system_instruction == SYSTEM_INSTRUCTIONS["en-US"]
        assert spec.full_prompt == (
            SYSTEM_INSTRUCTIONS["en-US"] + '\n\nUser: "What is 2+2?"\nAnswer:'
        )

    def test_missing_lang_matches_default(self):
        assert build_prompt("hola").full_prompt == build_prompt("hola", "en-US").full_prompt

    def test_unknown_lang_resolves_to_default(self):
        assert build_prompt("hola", "zz").lang == DEFAULT_LANG

    def test_transcript_with_braces_is_kept_verbatim(self):
        spec = build_prompt("print({x})", "fr-FR")

        assert spec.full_prompt.endswith('User: "print({x})"\nAnswer:')

    def test_deterministic(self):
        assert build_prompt("hi", "pt-BR") == build_prompt("hi", "pt-BR")
