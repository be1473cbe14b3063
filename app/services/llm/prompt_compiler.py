"""
Prompt compiler: renders structured fields into a system/user prompt pair.

Output is a pure function of the input and the active system prompt
template, so regenerating or duplicating a prompt reproduces the exact
request that was sent the first time.
"""
import logging
from enum import Enum
from typing import List, Optional

from app.models.domain import StructuredPromptInput, CompiledPromptPair
from app.services.llm.system_prompts import ACTIVE_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class PromptField(Enum):
    """Labeled sections of the user prompt, in render order."""
    ROLE = "role"
    PERSONALITY = "personality"
    INSTRUCTION = "instruction"
    CONTEXT = "context"
    EXAMPLE = "example"

    @property
    def label(self) -> str:
        return self.name.capitalize()


# Rendered in place of an omitted optional field
FALLBACK_PHRASES = {
    PromptField.PERSONALITY: "Not specified. Use a clear, professional tone suited to the role.",
    PromptField.CONTEXT: "No additional context provided. Infer reasonable assumptions from the role and instruction.",
    PromptField.EXAMPLE: "No examples provided. Propose illustrative examples where they help.",
}

USER_PROMPT_PREAMBLE = "Create a comprehensive meta prompt from these components:"

USER_PROMPT_CLOSING = "Synthesize these into a single, cohesive prompt that maximizes effectiveness."


def render_section(field: PromptField, value: Optional[str]) -> str:
    """Render one labeled section, substituting the fallback phrase when empty."""
    text = (value or "").strip()
    if not text:
        text = FALLBACK_PHRASES.get(field, "")
    return f"{field.label}: {text}"


def build_user_prompt(data: StructuredPromptInput) -> str:
    """Build the user prompt from the structured fields."""
    parts: List[str] = [USER_PROMPT_PREAMBLE]
    for field in PromptField:
        parts.append(render_section(field, getattr(data, field.value)))
    parts.append(USER_PROMPT_CLOSING)
    return "\n\n".join(parts)


def compile_prompt(
    data: StructuredPromptInput,
    system_prompt: str = ACTIVE_SYSTEM_PROMPT
) -> CompiledPromptPair:
    """
    Compile structured input into a CompiledPromptPair.

    Args:
        data: Structured prompt fields (expected to be validated already)
        system_prompt: Static system template, defaults to the active version

    Returns:
        CompiledPromptPair with the system and user prompt
    """
    user_prompt = build_user_prompt(data)

    logger.debug(
        f"Compiled prompt pair: system={len(system_prompt)} chars, "
        f"user={len(user_prompt)} chars"
    )

    return CompiledPromptPair(system_prompt=system_prompt, user_prompt=user_prompt)
