"""
Field validation for structured prompt input.

Runs before every generation attempt. Pure functions, no I/O.
"""
import math
import logging
from typing import Dict, Tuple

from app.core.exceptions import ValidationException
from app.models.domain import StructuredPromptInput, ValidationResult

logger = logging.getLogger(__name__)

# Rough approximation: 1 token ~= 4 characters
CHARS_PER_TOKEN = 4

# Conservative ceiling for most LLMs
MAX_PROMPT_TOKENS = 4000

# field name -> (label, required, max length)
FIELD_LIMITS: Dict[str, Tuple[str, bool, int]] = {
    "title": ("Title", False, 100),
    "role": ("Role", True, 500),
    "personality": ("Personality", False, 500),
    "instruction": ("Instructions", True, 2000),
    "context": ("Context", False, 2000),
    "example": ("Examples", False, 2000),
}

# Fields that count toward the token estimate, in prompt order
TOKEN_FIELDS = ("role", "personality", "instruction", "context", "example")


def estimate_token_count(text: str) -> int:
    """Estimate the token count of a text."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def estimate_input_tokens(data: StructuredPromptInput) -> int:
    """Estimate the token count of all prompt fields joined together."""
    total_text = " ".join(getattr(data, name) or "" for name in TOKEN_FIELDS)
    return estimate_token_count(total_text)


def validate_prompt_input(
    data: StructuredPromptInput,
    max_tokens: int = MAX_PROMPT_TOKENS
) -> ValidationResult:
    """
    Validate structured prompt fields.

    Checks required fields, then per-field length bounds, then the total
    token estimate. The estimate is reported on every result.

    Args:
        data: Structured prompt input
        max_tokens: Token ceiling for the combined fields

    Returns:
        ValidationResult with ok=False and a reason on the first failure
    """
    estimated_tokens = estimate_input_tokens(data)

    for name, (label, required, _) in FIELD_LIMITS.items():
        value = getattr(data, name)
        if required and not (value or "").strip():
            return ValidationResult(
                ok=False,
                estimated_tokens=estimated_tokens,
                reason=f"{label} is required"
            )

    for name, (label, _, max_length) in FIELD_LIMITS.items():
        value = getattr(data, name) or ""
        if len(value) > max_length:
            return ValidationResult(
                ok=False,
                estimated_tokens=estimated_tokens,
                reason=f"{label} must be less than {max_length} characters"
            )

    if estimated_tokens > max_tokens:
        return ValidationResult(
            ok=False,
            estimated_tokens=estimated_tokens,
            reason=f"Prompt is too long. Estimated {estimated_tokens} tokens (max {max_tokens})"
        )

    return ValidationResult(ok=True, estimated_tokens=estimated_tokens)


def ensure_valid(
    data: StructuredPromptInput,
    max_tokens: int = MAX_PROMPT_TOKENS
) -> ValidationResult:
    """
    Validate input and raise if it is rejected.

    Raises:
        ValidationException: If any check fails
    """
    result = validate_prompt_input(data, max_tokens=max_tokens)
    if not result.ok:
        logger.info(
            f"Prompt input rejected: {result.reason} "
            f"(estimated_tokens={result.estimated_tokens})"
        )
        raise ValidationException(result.reason, estimated_tokens=result.estimated_tokens)
    return result
