import pytest

from app.core.exceptions import ValidationException
from app.models.domain import StructuredPromptInput
from app.services.llm.validator import (
    MAX_PROMPT_TOKENS,
    ensure_valid,
    estimate_input_tokens,
    estimate_token_count,
    validate_prompt_input,
)


def test_estimate_token_count_rounds_up():
    assert estimate_token_count("") == 0
    assert estimate_token_count("abcd") == 1
    assert estimate_token_count("abcde") == 2


def test_estimate_joins_fields_with_spaces():
    data = StructuredPromptInput(role="abcd", instruction="efgh")
    # Empty optional fields still contribute their separators
    assert estimate_input_tokens(data) == estimate_token_count("abcd  efgh  ")


def test_minimal_input_is_valid(chef_input):
    result = validate_prompt_input(chef_input)
    assert result.ok is True
    assert result.reason is None
    assert result.estimated_tokens > 0


@pytest.mark.parametrize("role, instruction, reason", [
    ("", "Write a recipe", "Role is required"),
    ("   ", "Write a recipe", "Role is required"),
    ("Chef", "", "Instructions is required"),
    ("Chef", "\n\t", "Instructions is required"),
])
def test_required_fields(role, instruction, reason):
    result = validate_prompt_input(StructuredPromptInput(role=role, instruction=instruction))
    assert result.ok is False
    assert result.reason == reason


@pytest.mark.parametrize("field, limit, label", [
    ("title", 100, "Title"),
    ("role", 500, "Role"),
    ("personality", 500, "Personality"),
    ("instruction", 2000, "Instructions"),
    ("context", 2000, "Context"),
    ("example", 2000, "Examples"),
])
def test_field_length_limits(field, limit, label):
    values = {"role": "Chef", "instruction": "Write a recipe"}

    values[field] = "x" * limit
    assert validate_prompt_input(StructuredPromptInput(**values)).ok is True

    values[field] = "x" * (limit + 1)
    result = validate_prompt_input(StructuredPromptInput(**values))
    assert result.ok is False
    assert result.reason == f"{label} must be less than {limit} characters"


def test_required_check_runs_before_length_check():
    data = StructuredPromptInput(role="", instruction="x" * 5000)
    assert validate_prompt_input(data).reason == "Role is required"


def test_token_ceiling():
    data = StructuredPromptInput(role="Chef", instruction="x" * 400)
    result = validate_prompt_input(data, max_tokens=50)
    assert result.ok is False
    assert result.reason == f"Prompt is too long. Estimated {result.estimated_tokens} tokens (max 50)"
    assert result.estimated_tokens > 50


def test_default_ceiling():
    assert MAX_PROMPT_TOKENS == 4000


def test_ensure_valid_raises_with_estimate():
    data = StructuredPromptInput(role="Chef", instruction="")
    with pytest.raises(ValidationException) as exc_info:
        ensure_valid(data)
    assert exc_info.value.status_code == 400
    assert exc_info.value.reason == "Instructions is required"
    assert exc_info.value.estimated_tokens is not None


def test_ensure_valid_returns_result(chef_input):
    assert ensure_valid(chef_input).ok is True
