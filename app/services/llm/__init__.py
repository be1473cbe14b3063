"""
LLM services for the PromptBook application.
Handles prompt validation, compilation and provider calls.
"""

# Validation and compilation
from app.services.llm.validator import (
    validate_prompt_input,
    ensure_valid,
    estimate_token_count,
    MAX_PROMPT_TOKENS,
)
from app.services.llm.prompt_compiler import compile_prompt
from app.services.llm.system_prompts import ACTIVE_SYSTEM_PROMPT, SYSTEM_PROMPT_VERSION

# Provider adapters
from app.services.llm.base_adapter import ProviderAdapter
from app.services.llm.openai_adapter import OpenAIAdapter
from app.services.llm.gemini_adapter import GeminiAdapter
from app.services.llm.registry import build_adapter, register_adapter, parse_provider

# Orchestration
from app.services.llm.orchestrator import GenerationOrchestrator
from app.services.llm.observer import GenerationObserver, mask_secret, redact_url
from app.services.llm.cost import estimate_cost, estimate_costs

__all__ = [
    # Validation and compilation
    "validate_prompt_input",
    "ensure_valid",
    "estimate_token_count",
    "MAX_PROMPT_TOKENS",
    "compile_prompt",
    "ACTIVE_SYSTEM_PROMPT",
    "SYSTEM_PROMPT_VERSION",

    # Provider adapters
    "ProviderAdapter",
    "OpenAIAdapter",
    "GeminiAdapter",
    "build_adapter",
    "register_adapter",
    "parse_provider",

    # Orchestration
    "GenerationOrchestrator",
    "GenerationObserver",
    "mask_secret",
    "redact_url",
    "estimate_cost",
    "estimate_costs",
]
