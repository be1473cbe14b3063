"""
Rough per-request cost estimates shown next to the token estimate.
"""
from typing import Dict, Union

from app.models.domain import Provider

# USD per token
RATES: Dict[Provider, Dict[str, float]] = {
    Provider.OPENAI: {
        "input": 0.01 / 1000,   # $0.01 per 1K tokens
        "output": 0.03 / 1000,  # $0.03 per 1K tokens
    },
    Provider.GEMINI: {
        "input": 0.00025 / 1000,
        "output": 0.0005 / 1000,
    },
}

# Output is assumed to be twice the input
OUTPUT_RATIO = 2


def estimate_cost(token_count: int, provider: Union[str, Provider] = Provider.OPENAI) -> float:
    """Estimate the USD cost of a generation from its input token count."""
    rate = RATES[Provider(provider)]
    return (token_count * rate["input"]) + (token_count * OUTPUT_RATIO * rate["output"])


def estimate_costs(token_count: int) -> Dict[str, float]:
    """Estimate cost for every known provider."""
    return {provider.value: estimate_cost(token_count, provider) for provider in RATES}
