"""
Domain models for business logic.
These are internal representations separate from API schemas.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from enum import Enum


class Provider(Enum):
    """LLM provider enumeration."""
    OPENAI = "openai"
    GEMINI = "gemini"

    @classmethod
    def values(cls) -> list:
        return [p.value for p in cls]


@dataclass
class StructuredPromptInput:
    """The five structured prompt fields plus an optional title."""
    role: str
    instruction: str
    personality: Optional[str] = None
    context: Optional[str] = None
    example: Optional[str] = None
    title: Optional[str] = None


@dataclass
class ValidationResult:
    """Outcome of the field validator."""
    ok: bool
    estimated_tokens: int
    reason: Optional[str] = None


@dataclass(frozen=True)
class CompiledPromptPair:
    """System and user prompt derived from a StructuredPromptInput."""
    system_prompt: str
    user_prompt: str

    def combined(self) -> str:
        """Single text block for providers without a distinct system role."""
        return f"{self.system_prompt}\n\n{self.user_prompt}"


@dataclass
class UsageTokens:
    """Provider-reported token usage. Every count is best-effort."""
    prompt: Optional[int] = None
    completion: Optional[int] = None
    total: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire shape shared by both providers."""
        return {
            "prompt_tokens": self.prompt,
            "completion_tokens": self.completion,
            "total_tokens": self.total,
        }


@dataclass
class GenerationOptions:
    """Per-call generation parameters; unset values fall back to settings."""
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: bool = False


@dataclass
class GenerationResult:
    """Normalized result returned by every provider adapter."""
    content: str
    model: str
    provider: Provider
    usage: UsageTokens = field(default_factory=UsageTokens)
