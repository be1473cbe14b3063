"""
Pydantic models for API request/response validation.
Wire names are camelCase; Python attributes are snake_case.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional, Dict, List, Literal

from app.models.domain import GenerationOptions, StructuredPromptInput


class CamelModel(BaseModel):
    """Base model accepting either the camelCase alias or the field name."""
    model_config = ConfigDict(populate_by_name=True)


# Request Models

class PromptFieldsRequest(CamelModel):
    """The structured prompt fields. Size rules are applied by the field validator."""
    title: Optional[str] = None
    role: str = ""
    personality: Optional[str] = None
    instruction: str = ""
    context: Optional[str] = None
    example: Optional[str] = None

    def to_domain(self) -> StructuredPromptInput:
        return StructuredPromptInput(
            role=self.role,
            instruction=self.instruction,
            personality=self.personality,
            context=self.context,
            example=self.example,
            title=self.title,
        )


class GeneratePromptRequest(PromptFieldsRequest):
    """Request model for meta prompt generation."""
    provider: Optional[Literal["openai", "gemini"]] = None
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1, alias="maxTokens")
    stream: bool = False

    def to_options(self) -> GenerationOptions:
        return GenerationOptions(
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            stream=self.stream,
        )


class ChatMessage(BaseModel):
    """Single chat message for the OpenAI proxy."""
    role: Literal["system", "user", "assistant"]
    content: str


class OpenAICompletionRequest(BaseModel):
    """Request model for the OpenAI chat-completions proxy."""
    messages: List[ChatMessage] = Field(..., min_length=1)
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1)
    stream: bool = False


class GeminiCompletionRequest(CamelModel):
    """Request model for the Gemini generateContent proxy."""
    prompt: str = Field(..., min_length=1)
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    max_output_tokens: Optional[int] = Field(
        default=None, ge=1, le=4000, alias="maxOutputTokens"
    )
    stream: bool = False


class ConnectivityTestRequest(CamelModel):
    """Request model for a live provider connectivity check."""
    provider: Literal["openai", "gemini"] = "gemini"
    test_message: str = Field(default="Hello", min_length=1, alias="testMessage")


# Response Models

class UsageResponse(BaseModel):
    """Provider-reported token usage."""
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class GeneratePromptResponse(CamelModel):
    """Response model for a generated meta prompt."""
    meta_prompt: str = Field(..., alias="metaPrompt")
    provider: str
    model: str
    usage: UsageResponse


class ValidateResponse(CamelModel):
    """Response model for input validation."""
    ok: bool
    reason: Optional[str] = None
    estimated_tokens: int = Field(..., alias="estimatedTokens")
    estimated_cost: Dict[str, float] = Field(..., alias="estimatedCost")


class CompileResponse(CamelModel):
    """Response model for the compiled prompt preview."""
    system_prompt: str = Field(..., alias="systemPrompt")
    user_prompt: str = Field(..., alias="userPrompt")
    system_prompt_version: str = Field(..., alias="systemPromptVersion")


class CompletionResponse(BaseModel):
    """Response model for the provider proxy endpoints."""
    content: str
    model: str
    usage: UsageResponse


class KeyStatusResponse(CamelModel):
    """Masked key diagnostics for one provider."""
    configured: bool
    key_prefix: str = Field(..., alias="keyPrefix")
    key_length: int = Field(..., alias="keyLength")


class KeyDiagnosticsResponse(BaseModel):
    """Key diagnostics for every provider."""
    openai: KeyStatusResponse
    gemini: KeyStatusResponse
    default_provider: str


class ConnectivityTestResponse(BaseModel):
    """Response model for a live provider connectivity check."""
    provider: str
    success: bool
    response: str


class ErrorResponse(BaseModel):
    """Response model for errors."""
    error: str
    detail: Optional[str] = None
    details: Optional[List[Dict[str, Any]]] = None
    status_code: int


# Error shapes produced by the error handling middleware, for the OpenAPI docs
ERROR_RESPONSES = {
    status_code: {"model": ErrorResponse}
    for status_code in (400, 401, 429, 500, 502, 503)
}
