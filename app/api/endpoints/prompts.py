"""
Meta prompt API endpoints.
Validate, preview and generate meta prompts from the structured fields.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from app.core.config import Settings
from app.api.deps import get_app_settings, get_orchestrator
from app.models.schemas import (
    CompileResponse,
    ERROR_RESPONSES,
    GeneratePromptRequest,
    GeneratePromptResponse,
    PromptFieldsRequest,
    ValidateResponse,
)
from app.services.llm.cost import estimate_costs
from app.services.llm.orchestrator import GenerationOrchestrator
from app.services.llm.prompt_compiler import compile_prompt
from app.services.llm.streaming import SSE_HEADERS
from app.services.llm.system_prompts import SYSTEM_PROMPT_VERSION
from app.services.llm.validator import ensure_valid, validate_prompt_input

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/prompts", tags=["prompts"], responses=ERROR_RESPONSES)


@router.post("/validate", response_model=ValidateResponse)
async def validate_prompt(
    request: PromptFieldsRequest,
    settings: Settings = Depends(get_app_settings),
):
    """
    Run the field validator without calling any provider.

    Returns the same verdict the generate endpoint applies, plus a token and
    cost estimate for display.
    """
    result = validate_prompt_input(request.to_domain(), max_tokens=settings.max_prompt_tokens)
    return ValidateResponse(
        ok=result.ok,
        reason=result.reason,
        estimated_tokens=result.estimated_tokens,
        estimated_cost=estimate_costs(result.estimated_tokens),
    )


@router.post("/compile", response_model=CompileResponse)
async def compile_preview(
    request: PromptFieldsRequest,
    settings: Settings = Depends(get_app_settings),
):
    """
    Preview the system and user prompt a generation would send.

    Raises:
        ValidationException 400: Invalid input
    """
    data = request.to_domain()
    ensure_valid(data, max_tokens=settings.max_prompt_tokens)
    pair = compile_prompt(data)
    return CompileResponse(
        system_prompt=pair.system_prompt,
        user_prompt=pair.user_prompt,
        system_prompt_version=SYSTEM_PROMPT_VERSION,
    )


@router.post("/generate", response_model=GeneratePromptResponse)
async def generate_prompt(
    request: GeneratePromptRequest,
    x_preferred_provider: Optional[str] = Header(default=None),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """
    Generate a meta prompt from the structured fields.

    The provider is the request's explicit choice, else the
    X-Preferred-Provider header, else the configured default.

    Raises:
        ValidationException 400: Invalid input, no provider contacted
        ConfigException 503: Provider key missing
        ProviderException 400/401/429/502: Provider call failed
    """
    data = request.to_domain()
    options = request.to_options()

    if request.stream:
        provider, body = await orchestrator.stream(
            data,
            provider=request.provider,
            preference=x_preferred_provider,
            options=options,
        )
        logger.info(f"Streaming meta prompt from {provider.value}")
        return StreamingResponse(
            body,
            media_type="text/event-stream",
            headers=SSE_HEADERS,
            background=BackgroundTask(body.close),
        )

    result = await orchestrator.generate(
        data,
        provider=request.provider,
        preference=x_preferred_provider,
        options=options,
    )
    return GeneratePromptResponse(
        meta_prompt=result.content,
        provider=result.provider.value,
        model=result.model,
        usage=result.usage.to_dict(),
    )
