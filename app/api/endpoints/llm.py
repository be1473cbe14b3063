"""
Provider proxy API endpoints.

Thin server-side proxies so provider keys never leave the backend, plus key
diagnostics and a live connectivity check.
"""
import asyncio
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from app.core.config import Settings
from app.api.deps import (
    get_adapter_factory,
    get_app_settings,
    get_gemini_adapter,
    get_observer,
    get_openai_adapter,
)
from app.models.domain import CompiledPromptPair, GenerationOptions, Provider
from app.models.schemas import (
    CompletionResponse,
    ConnectivityTestRequest,
    ConnectivityTestResponse,
    ERROR_RESPONSES,
    GeminiCompletionRequest,
    KeyDiagnosticsResponse,
    OpenAICompletionRequest,
)
from app.services.llm.gemini_adapter import GeminiAdapter
from app.services.llm.observer import GenerationObserver
from app.services.llm.openai_adapter import OpenAIAdapter
from app.services.llm.registry import AdapterFactory
from app.services.llm.streaming import SSE_HEADERS
from app.services.llm.system_prompts import CONNECTIVITY_TEST_SYSTEM

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/llm", tags=["llm"], responses=ERROR_RESPONSES)

CONNECTIVITY_TEST_MAX_TOKENS = 50


@router.post("/openai", response_model=CompletionResponse)
async def openai_completion(
    request: OpenAICompletionRequest,
    adapter: OpenAIAdapter = Depends(get_openai_adapter),
):
    """
    Proxy a chat completion to OpenAI.

    With stream=true the upstream SSE body is passed through unmodified and
    ends with `data: [DONE]`.
    """
    messages = [message.model_dump() for message in request.messages]
    options = GenerationOptions(
        model=request.model,
        temperature=request.temperature,
        max_tokens=request.max_tokens,
        stream=request.stream,
    )

    if request.stream:
        body = await asyncio.to_thread(adapter.stream_messages, messages, options)
        return StreamingResponse(
            body,
            media_type="text/event-stream",
            headers=SSE_HEADERS,
            background=BackgroundTask(body.close),
        )

    result = await asyncio.to_thread(adapter.complete_messages, messages, options)
    return CompletionResponse(content=result.content, model=result.model, usage=result.usage.to_dict())


@router.post("/gemini", response_model=CompletionResponse)
async def gemini_completion(
    request: GeminiCompletionRequest,
    adapter: GeminiAdapter = Depends(get_gemini_adapter),
):
    """
    Proxy a single prompt to Gemini generateContent.

    Streams are re-emitted as `data: {"content": ...}` events.
    """
    options = GenerationOptions(
        model=request.model,
        temperature=request.temperature,
        max_tokens=request.max_output_tokens,
        stream=request.stream,
    )

    if request.stream:
        body = await asyncio.to_thread(adapter.stream_text, request.prompt, options)
        return StreamingResponse(
            body,
            media_type="text/event-stream",
            headers=SSE_HEADERS,
            background=BackgroundTask(body.close),
        )

    result = await asyncio.to_thread(adapter.complete_text, request.prompt, options)
    return CompletionResponse(content=result.content, model=result.model, usage=result.usage.to_dict())


@router.get("/test", response_model=KeyDiagnosticsResponse)
async def key_diagnostics(
    settings: Settings = Depends(get_app_settings),
    observer: GenerationObserver = Depends(get_observer),
):
    """Report which provider keys are configured. Keys are masked to a short prefix."""
    return KeyDiagnosticsResponse(
        openai=observer.key_status("openai", settings.get_api_key("openai")),
        gemini=observer.key_status("gemini", settings.get_api_key("gemini")),
        default_provider=settings.default_provider,
    )


@router.post("/test", response_model=ConnectivityTestResponse)
async def connectivity_test(
    request: ConnectivityTestRequest,
    settings: Settings = Depends(get_app_settings),
    adapter_factory: AdapterFactory = Depends(get_adapter_factory),
    observer: GenerationObserver = Depends(get_observer),
):
    """
    Send a short live request to a provider.

    Raises:
        ConfigException 503: Provider key missing
        ProviderException: The provider call failed
    """
    provider = Provider(request.provider)
    adapter = adapter_factory(provider, settings, observer)
    pair = CompiledPromptPair(system_prompt=CONNECTIVITY_TEST_SYSTEM, user_prompt=request.test_message)
    options = GenerationOptions(temperature=0.0, max_tokens=CONNECTIVITY_TEST_MAX_TOKENS)

    result = await asyncio.to_thread(adapter.generate, pair, options)
    logger.info(f"Connectivity test succeeded for {provider.value}")

    return ConnectivityTestResponse(provider=provider.value, success=True, response=result.content)
