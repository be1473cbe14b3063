"""
Dependency injection for FastAPI endpoints.
Provides cached settings and per-request factory functions for services.
"""
from functools import lru_cache, partial
from typing import Optional

import requests
from fastapi import Depends

from app.core.config import Settings, get_settings
from app.models.domain import Provider
from app.services.llm.gemini_adapter import GeminiAdapter
from app.services.llm.observer import GenerationObserver
from app.services.llm.openai_adapter import OpenAIAdapter
from app.services.llm.orchestrator import GenerationOrchestrator
from app.services.llm.registry import AdapterFactory, build_adapter


@lru_cache()
def get_app_settings() -> Settings:
    """
    Get application settings (cached).

    Returns:
        Settings instance
    """
    return get_settings()


def get_observer() -> GenerationObserver:
    """Get the observability hook handed to adapters."""
    return GenerationObserver()


def get_http_session() -> Optional[requests.Session]:
    """
    Get the HTTP session adapters issue calls with.

    Returns None so adapters use module-level requests; tests override this.
    """
    return None


def get_adapter_factory(
    session: Optional[requests.Session] = Depends(get_http_session)
) -> AdapterFactory:
    """
    Get the provider adapter factory.

    Returns:
        Callable building a fresh adapter per call
    """
    return partial(build_adapter, session=session)


def get_orchestrator(
    settings: Settings = Depends(get_app_settings),
    adapter_factory: AdapterFactory = Depends(get_adapter_factory),
    observer: GenerationObserver = Depends(get_observer)
) -> GenerationOrchestrator:
    """
    Get a generation orchestrator for this request.

    Returns:
        GenerationOrchestrator instance
    """
    return GenerationOrchestrator(settings, adapter_factory=adapter_factory, observer=observer)


# Provider adapters for the proxy endpoints

def get_openai_adapter(
    settings: Settings = Depends(get_app_settings),
    adapter_factory: AdapterFactory = Depends(get_adapter_factory),
    observer: GenerationObserver = Depends(get_observer)
) -> OpenAIAdapter:
    """
    Get OpenAI adapter.

    Returns:
        OpenAIAdapter instance
    """
    return adapter_factory(Provider.OPENAI, settings, observer)


def get_gemini_adapter(
    settings: Settings = Depends(get_app_settings),
    adapter_factory: AdapterFactory = Depends(get_adapter_factory),
    observer: GenerationObserver = Depends(get_observer)
) -> GeminiAdapter:
    """
    Get Gemini adapter.

    Returns:
        GeminiAdapter instance
    """
    return adapter_factory(Provider.GEMINI, settings, observer)
