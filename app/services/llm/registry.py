"""
Provider adapter registry.

Maps each Provider tag to its adapter class. Supporting another provider
means registering one more ProviderAdapter subclass here.
"""
from typing import Callable, Dict, Optional, Type, Union

import requests

from app.core.config import Settings
from app.core.exceptions import ValidationException
from app.models.domain import Provider
from app.services.llm.base_adapter import ProviderAdapter
from app.services.llm.gemini_adapter import GeminiAdapter
from app.services.llm.observer import GenerationObserver
from app.services.llm.openai_adapter import OpenAIAdapter

AdapterFactory = Callable[[Provider, Settings, Optional[GenerationObserver]], ProviderAdapter]

_ADAPTERS: Dict[Provider, Type[ProviderAdapter]] = {}


def register_adapter(provider: Provider, adapter_cls: Type[ProviderAdapter]) -> None:
    """Register the adapter class used for a provider."""
    _ADAPTERS[provider] = adapter_cls


def available_providers() -> list:
    return [provider.value for provider in _ADAPTERS]


def parse_provider(value: Union[str, Provider]) -> Provider:
    """
    Convert a provider tag to a registered Provider.

    Raises:
        ValidationException: If the tag is unknown or has no adapter
    """
    if isinstance(value, Provider):
        provider = value
    else:
        try:
            provider = Provider(str(value).strip().lower())
        except ValueError:
            raise ValidationException(
                f"Unsupported LLM provider: {value}. "
                f"Must be one of: {', '.join(available_providers())}"
            )

    if provider not in _ADAPTERS:
        raise ValidationException(f"No adapter registered for provider: {provider.value}")
    return provider


def build_adapter(
    provider: Union[str, Provider],
    settings: Settings,
    observer: Optional[GenerationObserver] = None,
    session: Optional[requests.Session] = None
) -> ProviderAdapter:
    """
    Construct a fresh adapter for a provider.

    Args:
        provider: Provider tag or enum member
        settings: Application settings
        observer: Observability hook passed into the adapter
        session: Optional HTTP session (injected in tests)

    Returns:
        ProviderAdapter instance for this call
    """
    adapter_cls = _ADAPTERS[parse_provider(provider)]
    return adapter_cls(settings, observer=observer, session=session)


register_adapter(Provider.OPENAI, OpenAIAdapter)
register_adapter(Provider.GEMINI, GeminiAdapter)
