"""
Generation orchestrator.

Validates and compiles structured input, picks a provider and delegates one
call to that provider's adapter. Stateless: every call builds its own
adapter, and a provider failure is raised to the caller as is. There is no
retry and no fallback to another provider.
"""
import asyncio
import time
import logging
from typing import Optional, Tuple, Union

from app.core.config import Settings
from app.core.exceptions import ConfigException, PromptBookException, ValidationException
from app.core.logging import (
    log_operation_start,
    log_operation_complete,
    log_operation_error,
)
from app.models.domain import (
    CompiledPromptPair,
    GenerationOptions,
    GenerationResult,
    Provider,
    StructuredPromptInput,
)
from app.services.llm.observer import GenerationObserver
from app.services.llm.prompt_compiler import compile_prompt
from app.services.llm.registry import AdapterFactory, build_adapter, parse_provider
from app.services.llm.streaming import UpstreamStream
from app.services.llm.validator import ensure_valid

logger = logging.getLogger(__name__)

ProviderChoice = Optional[Union[str, Provider]]


class GenerationOrchestrator:
    """Runs the validate -> compile -> adapter pipeline for one request."""

    def __init__(
        self,
        settings: Settings,
        adapter_factory: AdapterFactory = build_adapter,
        observer: Optional[GenerationObserver] = None
    ):
        self.settings = settings
        self.adapter_factory = adapter_factory
        self.observer = observer or GenerationObserver()

    def resolve_provider(
        self,
        explicit: ProviderChoice = None,
        preference: ProviderChoice = None
    ) -> Provider:
        """
        Pick the provider for a call.

        Precedence: explicit request parameter, then the user's stored
        preference, then the configured default. A stale preference falls
        through to the default.

        Raises:
            ValidationException: Explicit provider is unknown
            ConfigException: DEFAULT_PROVIDER is unknown
        """
        if explicit:
            return parse_provider(explicit)

        if preference:
            try:
                return parse_provider(preference)
            except ValidationException:
                logger.warning(f"Ignoring unknown preferred provider: {preference}")

        default = self.settings.default_provider
        try:
            return parse_provider(default)
        except ValidationException as e:
            raise ConfigException(
                str(default),
                message=f"Default provider '{default}' is not supported. "
                        f"Set DEFAULT_PROVIDER to one of: {', '.join(Provider.values())}"
            ) from e

    def prepare(self, data: StructuredPromptInput) -> CompiledPromptPair:
        """Validate and compile input. Raises ValidationException before any adapter exists."""
        ensure_valid(data, max_tokens=self.settings.max_prompt_tokens)
        return compile_prompt(data)

    async def generate(
        self,
        data: StructuredPromptInput,
        provider: ProviderChoice = None,
        preference: ProviderChoice = None,
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        """
        Generate a meta prompt.

        Args:
            data: Structured prompt fields
            provider: Explicit provider choice from the request
            preference: Stored user preference, used when no explicit choice
            options: Model / temperature / max tokens overrides

        Returns:
            Normalized GenerationResult

        Raises:
            ValidationException: Input rejected, no provider contacted
            ConfigException: Provider key missing, no provider contacted
            ProviderException: The single provider call failed
        """
        pair = self.prepare(data)
        selected = self.resolve_provider(provider, preference)
        adapter = self.adapter_factory(selected, self.settings, self.observer)

        log_operation_start(
            logger=__name__,
            function="generate",
            operation="meta_prompt_generation",
            context={"provider": selected.value, "title": data.title},
        )
        start_time = time.time()

        try:
            result = await asyncio.to_thread(adapter.generate, pair, options)
        except PromptBookException as e:
            log_operation_error(
                logger=__name__,
                function="generate",
                operation="meta_prompt_generation",
                error=e,
                context={"provider": selected.value, "status_code": e.status_code},
            )
            raise

        log_operation_complete(
            logger=__name__,
            function="generate",
            operation="meta_prompt_generation",
            context={
                "provider": result.provider.value,
                "model": result.model,
                "content_length": len(result.content),
            },
            duration=time.time() - start_time,
        )
        return result

    async def stream(
        self,
        data: StructuredPromptInput,
        provider: ProviderChoice = None,
        preference: ProviderChoice = None,
        options: Optional[GenerationOptions] = None
    ) -> Tuple[Provider, UpstreamStream]:
        """
        Open a streaming generation.

        The upstream status has already been checked when this returns, so
        errors raise here instead of inside the stream.

        Returns:
            Tuple of (selected provider, SSE body bound to the upstream response)
        """
        pair = self.prepare(data)
        selected = self.resolve_provider(provider, preference)
        adapter = self.adapter_factory(selected, self.settings, self.observer)

        logger.info(f"Opening {selected.value} stream for meta prompt generation")

        body = await asyncio.to_thread(adapter.open_stream, pair, options)
        return selected, body
