"""
Base provider adapter with common functionality for all LLM providers.

An adapter translates a CompiledPromptPair into one provider's wire format,
issues a single HTTP call and maps the response (or the error) back to the
common GenerationResult / ProviderException shapes. Adapters never retry.
"""
import time
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional, Tuple

import requests

from app.core.config import Settings
from app.core.exceptions import (
    ConfigException,
    ProviderException,
    UpstreamException,
)
from app.models.domain import (
    CompiledPromptPair,
    GenerationOptions,
    GenerationResult,
    Provider,
)
from app.services.llm.observer import GenerationObserver
from app.services.llm.streaming import UpstreamStream

logger = logging.getLogger(__name__)


class ProviderAdapter(ABC):
    """Capability interface shared by every provider variant."""

    provider: Provider

    def __init__(
        self,
        settings: Settings,
        observer: Optional[GenerationObserver] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize provider adapter.

        Args:
            settings: Application settings (holds the provider API key)
            observer: Observability hook; a default one is created if omitted
            session: HTTP session to issue calls with; module-level requests if omitted
        """
        self.settings = settings
        self.observer = observer or GenerationObserver()
        self.http = session or requests
        self.api_key = settings.get_api_key(self.provider.value)

    @property
    def name(self) -> str:
        return self.provider.value

    def _require_api_key(self) -> str:
        """Fail fast, before any outbound call, when the key is missing."""
        if not self.api_key:
            raise ConfigException(self.name)
        return self.api_key

    def resolve_options(self, options: Optional[GenerationOptions] = None) -> GenerationOptions:
        """Fill unset generation options from settings."""
        options = options or GenerationOptions()
        return GenerationOptions(
            model=options.model or self.settings.get_default_model(self.name),
            temperature=(
                options.temperature if options.temperature is not None
                else self.settings.default_temperature
            ),
            max_tokens=options.max_tokens or self.settings.default_max_tokens,
            stream=options.stream,
        )

    def _post(
        self,
        url: str,
        payload: Dict[str, Any],
        model: str,
        headers: Optional[Dict[str, str]] = None,
        stream: bool = False
    ) -> Tuple[requests.Response, float]:
        """
        Issue one POST to the provider and classify non-2xx responses.

        Returns:
            Tuple of (response, duration in seconds)

        Raises:
            ProviderException: Classified provider or transport failure
        """
        request_headers = {"Content-Type": "application/json"}
        if headers:
            request_headers.update(headers)

        self.observer.request_started(self.name, model, url, stream=stream)
        start_time = time.time()

        try:
            response = self.http.post(
                url,
                json=payload,
                headers=request_headers,
                timeout=self.settings.llm_request_timeout,
                stream=stream
            )
        except requests.exceptions.Timeout as e:
            error = UpstreamException(
                self.name, f"Request timeout after {self.settings.llm_request_timeout}s"
            )
            self.observer.request_failed(self.name, model, error, duration=time.time() - start_time)
            raise error from e
        except requests.exceptions.RequestException as e:
            error = UpstreamException(self.name, f"Connection error: {type(e).__name__}")
            self.observer.request_failed(self.name, model, error, duration=time.time() - start_time)
            raise error from e

        duration = time.time() - start_time

        if not 200 <= response.status_code < 300:
            error = self.classify_error(response.status_code, self._error_message(response))
            self.observer.request_failed(
                self.name, model, error, status_code=response.status_code, duration=duration
            )
            response.close()
            raise error

        return response, duration

    def _error_message(self, response: requests.Response) -> Optional[str]:
        """Extract the provider's error message from an error body, if any."""
        try:
            data = response.json()
        except ValueError:
            return None
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict):
                return error.get("message")
            if isinstance(error, str):
                return error
        return None

    def _parse_json(self, response: requests.Response) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamException(
                self.name, f"Invalid JSON response: {str(e)}", upstream_status=response.status_code
            ) from e

    @staticmethod
    def _raw_chunks(response: requests.Response) -> Iterator[bytes]:
        for chunk in response.iter_content(chunk_size=None):
            if chunk:
                yield chunk

    def _iter_body(self, response: requests.Response) -> UpstreamStream:
        """Raw upstream body, chunk by chunk, bound to the response for release."""
        return UpstreamStream(response, self._raw_chunks(response))

    def _complete(
        self,
        url: str,
        payload: Dict[str, Any],
        model: str,
        headers: Optional[Dict[str, str]] = None
    ) -> GenerationResult:
        """Non-streaming call: POST, parse, normalize, report."""
        response, duration = self._post(url, payload, model, headers=headers)
        data = self._parse_json(response)

        try:
            result = self.parse_response(data, model)
        except ProviderException as e:
            self.observer.request_failed(
                self.name, model, e, status_code=response.status_code, duration=duration
            )
            raise

        self.observer.request_completed(
            self.name,
            result.model,
            response.status_code,
            duration,
            usage=result.usage.to_dict(),
            content_length=len(result.content),
        )
        return result

    @abstractmethod
    def classify_error(self, status_code: int, message: Optional[str]) -> ProviderException:
        """Map a non-2xx provider status to an application exception."""
        pass

    @abstractmethod
    def parse_response(self, data: Dict[str, Any], model: str) -> GenerationResult:
        """
        Normalize a successful provider response.

        Raises:
            ProviderException: If the response is a logical failure
        """
        pass

    @abstractmethod
    def generate(
        self,
        pair: CompiledPromptPair,
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        """Generate a meta prompt from a compiled prompt pair."""
        pass

    @abstractmethod
    def open_stream(
        self,
        pair: CompiledPromptPair,
        options: Optional[GenerationOptions] = None
    ) -> UpstreamStream:
        """
        Open a streaming call and return its SSE body.

        The HTTP status is checked before this returns, so failures surface as
        exceptions rather than as a broken stream.
        """
        pass
