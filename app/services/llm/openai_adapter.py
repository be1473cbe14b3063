"""
OpenAI chat-completions adapter.
"""
import logging
from typing import Any, Dict, List, Optional

from app.core.exceptions import (
    ProviderAuthException,
    ProviderBadRequestException,
    ProviderException,
    RateLimitException,
    UpstreamException,
)
from app.models.domain import (
    CompiledPromptPair,
    GenerationOptions,
    GenerationResult,
    Provider,
    UsageTokens,
)
from app.services.llm.base_adapter import ProviderAdapter
from app.services.llm.streaming import UpstreamStream

logger = logging.getLogger(__name__)


class OpenAIAdapter(ProviderAdapter):
    """Adapter for the OpenAI chat-completions API."""

    provider = Provider.OPENAI

    @staticmethod
    def build_messages(pair: CompiledPromptPair) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": pair.system_prompt},
            {"role": "user", "content": pair.user_prompt},
        ]

    @staticmethod
    def build_payload(messages: List[Dict[str, str]], options: GenerationOptions) -> Dict[str, Any]:
        return {
            "model": options.model,
            "messages": messages,
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
            "stream": options.stream,
        }

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._require_api_key()}"}

    def classify_error(self, status_code: int, message: Optional[str]) -> ProviderException:
        if status_code == 401:
            return ProviderAuthException(self.name, upstream_status=status_code)
        if status_code == 429:
            return RateLimitException(self.name)
        if status_code == 400:
            return ProviderBadRequestException(self.name, message)
        return UpstreamException(
            self.name,
            message or f"HTTP {status_code}",
            upstream_status=status_code
        )

    def parse_response(self, data: Dict[str, Any], model: str) -> GenerationResult:
        choices = data.get("choices") or []
        message = (choices[0].get("message") or {}) if choices else {}
        content = message.get("content") or ""

        if not content:
            logger.warning("OpenAI returned empty content")

        usage = data.get("usage") or {}
        return GenerationResult(
            content=content,
            model=data.get("model") or model,
            provider=self.provider,
            usage=UsageTokens(
                prompt=usage.get("prompt_tokens"),
                completion=usage.get("completion_tokens"),
                total=usage.get("total_tokens"),
            ),
        )

    def complete_messages(
        self,
        messages: List[Dict[str, str]],
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        """
        Run a chat completion over arbitrary messages.

        Args:
            messages: List of message dictionaries with 'role' and 'content'
            options: Model, temperature and max_tokens (defaults from settings)

        Returns:
            Normalized GenerationResult
        """
        headers = self._auth_headers()
        opts = self.resolve_options(options)
        opts.stream = False
        payload = self.build_payload(messages, opts)
        return self._complete(self.settings.openai_api_url, payload, opts.model, headers=headers)

    def stream_messages(
        self,
        messages: List[Dict[str, str]],
        options: Optional[GenerationOptions] = None
    ) -> UpstreamStream:
        """Open a streaming chat completion and pass the upstream SSE bytes through unmodified."""
        headers = self._auth_headers()
        opts = self.resolve_options(options)
        opts.stream = True
        payload = self.build_payload(messages, opts)
        response, _ = self._post(
            self.settings.openai_api_url, payload, opts.model, headers=headers, stream=True
        )
        return self._iter_body(response)

    def generate(
        self,
        pair: CompiledPromptPair,
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        return self.complete_messages(self.build_messages(pair), options)

    def open_stream(
        self,
        pair: CompiledPromptPair,
        options: Optional[GenerationOptions] = None
    ) -> UpstreamStream:
        return self.stream_messages(self.build_messages(pair), options)
