"""
Google Gemini generateContent adapter.

Gemini has no distinct system role in this request shape: the system and
user prompt are sent as a single text part. The API key travels as the `key`
query parameter, not as a header.
"""
import json
import logging
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import urlencode

import requests

from app.core.exceptions import (
    ContentBlockedException,
    NoContentException,
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
from app.services.llm.streaming import DONE_EVENT, UpstreamStream, format_sse, iter_sse_data

logger = logging.getLogger(__name__)

SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)

SAFETY_SETTINGS = [
    {"category": category, "threshold": SAFETY_THRESHOLD}
    for category in SAFETY_CATEGORIES
]

BLOCKED_FINISH_REASON = "SAFETY"


class GeminiAdapter(ProviderAdapter):
    """Adapter for the Gemini generateContent API."""

    provider = Provider.GEMINI

    def endpoint_url(self, model: str, method: str = "generateContent", sse: bool = False) -> str:
        """Build the model endpoint URL with the API key as a query parameter."""
        params = {"key": self._require_api_key()}
        if sse:
            params = {"alt": "sse", **params}
        return f"{self.settings.gemini_api_url}/{model}:{method}?{urlencode(params)}"

    def build_payload(self, text: str, options: GenerationOptions) -> Dict[str, Any]:
        return {
            "contents": [{
                "parts": [{"text": text}]
            }],
            "generationConfig": {
                "temperature": options.temperature,
                "maxOutputTokens": options.max_tokens,
                "topK": self.settings.gemini_top_k,
                "topP": self.settings.gemini_top_p,
            },
            "safetySettings": SAFETY_SETTINGS,
        }

    def classify_error(self, status_code: int, message: Optional[str]) -> ProviderException:
        if status_code in (401, 403):
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

    @staticmethod
    def _candidate_text(candidates: List[Dict[str, Any]]) -> Optional[str]:
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        if not parts:
            return None
        return parts[0].get("text")

    def parse_response(self, data: Dict[str, Any], model: str) -> GenerationResult:
        candidates = data.get("candidates") or []

        # A 200 can still be a refusal: check safety before extracting text
        if not candidates:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
            if block_reason:
                raise ContentBlockedException(self.name, reason=block_reason)
        elif candidates[0].get("finishReason") == BLOCKED_FINISH_REASON:
            raise ContentBlockedException(self.name)

        content = self._candidate_text(candidates)
        if not content:
            raise NoContentException(self.name)

        usage = data.get("usageMetadata") or {}
        return GenerationResult(
            content=content,
            model=model,
            provider=self.provider,
            usage=UsageTokens(
                prompt=usage.get("promptTokenCount"),
                completion=usage.get("candidatesTokenCount"),
                total=usage.get("totalTokenCount"),
            ),
        )

    def complete_text(
        self,
        text: str,
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        """
        Run generateContent over a single prompt text.

        Args:
            text: Full prompt text (system and user already combined)
            options: Model, temperature and maxOutputTokens (defaults from settings)

        Returns:
            Normalized GenerationResult
        """
        opts = self.resolve_options(options)
        url = self.endpoint_url(opts.model)
        payload = self.build_payload(text, opts)
        return self._complete(url, payload, opts.model)

    def stream_text(
        self,
        text: str,
        options: Optional[GenerationOptions] = None
    ) -> UpstreamStream:
        """
        Open a streamGenerateContent call.

        Upstream events are re-emitted as `data: {"content": ...}` lines and
        terminated with `data: [DONE]`. A blocked or empty generation emits
        one `data: {"error": ...}` event before the terminator.
        """
        opts = self.resolve_options(options)
        url = self.endpoint_url(opts.model, method="streamGenerateContent", sse=True)
        payload = self.build_payload(text, opts)
        response, _ = self._post(url, payload, opts.model, stream=True)
        return UpstreamStream(response, self._translate_stream(response))

    def _translate_stream(self, response: requests.Response) -> Iterator[bytes]:
        produced_text = False

        for data in iter_sse_data(response.iter_content(chunk_size=None)):
            if not data:
                continue
            try:
                parsed = json.loads(data)
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping unparsable Gemini stream chunk: {e}")
                continue

            candidates = parsed.get("candidates") or []
            block_reason = (parsed.get("promptFeedback") or {}).get("blockReason")
            blocked = (
                (not candidates and block_reason)
                or (candidates and candidates[0].get("finishReason") == BLOCKED_FINISH_REASON)
            )
            if blocked:
                logger.warning(f"Gemini stream blocked: {block_reason or BLOCKED_FINISH_REASON}")
                yield format_sse({"error": ContentBlockedException(self.name).message})
                yield DONE_EVENT
                return

            text = self._candidate_text(candidates)
            if text:
                produced_text = True
                yield format_sse({"content": text})

        if not produced_text:
            yield format_sse({"error": NoContentException(self.name).message})
        yield DONE_EVENT

    def generate(
        self,
        pair: CompiledPromptPair,
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        return self.complete_text(pair.combined(), options)

    def open_stream(
        self,
        pair: CompiledPromptPair,
        options: Optional[GenerationOptions] = None
    ) -> UpstreamStream:
        return self.stream_text(pair.combined(), options)
