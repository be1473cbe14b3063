"""
Observability hook for provider calls.

Adapters receive a GenerationObserver and report through it instead of
logging on their own. Secrets are masked here, in one place: API keys are
reduced to a short prefix and the `key` query parameter is stripped from
URLs before anything is emitted.
"""
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

from app.core.logging import log_event

MASK_PREFIX_LENGTH = 6

SECRET_QUERY_PARAMS = frozenset({"key", "api_key"})


def mask_secret(value: Optional[str], prefix_length: int = MASK_PREFIX_LENGTH) -> str:
    """Mask a secret down to a short prefix, e.g. 'sk-pro...'."""
    if not value:
        return "NOT_FOUND"
    if len(value) <= prefix_length:
        return "..."
    return value[:prefix_length] + "..."


def redact_url(url: str) -> str:
    """Replace secret query parameter values in a URL."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (name, "***" if name.lower() in SECRET_QUERY_PARAMS else value)
        for name, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query, safe="*"), parts.fragment))


class GenerationObserver:
    """Structured, redaction-aware event sink for LLM calls."""

    def __init__(self, logger_name: str = "app.services.llm"):
        self.logger_name = logger_name

    def _emit(
        self,
        level: str,
        function: str,
        event: str,
        message: str,
        context: Dict[str, Any],
        exc_info: Optional[Exception] = None
    ) -> None:
        log_event(
            level=level,
            logger=self.logger_name,
            function=function,
            operation="llm_call",
            event=event,
            message=message,
            context=context,
            exc_info=exc_info
        )

    def request_started(self, provider: str, model: str, url: str, stream: bool = False) -> None:
        self._emit(
            "INFO",
            "request_started",
            "llm_request_started",
            f"Calling {provider} model {model}",
            {"provider": provider, "model": model, "url": redact_url(url), "stream": stream},
        )

    def request_completed(
        self,
        provider: str,
        model: str,
        status_code: int,
        duration: float,
        usage: Optional[Dict[str, Any]] = None,
        content_length: Optional[int] = None
    ) -> None:
        self._emit(
            "INFO",
            "request_completed",
            "llm_request_completed",
            f"{provider} API response: status={status_code}, duration={duration:.2f}s",
            {
                "provider": provider,
                "model": model,
                "status_code": status_code,
                "duration_seconds": duration,
                "usage": usage,
                "content_length": content_length,
            },
        )

    def request_failed(
        self,
        provider: str,
        model: str,
        error: Exception,
        status_code: Optional[int] = None,
        duration: Optional[float] = None
    ) -> None:
        self._emit(
            "ERROR",
            "request_failed",
            "llm_request_failed",
            f"{provider} API call failed: {error}",
            {
                "provider": provider,
                "model": model,
                "status_code": status_code,
                "duration_seconds": duration,
                "error_type": type(error).__name__,
            },
        )

    def key_status(self, provider: str, api_key: Optional[str]) -> Dict[str, Any]:
        """Diagnostics for a provider key; only the masked prefix leaves this method."""
        return {
            "configured": bool(api_key),
            "keyPrefix": mask_secret(api_key),
            "keyLength": len(api_key) if api_key else 0,
        }
