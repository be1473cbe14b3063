"""
Custom exception classes for the PromptBook application.
These exceptions provide meaningful error messages and HTTP status codes.
"""
from typing import Optional


class PromptBookException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationException(PromptBookException):
    """Raised when prompt fields or request data fail validation."""

    def __init__(self, message: str, estimated_tokens: Optional[int] = None):
        super().__init__(
            message=f"Validation error: {message}",
            status_code=400  # Bad Request
        )
        self.reason = message
        self.estimated_tokens = estimated_tokens


class ConfigException(PromptBookException):
    """Raised when server configuration prevents a provider call (missing key, bad default)."""

    def __init__(self, provider: str, message: Optional[str] = None):
        super().__init__(
            message=message or (
                f"{provider} API is not configured. "
                f"Please add {provider.upper()}_API_KEY to your environment variables."
            ),
            status_code=503  # Service Unavailable
        )
        self.provider = provider


class ProviderException(PromptBookException):
    """Base class for failures reported by (or while reaching) an LLM provider."""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int = 502,
        upstream_status: Optional[int] = None
    ):
        super().__init__(message=message, status_code=status_code)
        self.provider = provider
        self.upstream_status = upstream_status


class ProviderAuthException(ProviderException):
    """Raised when the provider rejects the configured credentials."""

    def __init__(self, provider: str, upstream_status: int = 401):
        super().__init__(
            provider=provider,
            message="Invalid API key",
            status_code=401,
            upstream_status=upstream_status
        )


class RateLimitException(ProviderException):
    """Raised when the provider throttles the request. Never retried."""

    def __init__(self, provider: str):
        super().__init__(
            provider=provider,
            message="Rate limit exceeded. Please try again later.",
            status_code=429,
            upstream_status=429
        )


class ProviderBadRequestException(ProviderException):
    """Raised when the provider refuses the request payload."""

    def __init__(self, provider: str, detail: Optional[str] = None):
        super().__init__(
            provider=provider,
            message=detail or f"Invalid request to {provider}",
            status_code=400,
            upstream_status=400
        )
        self.detail = detail


class ContentBlockedException(ProviderException):
    """Raised when a provider safety filter blocks an otherwise successful call."""

    def __init__(self, provider: str, reason: str = "SAFETY"):
        super().__init__(
            provider=provider,
            message="Content was blocked by safety filters. Please modify your input and try again.",
            status_code=400,
            upstream_status=200
        )
        self.reason = reason


class UpstreamException(ProviderException):
    """Raised for any other provider failure; the upstream status is kept."""

    def __init__(self, provider: str, error: str, upstream_status: Optional[int] = None):
        super().__init__(
            provider=provider,
            message=f"{provider} API error: {error}",
            status_code=502,  # Bad Gateway
            upstream_status=upstream_status
        )
        self.error = error


class NoContentException(ProviderException):
    """Raised when the provider call succeeds but returns no text."""

    def __init__(self, provider: str):
        super().__init__(
            provider=provider,
            message="No content was generated. Please try again.",
            status_code=502,
            upstream_status=200
        )
