"""
Application configuration using Pydantic Settings.
All configuration values can be overridden via environment variables or .env file.
"""
from pydantic_settings import BaseSettings
from pathlib import Path
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    app_name: str = "PromptBook API"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    log_to_console: bool = False
    cors_origins: List[str] = ["*"]

    # Provider secrets (server-side only, never returned to clients)
    openai_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None

    # Provider endpoints
    openai_api_url: str = "https://api.openai.com/v1/chat/completions"
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta/models"

    # Generation defaults
    default_provider: str = "openai"
    openai_model: str = "gpt-4o-mini"
    gemini_model: str = "gemini-1.5-flash"
    default_temperature: float = 0.7
    default_max_tokens: int = 2000
    gemini_top_k: int = 40
    gemini_top_p: float = 0.95

    # Input ceiling for the structured prompt fields (estimated tokens)
    max_prompt_tokens: int = 4000

    # Seconds before an outbound provider call is abandoned
    llm_request_timeout: float = 120.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    def get_api_key(self, provider: str) -> Optional[str]:
        """Get the configured API key for a provider, or None when unset."""
        keys = {
            "openai": self.openai_api_key,
            "gemini": self.gemini_api_key,
        }

        if provider not in keys:
            raise ValueError(f"Unknown provider: {provider}. Available providers: {list(keys.keys())}")

        return keys[provider] or None

    def get_default_model(self, provider: str) -> str:
        """Get the default model identifier for a provider."""
        models = {
            "openai": self.openai_model,
            "gemini": self.gemini_model,
        }

        if provider not in models:
            raise ValueError(f"Unknown provider: {provider}. Available providers: {list(models.keys())}")

        return models[provider]

    def has_provider_key(self, provider: str) -> bool:
        """Check if a provider has an API key configured."""
        try:
            return self.get_api_key(provider) is not None
        except ValueError:
            return False


# Global settings instance (lazily initialized)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
