"""Environment configuration management for the OmegaAIR routing service."""

from pydantic_settings import BaseSettings
from typing import Optional
import logging
import os

class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Server configuration
    APP_NAME: str = "OmegaAIR Routing API"
    APP_VERSION: str = "1.0.0"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Telemetry backend
    REDIS_URL: str = "redis://localhost:6379"
    TELEMETRY_NAMESPACE: str = "llm:telemetry"

    # Routing policy file (None = config/ai-routing.json at the repo root)
    AI_ROUTING_CONFIG_PATH: Optional[str] = None

    # Outbound provider calls
    PROVIDER_TIMEOUT_SECONDS: float = 30.0
    DEFAULT_TEMPERATURE: float = 0.7
    DEFAULT_MAX_TOKENS: int = 1000

    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-3.5-turbo"

    CLAUDE_BASE_URL: str = "https://api.anthropic.com/v1"
    CLAUDE_MODEL: str = "claude-3-5-sonnet-20241022"
    CLAUDE_API_VERSION: str = "2023-06-01"

    MISTRAL_BASE_URL: str = "https://api.mistral.ai/v1"
    MISTRAL_MODEL: str = "mistral-large-latest"

    # CORS settings
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: list[str] = ["*"]
    CORS_HEADERS: list[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Allow extra env vars without error

# Global settings instance
settings = Settings()

def has_credential(env_name: str) -> bool:
    """Check whether a provider credential is present in the environment.

    Read on every call so that status reflects the live environment rather
    than the values captured when ``settings`` was built.
    """
    value = os.environ.get(env_name)
    return value is not None and value.strip() != ""

def get_credential(env_name: str) -> str:
    """Return a provider credential, or an empty string when unset."""
    return (os.environ.get(env_name) or "").strip()

def configure_logging() -> None:
    """Apply LOG_LEVEL and LOG_FORMAT to the root logger."""
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=settings.LOG_FORMAT)

def get_cors_config() -> dict:
    """Get CORS configuration."""
    return {
        "allow_origins": settings.CORS_ORIGINS,
        "allow_credentials": settings.CORS_CREDENTIALS,
        "allow_methods": settings.CORS_METHODS,
        "allow_headers": settings.CORS_HEADERS,
    }
