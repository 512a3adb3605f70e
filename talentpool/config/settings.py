"""
Application settings and configuration management.

Uses pydantic-settings for environment variable loading.
"""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "TalentPool"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # AI gateway (OpenAI-compatible chat completions)
    ai_gateway_host: str = ""
    ai_gateway_token: str = ""
    ai_chat_endpoint: str = "/v1/chat/completions"
    ai_model: str = "gemini-2.0-flash"
    ai_timeout_seconds: float = 60.0

    # Voice interview vendor
    vapi_api_key: str = ""
    vapi_base_url: str = "https://api.vapi.ai"
    vapi_webhook_secret: str = ""
    interview_max_duration_seconds: int = 20 * 60

    # Lifecycle
    retake_cooldown_minutes: int = 60
    scoring_stale_after_seconds: int = 15 * 60
    reconcile_interval_seconds: int = 5 * 60

    # Profile store (empty = in-memory)
    database_url: str = ""

    # Langfuse observability
    langfuse_enabled: bool = False
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    # CORS - stored as comma-separated string in env
    # Uses validation_alias to read from CORS_ORIGINS env var
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        validation_alias="cors_origins"
    )

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def ai_configured(self) -> bool:
        return bool(self.ai_gateway_host and self.ai_gateway_token)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
