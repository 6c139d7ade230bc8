"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    supabase_anon_key: str
    openai_api_key: str
    openai_model: str = "gpt-4o-mini"
    openai_max_output_tokens: int = 2000
    openai_temperature: float = 0.7
    openai_store: bool = False
    generation_timeout_seconds: float = 60.0
    wizard_session_ttl_seconds: int = 3600
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def functions_base_url(self) -> str:
        """Base URL for Supabase edge functions."""
        return f"{self.supabase_url.rstrip('/')}/functions/v1"
