"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    timezone: str = "UTC"
    storage_backend: str = "file"
    data_path: Path = Path("nutrilog-data.json")
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_namespace: str = "default"
    inference_provider: str = "openai"
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def require(value: str | None, name: str) -> str:
    """Return a configured value or fail with the missing setting's name."""
    if value is None or not value.strip():
        raise ValueError(f"Missing required setting: {name}")
    return value
