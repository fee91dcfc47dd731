"""
Configuration module for the Transcript Relay service.

All secrets are read from environment variables.
"""
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server configuration
    port: int = 3000
    host: str = "0.0.0.0"
    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False

    # LLM Configuration
    llm_provider: Literal["mock", "gemini"] = "gemini"
    google_api_key: str = ""
    llm_model: str = "gemini-2.5-flash"
    llm_max_tokens: int | None = None  # unset means no output cap
    llm_temperature: float = 0.7

    # WebSocket relay
    ws_path: str = "/ws/chat"

    # CORS
    cors_origins: str = "*"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
