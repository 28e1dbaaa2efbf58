# medmentor/core/config.py
from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --------------------
    # App
    # --------------------
    PROJECT_NAME: str = "MedMentor RAG"
    LOG_LEVEL: str = "INFO"

    # --------------------
    # AI gateway (OpenAI-compatible chat completions)
    # --------------------
    AI_GATEWAY_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AI_GATEWAY_API_KEY", "LOVABLE_API_KEY"),
    )
    AI_GATEWAY_BASE_URL: str = "https://ai.gateway.lovable.dev/v1"
    AI_MODEL: str = "google/gemini-2.5-flash"
    # None means no client-side timeout; a hung upstream hangs the request.
    GATEWAY_TIMEOUT: Optional[float] = None

    # --------------------
    # Database
    # --------------------
    DATABASE_URL: str = "sqlite+aiosqlite:///./medmentor.db"
    SQL_ECHO: bool = False

    # --------------------
    # Retrieval
    # --------------------
    EVIDENCE_LIMIT: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class ClientSettings(BaseSettings):
    """Settings for the terminal chat client (MEDMENTOR_* env vars)."""

    ADVISOR_URL: str = "http://127.0.0.1:8000"
    API_KEY: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="MEDMENTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
