"""Configuration utilities for the DocChat service."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent

STORE_BACKENDS = ("sql", "memory")
CONTEXT_SCOPES = ("document", "latest")
PARSER_ENGINES = ("auto", "fitz", "pdfium")


def _load_environment() -> None:
    """Load environment variables from a ``.env`` file if present."""

    explicit_path = os.getenv("DOCCHAT_ENV_FILE")
    candidates = []

    if explicit_path:
        candidates.append(Path(explicit_path))

    candidates.append(PROJECT_ROOT / ".env")

    for candidate in candidates:
        try_path = candidate.expanduser()
        if try_path.exists():
            load_dotenv(try_path, override=False)


_load_environment()


def _split_csv(raw: str | None) -> Tuple[str, ...]:
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _cors_origin_regex_default() -> str | None:
    """Return the default CORS origin regex allowing local network hosts."""

    raw = os.getenv(
        "CORS_ALLOW_ORIGIN_REGEX",
        r"http://(?:localhost|127\.0\.0\.1|0\.0\.0\.0|(?:\d{1,3}\.){3}\d{1,3})(?::\d{1,5})?",
    )
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


class Settings(BaseModel):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(
        default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./docchat.db")
    )
    store_backend: str = Field(
        default_factory=lambda: os.getenv("DOCCHAT_STORE", "sql")
    )
    max_upload_size: int = Field(
        default_factory=lambda: int(os.getenv("MAX_UPLOAD_SIZE", str(25 * 1024 * 1024)))
    )
    allowed_mimetypes: Tuple[str, ...] = Field(
        default_factory=lambda: _split_csv(
            os.getenv("ALLOWED_MIMETYPES", "application/pdf")
        )
    )
    cors_allow_origins: Tuple[str, ...] = Field(
        default_factory=lambda: _split_csv(os.getenv("CORS_ALLOW_ORIGINS"))
    )
    cors_allow_origin_regex: str | None = Field(default_factory=_cors_origin_regex_default)
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "info"))
    parser_engine: str = Field(
        default_factory=lambda: os.getenv("PARSER_ENGINE", "auto")
    )
    openrouter_api_key: str | None = Field(
        default_factory=lambda: os.getenv("OPENROUTER_API_KEY")
    )
    openrouter_url: str = Field(
        default_factory=lambda: os.getenv(
            "OPENROUTER_URL", "https://openrouter.ai/api/v1/chat/completions"
        )
    )
    openrouter_model: str = Field(
        default_factory=lambda: os.getenv(
            "OPENROUTER_MODEL", "google/gemini-2.0-flash-001"
        )
    )
    openrouter_site_url: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_SITE_URL", "http://localhost:8000")
    )
    openrouter_title: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_X_TITLE", "DocChat")
    )
    llm_temperature: float = Field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.2"))
    )
    llm_max_tokens: int = Field(
        default_factory=lambda: int(os.getenv("LLM_MAX_TOKENS", "1024"))
    )
    llm_timeout_s: int = Field(
        default_factory=lambda: int(os.getenv("LLM_TIMEOUT_S", "120"))
    )
    context_max_chars: int = Field(
        default_factory=lambda: int(os.getenv("CONTEXT_MAX_CHARS", "30000"))
    )
    context_min_chars: int = Field(
        default_factory=lambda: int(os.getenv("CONTEXT_MIN_CHARS", "100"))
    )
    context_scope: str = Field(
        default_factory=lambda: os.getenv("DOCCHAT_CONTEXT_SCOPE", "document")
    )

    @field_validator("allowed_mimetypes", mode="after")
    @classmethod
    def _normalise_mimetypes(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            return ("application/pdf",)
        return tuple(dict.fromkeys(item.lower() for item in value))

    @field_validator("store_backend", mode="after")
    @classmethod
    def _validate_store_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in STORE_BACKENDS:
            raise ValueError(f"DOCCHAT_STORE must be one of {STORE_BACKENDS}")
        return value

    @field_validator("context_scope", mode="after")
    @classmethod
    def _validate_context_scope(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in CONTEXT_SCOPES:
            raise ValueError(f"DOCCHAT_CONTEXT_SCOPE must be one of {CONTEXT_SCOPES}")
        return value

    @field_validator("parser_engine", mode="after")
    @classmethod
    def _normalise_parser_engine(cls, value: str) -> str:
        value = (value or "auto").strip().lower()
        return value if value in PARSER_ENGINES else "auto"

    @field_validator("llm_temperature", mode="after")
    @classmethod
    def _clamp_temperature(cls, value: float) -> float:
        return max(0.0, min(2.0, value))

    @field_validator("context_max_chars", "context_min_chars", mode="after")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        return max(0, value)


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached settings so that subsequent calls reload from the environment."""

    get_settings.cache_clear()
