"""Application configuration."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, enum.Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Centralised, validated configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────
    app_name: str = "keyrelay"
    app_env: Environment = Environment.DEVELOPMENT
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # ── Gemini ───────────────────────────────────────────────
    gemini_api_key: str = ""
    # Multiple keys (comma-separated for rotation)
    gemini_api_keys: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # ── Rotation ─────────────────────────────────────────────
    provider_timeout_seconds: float = 0.0  # 0 = no per-attempt timeout
    http_timeout_seconds: float = 60.0
    # Previews are also capped at half the key length.
    key_preview_length: int = Field(10, ge=1, le=16)

    # ── Derived helpers ──────────────────────────────────────
    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION

    @property
    def credential_string(self) -> str:
        """Comma-separated key list; the single-key setting is appended last."""
        parts = [p for p in (self.gemini_api_keys, self.gemini_api_key) if p.strip()]
        return ",".join(parts)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()


def get_settings(**overrides: Any) -> Settings:
    """Factory that allows test-time overrides."""
    return Settings(**overrides)
