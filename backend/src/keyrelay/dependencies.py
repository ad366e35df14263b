"""Dependency wiring: builds the dispatcher and exposes it to route handlers."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Request

from keyrelay.adapters.outbound.llm import GeminiTextProvider
from keyrelay.config import Settings, get_settings
from keyrelay.shared.providers import CredentialDispatcher, CredentialPool, SendFn


# ── Settings ─────────────────────────────────────────────────
@lru_cache(maxsize=1)
def get_cached_settings() -> Settings:
    return get_settings()


def build_provider(settings: Settings) -> GeminiTextProvider:
    return GeminiTextProvider(
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout=settings.http_timeout_seconds,
    )


def build_dispatcher(settings: Settings, send: SendFn) -> CredentialDispatcher:
    """Build the pool from settings. Raises ConfigurationError on a bad key list."""
    pool = CredentialPool.from_string(
        settings.credential_string,
        preview_length=settings.key_preview_length,
    )
    return CredentialDispatcher(pool, send, timeout_s=settings.provider_timeout_seconds)


# ── Request-scoped accessors ─────────────────────────────────
def get_dispatcher(request: Request) -> CredentialDispatcher:
    return request.app.state.dispatcher  # type: ignore[no-any-return]


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[no-any-return]
