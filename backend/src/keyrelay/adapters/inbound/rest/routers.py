"""Health, generation and key-stats REST routers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from keyrelay import __version__
from keyrelay.adapters.outbound.llm import clean_json_response
from keyrelay.application.dtos import (
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
    PoolStatsResponse,
)
from keyrelay.config import Settings
from keyrelay.dependencies import get_app_settings, get_dispatcher
from keyrelay.domain.exceptions import ValidationError
from keyrelay.shared.providers import CredentialDispatcher


# ═══════════════════════════════════════════════════════════════
#  Health
# ═══════════════════════════════════════════════════════════════
health_router = APIRouter(tags=["Health"])


@health_router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_app_settings),
    dispatcher: CredentialDispatcher = Depends(get_dispatcher),
) -> HealthResponse:
    return HealthResponse(
        version=__version__,
        environment=settings.app_env.value,
        credentials=dispatcher.pool.size,
    )


@health_router.get("/metrics")
async def prometheus_metrics() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


# ═══════════════════════════════════════════════════════════════
#  Generation
# ═══════════════════════════════════════════════════════════════
generate_router = APIRouter(tags=["Generation"])


@generate_router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={502: {"model": ErrorResponse}},
)
async def generate(
    body: GenerateRequest,
    dispatcher: CredentialDispatcher = Depends(get_dispatcher),
) -> GenerateResponse:
    """Forward a prompt to the provider, rotating keys on failure."""
    if not body.prompt.strip():
        raise ValidationError("prompt must not be blank")
    text = await dispatcher.dispatch(body.prompt)
    if body.clean_json:
        text = clean_json_response(text)
    return GenerateResponse(text=text)


# ═══════════════════════════════════════════════════════════════
#  Key rotation stats
# ═══════════════════════════════════════════════════════════════
keys_router = APIRouter(prefix="/keys", tags=["Key Rotation"])


@keys_router.get("/stats", response_model=PoolStatsResponse)
async def key_stats(
    dispatcher: CredentialDispatcher = Depends(get_dispatcher),
) -> dict:
    """Per-key usage and failure counters, with redacted key previews."""
    return dispatcher.get_stats().to_dict()
