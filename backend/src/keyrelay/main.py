"""FastAPI application entry-point.

Assembles routers, middleware, exception handlers, and lifecycle hooks.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from keyrelay import __version__
from keyrelay.adapters.inbound.rest.routers import (
    generate_router,
    health_router,
    keys_router,
)
from keyrelay.config import Settings, get_settings
from keyrelay.dependencies import build_dispatcher, build_provider
from keyrelay.shared.errors import register_exception_handlers
from keyrelay.shared.middleware import AccessLogMiddleware, RequestIdMiddleware
from keyrelay.shared.observability import configure_logging
from keyrelay.shared.providers import SendFn

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifecycle — startup & shutdown hooks.

    The credential pool is built here; a missing or placeholder-only key
    list raises ConfigurationError and the app never starts serving.
    """
    settings: Settings = app.state.settings
    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.is_production,
    )
    logger.info("application_starting", env=settings.app_env.value)

    provider = None
    send: SendFn | None = app.state.send
    if send is None:
        provider = build_provider(settings)
        send = provider.send

    try:
        app.state.dispatcher = build_dispatcher(settings, send)
        yield
    finally:
        if provider is not None:
            await provider.close()
        logger.info("application_shutdown")


def create_app(settings: Settings | None = None, *, send: SendFn | None = None) -> FastAPI:
    """Application factory.

    ``send`` replaces the Gemini HTTP provider, e.g. with a stub in tests.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Forwards prompts to Gemini across a rotating pool of API keys.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.send = send

    # ── Middleware (last added = outermost) ───────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    api_v1 = "/api/v1"
    app.include_router(health_router, prefix=api_v1)
    app.include_router(generate_router, prefix=api_v1)
    app.include_router(keys_router, prefix=api_v1)

    return app


# Uvicorn entry-point
app = create_app()
