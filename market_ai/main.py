# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
MarketAI HTTP API.

Exposes the AI settings operations used by the settings page (fetch, save,
connection test), the effective provider configuration, and a generate
endpoint that goes through the persisted-settings fallback path.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from . import __version__
from .core.exceptions import MarketAIError, ProviderError, StoreError, UnsupportedProviderError
from .dispatcher import ProviderDispatcher
from .models import (
    PROVIDER_DEFAULTS,
    ConnectionTestResult,
    GenerateRequest,
    HealthResponse,
    NormalizedResponse,
    ProviderConfig,
    SettingsRecord,
    SettingsUpdate,
)
from .providers.registry import build_registry
from .services import ai_settings
from .settings import Settings
from .settings import settings as app_settings
from .store import SettingsStore
from .telemetry.logging import configure_logging

logger = structlog.get_logger(__name__)


def create_app(config: Settings | None = None) -> FastAPI:
    """Build the application; collaborators are created in the lifespan."""
    config = config or app_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(config.logging.level, json_logs=config.logging.json_logs)

        store = SettingsStore(config.store.path)
        await store.init()
        registry = build_registry(config)

        app.state.config = config
        app.state.store = store
        app.state.registry = registry
        app.state.dispatcher = ProviderDispatcher(
            registry, config.providers, fallback=config.fallback, store=store
        )
        logger.info(
            "marketai_started",
            version=__version__,
            env_provider=config.providers.ai_provider,
            degraded_mode=config.fallback.degraded_mode,
        )
        try:
            yield
        finally:
            await registry.aclose()
            logger.info("marketai_stopped")

    app = FastAPI(
        title="MarketAI",
        description="AI provider settings and invocation for the market app",
        version=__version__,
        lifespan=lifespan,
    )

    @app.exception_handler(MarketAIError)
    async def marketai_exception_handler(request: Request, exc: MarketAIError) -> JSONResponse:
        if isinstance(exc, StoreError):
            status_code = 503
        elif isinstance(exc, UnsupportedProviderError):
            status_code = 400
        elif isinstance(exc, ProviderError):
            status_code = 502
        else:
            status_code = 500
        logger.error("request_failed", path=request.url.path, error=exc.message)
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__)

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/api/ai/providers")
    async def list_providers() -> list[dict[str, Any]]:
        return [
            {
                "provider": provider.value,
                "label": defaults.label,
                "description": defaults.description,
                "default_base_url": defaults.base_url,
                "default_model": defaults.model,
                "requires_api_key": defaults.requires_api_key,
                "accepts_api_key": defaults.accepts_api_key,
                "accepts_base_url": defaults.accepts_base_url,
            }
            for provider, defaults in PROVIDER_DEFAULTS.items()
        ]

    @app.get("/api/ai/settings", response_model=SettingsRecord)
    async def get_settings(store: SettingsStore = Depends(get_store)) -> SettingsRecord:
        settings = await ai_settings.get_ai_settings(store)
        return settings.with_masked_key()

    @app.put("/api/ai/settings")
    async def update_settings(
        params: SettingsUpdate, store: SettingsStore = Depends(get_store)
    ) -> dict[str, Any]:
        result = await ai_settings.update_ai_settings(store, params)
        return {**result, "settings": result["settings"].with_masked_key()}

    @app.post("/api/ai/settings/test", response_model=ConnectionTestResult)
    async def test_settings(
        params: ProviderConfig, dispatcher: ProviderDispatcher = Depends(get_dispatcher)
    ) -> ConnectionTestResult:
        # Fallback fields sent by the settings form are ignored here.
        return await ai_settings.check_provider_connection(dispatcher, params)

    @app.get("/api/ai/config")
    async def get_config(
        request: Request, store: SettingsStore = Depends(get_store)
    ) -> dict[str, Any]:
        config = await ai_settings.get_ai_provider_config(
            store, request.app.state.config.providers
        )
        return config.masked()

    @app.post("/api/ai/generate", response_model=NormalizedResponse)
    async def generate(
        body: GenerateRequest, dispatcher: ProviderDispatcher = Depends(get_dispatcher)
    ) -> NormalizedResponse:
        return await dispatcher.call_with_settings(body.prompt)

    return app


def get_store(request: Request) -> SettingsStore:
    return request.app.state.store


def get_dispatcher(request: Request) -> ProviderDispatcher:
    return request.app.state.dispatcher


app = create_app()


def main():
    """Main entry point for the MarketAI server."""
    import uvicorn

    uvicorn.run(
        "market_ai.main:app",
        host=app_settings.server.host,
        port=app_settings.server.port,
        reload=app_settings.server.debug,
        log_level=app_settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
