# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
from __future__ import annotations

import logging

import httpx

from ..core.exceptions import ConfigurationError
from ..models import AIProvider
from ..settings import Settings
from .base import ProviderAdapter
from .gemini import GeminiAdapter
from .ollama import OllamaAdapter
from .openai_compatible import LMStudioAdapter, SirayAdapter

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """One adapter per provider, all sharing a single HTTP client."""

    def __init__(self, client: httpx.AsyncClient, adapters: dict[AIProvider, ProviderAdapter]):
        missing = [p.value for p in AIProvider if p not in adapters]
        if missing:
            raise ConfigurationError(
                f"No adapter registered for: {', '.join(missing)}", config_key="providers"
            )
        siray = adapters[AIProvider.SIRAY]
        if not isinstance(siray, SirayAdapter):
            raise ConfigurationError(
                f"Siray adapter must be a SirayAdapter, got {type(siray).__name__}",
                config_key="providers",
            )
        self.client = client
        self._adapters = adapters
        self._siray = siray

    def get(self, provider: AIProvider) -> ProviderAdapter:
        return self._adapters[provider]

    @property
    def siray(self) -> SirayAdapter:
        return self._siray

    def __contains__(self, provider: object) -> bool:
        return provider in self._adapters

    async def aclose(self) -> None:
        """Close the shared HTTP client to prevent connection leaks."""
        await self.client.aclose()
        logger.debug("Provider registry HTTP client closed")


def build_registry(
    app_settings: Settings, client: httpx.AsyncClient | None = None
) -> ProviderRegistry:
    """Build the registry from settings; ``client`` lets tests supply a transport."""
    if client is None:
        client = httpx.AsyncClient(timeout=app_settings.adapters.timeout_ms / 1000)

    adapters: dict[AIProvider, ProviderAdapter] = {
        AIProvider.GEMINI: GeminiAdapter(client),
        AIProvider.OLLAMA: OllamaAdapter(client),
        AIProvider.LMSTUDIO: LMStudioAdapter(client, temperature=app_settings.adapters.temperature),
        AIProvider.SIRAY: SirayAdapter(client, api_key=app_settings.providers.siray_api_key),
    }
    logger.info("Provider registry built for %s", ", ".join(p.value for p in adapters))
    return ProviderRegistry(client, adapters)
