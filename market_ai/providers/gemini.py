# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
from __future__ import annotations

from ..core.exceptions import UnsupportedProviderError
from ..models import AIProvider, NormalizedResponse, ProviderConfig
from .base import ProviderAdapter


class GeminiAdapter(ProviderAdapter):
    """Placeholder for Gemini, whose inference runs in the workflow integration."""

    provider = AIProvider.GEMINI
    display_name = "Gemini"

    async def invoke(self, prompt: str, config: ProviderConfig) -> NormalizedResponse:
        raise UnsupportedProviderError(
            "Gemini should be handled via the workflow integration's inference step",
            provider=self.provider.value,
        )
