# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
from __future__ import annotations

from ..models import AIProvider, NormalizedResponse, ProviderConfig
from ..resolver import apply_defaults
from .base import ProviderAdapter, join_url


class OllamaAdapter(ProviderAdapter):
    """Ollama's native generate endpoint, non-streaming."""

    provider = AIProvider.OLLAMA
    display_name = "Ollama"

    async def invoke(self, prompt: str, config: ProviderConfig) -> NormalizedResponse:
        config = apply_defaults(config)
        payload = {"model": config.model, "prompt": prompt, "stream": False}
        data = await self._post_json(
            join_url(config.base_url, "/api/generate"), payload, self._create_headers()
        )
        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise self._bad_response("response field")
        return NormalizedResponse.from_text(text)
