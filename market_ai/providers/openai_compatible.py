# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Adapters for OpenAI-compatible chat completion servers (LM Studio, Siray.ai).
"""

from __future__ import annotations

from typing import Any

import httpx

from ..core.exceptions import MissingCredentialError
from ..models import AIProvider, NormalizedResponse, ProviderConfig
from ..resolver import apply_defaults
from .base import ProviderAdapter, join_url


class OpenAICompatibleAdapter(ProviderAdapter):
    """POST a single user message to ``{base_url}/chat/completions``."""

    temperature: float | None = None

    def _build_payload(self, prompt: str, model: str | None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        return payload

    async def _chat_completion(
        self, prompt: str, config: ProviderConfig, api_key: str | None
    ) -> NormalizedResponse:
        config = apply_defaults(config)
        data = await self._post_json(
            join_url(config.base_url, "/chat/completions"),
            self._build_payload(prompt, config.model),
            self._create_headers(api_key),
        )
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise self._bad_response("choices[0].message.content") from None
        if not isinstance(text, str):
            raise self._bad_response("choices[0].message.content")
        return NormalizedResponse.from_text(text)


class LMStudioAdapter(OpenAICompatibleAdapter):
    """LM Studio; the bearer token is optional for self-hosted servers."""

    provider = AIProvider.LMSTUDIO
    display_name = "LM Studio"

    def __init__(self, client: httpx.AsyncClient, temperature: float = 0.7) -> None:
        super().__init__(client)
        self.temperature = temperature

    async def invoke(self, prompt: str, config: ProviderConfig) -> NormalizedResponse:
        return await self._chat_completion(prompt, config, config.api_key)


class SirayAdapter(OpenAICompatibleAdapter):
    """Siray.ai; refuses to call out without an API key."""

    provider = AIProvider.SIRAY
    display_name = "Siray"

    def __init__(self, client: httpx.AsyncClient, api_key: str | None = None) -> None:
        super().__init__(client)
        self._env_api_key = api_key

    def has_credentials(self, config: ProviderConfig | None = None) -> bool:
        return bool((config and config.api_key) or self._env_api_key)

    async def invoke(self, prompt: str, config: ProviderConfig) -> NormalizedResponse:
        api_key = config.api_key or self._env_api_key
        if not api_key:
            raise MissingCredentialError("Siray API Key missing", provider=self.provider.value)
        return await self._chat_completion(prompt, config, api_key)
