# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""Fake HTTP responses and settings builders for testing."""

from __future__ import annotations

from typing import Any

import httpx

from market_ai.settings import FallbackSettings, ProviderEnvSettings, Settings

__all__ = [
    "FakePost",
    "chat_ok",
    "ollama_ok",
    "make_settings",
]


class FakePost:
    """Stand-in for ``httpx.AsyncClient.post`` returning queued results in order."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self._results: list[httpx.Response | Exception] = []

    def queue(self, *results: httpx.Response | Exception) -> FakePost:
        self._results.extend(results)
        return self

    async def __call__(self, url, json=None, headers=None):
        self.calls.append({"url": str(url), "json": json, "headers": headers or {}})
        if not self._results:
            raise AssertionError(f"Unexpected request to {url}")
        result = self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def ollama_ok(text: str) -> httpx.Response:
    return httpx.Response(200, json={"model": "llama3.2", "response": text, "done": True})


def chat_ok(text: str) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "id": "chatcmpl-1",
            "object": "chat.completion",
            "choices": [{"index": 0, "message": {"role": "assistant", "content": text}}],
        },
    )


def make_settings(degraded_mode: str = "placeholder", **provider_env: Any) -> Settings:
    return Settings(
        providers=ProviderEnvSettings(**provider_env),
        fallback=FallbackSettings(degraded_mode=degraded_mode),
    )
