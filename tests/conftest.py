# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Shared test fixtures for the MarketAI test suite.

This module provides fixtures for:
- A provider environment with no variables leaking in from the host
- A fake ``post`` for the shared HTTP client that records outgoing requests
- A provider registry and dispatcher wired to that fake
- A temporary SQLite settings store
"""

from __future__ import annotations

import httpx
import pytest

from market_ai.dispatcher import ProviderDispatcher
from market_ai.providers.registry import ProviderRegistry, build_registry
from market_ai.settings import DatabaseSettings, FallbackSettings, ProviderEnvSettings
from market_ai.store import SettingsStore
from tests.fixtures.mocks import FakePost, make_settings

PROVIDER_ENV_VARS = [
    "AI_PROVIDER",
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "GEMINI_MODEL",
    "OLLAMA_BASE_URL",
    "OLLAMA_MODEL",
    "LMSTUDIO_BASE_URL",
    "LMSTUDIO_MODEL",
    "LMSTUDIO_API_KEY",
    "SIRAY_API_KEY",
    "SIRAY_BASE_URL",
    "SIRAY_MODEL",
    "FALLBACK_DEGRADED_MODE",
    "FALLBACK_DEGRADED_TEXT",
    "DATABASE_URL",
    "DB_URL",
    "PROVIDER_TIMEOUT_MS",
    "LMSTUDIO_TEMPERATURE",
    "LOG_LEVEL",
    "LOG_JSON",
    "HOST",
    "PORT",
    "DEBUG",
]


@pytest.fixture(autouse=True)
def clean_provider_env(monkeypatch):
    """Keep host environment variables out of every test."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_post() -> FakePost:
    return FakePost()


@pytest.fixture
def provider_env() -> ProviderEnvSettings:
    return ProviderEnvSettings()


@pytest.fixture
async def http_client(monkeypatch, fake_post):
    client = httpx.AsyncClient()
    monkeypatch.setattr(client, "post", fake_post)
    yield client
    await client.aclose()


@pytest.fixture
def registry(http_client) -> ProviderRegistry:
    return build_registry(make_settings(siray_api_key="sk-siray-test"), client=http_client)


@pytest.fixture
async def store(tmp_path) -> SettingsStore:
    db = DatabaseSettings(database_url=f"sqlite:///{tmp_path / 'settings.db'}")
    settings_store = SettingsStore(db.path)
    await settings_store.init()
    return settings_store


@pytest.fixture
def dispatcher(registry, store) -> ProviderDispatcher:
    return ProviderDispatcher(
        registry,
        ProviderEnvSettings(siray_api_key="sk-siray-test"),
        fallback=FallbackSettings(),
        store=store,
    )
