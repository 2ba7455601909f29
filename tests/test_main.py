# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""API tests driving the FastAPI app through its lifespan."""

from __future__ import annotations

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from market_ai import __version__
from market_ai.main import create_app
from market_ai.settings import (
    DatabaseSettings,
    FallbackSettings,
    LoggingSettings,
    ProviderEnvSettings,
    Settings,
)
from market_ai.store import SettingsStore
from tests.fixtures.mocks import chat_ok, ollama_ok


@pytest.fixture
def app_settings(tmp_path) -> Settings:
    return Settings(
        providers=ProviderEnvSettings(siray_api_key="sk-siray-1234"),
        store=DatabaseSettings(database_url=f"sqlite:///{tmp_path / 'api.db'}"),
        fallback=FallbackSettings(),
        logging=LoggingSettings(level="WARNING", json_logs=False),
    )


@pytest.fixture
def client(app_settings, monkeypatch, fake_post):
    with TestClient(create_app(app_settings)) as test_client:
        monkeypatch.setattr(test_client.app.state.registry.client, "post", fake_post)
        yield test_client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": __version__}


def test_providers_listing(client):
    response = client.get("/api/ai/providers")

    assert response.status_code == 200
    by_name = {p["provider"]: p for p in response.json()}
    assert set(by_name) == {"gemini", "ollama", "lmstudio", "siray"}
    assert by_name["ollama"]["default_base_url"] == "http://host.docker.internal:11434"
    assert by_name["siray"]["requires_api_key"] is True
    assert by_name["lmstudio"]["requires_api_key"] is False


def test_settings_default_before_first_save(client):
    response = client.get("/api/ai/settings")

    assert response.status_code == 200
    body = response.json()
    assert body["provider"] == "gemini"
    assert body["enable_fallback"] is True
    assert body["fallback_provider"] == "siray"


def test_save_then_fetch_settings(client):
    response = client.put(
        "/api/ai/settings",
        json={"provider": "ollama", "model": "mistral", "fallback_provider": "lmstudio"},
    )

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["settings"]["provider"] == "ollama"

    fetched = client.get("/api/ai/settings").json()
    assert fetched["model"] == "mistral"
    assert fetched["fallback_provider"] == "lmstudio"
    assert fetched["is_active"] is True


def test_save_rejects_fallback_equal_to_provider(client):
    response = client.put(
        "/api/ai/settings", json={"provider": "siray", "fallback_provider": "siray"}
    )

    assert response.status_code == 422


def test_connection_test_endpoint(client, fake_post):
    fake_post.queue(ollama_ok("Connection successful"))

    response = client.post("/api/ai/settings/test", json={"provider": "ollama"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Connection successful",
        "response": "Connection successful",
    }


def test_connection_test_failure_is_200(client, fake_post):
    fake_post.queue(httpx.Response(500))

    response = client.post("/api/ai/settings/test", json={"provider": "lmstudio"})

    assert response.status_code == 200
    assert response.json()["success"] is False


def test_connection_test_ignores_fallback_fields(client, fake_post):
    fake_post.queue(chat_ok("Connection successful"))

    response = client.post(
        "/api/ai/settings/test",
        json={"provider": "siray", "api_key": "sk-form", "fallback_provider": "siray"},
    )

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert fake_post.calls[0]["headers"]["Authorization"] == "Bearer sk-form"


def test_settings_responses_mask_api_key(client):
    saved = client.put(
        "/api/ai/settings", json={"provider": "siray", "api_key": "sk-secret-4321"}
    )

    assert saved.json()["settings"]["api_key"] == "****4321"
    assert client.get("/api/ai/settings").json()["api_key"] == "****4321"


def test_saving_echoed_masked_key_keeps_stored_key(client, app_settings):
    client.put("/api/ai/settings", json={"provider": "siray", "api_key": "sk-secret-4321"})
    client.put(
        "/api/ai/settings",
        json={"provider": "siray", "api_key": "****4321", "model": "siray-1.0"},
    )

    active = asyncio.run(SettingsStore(app_settings.store.path).get_active_settings())
    assert active.api_key == "sk-secret-4321"
    assert active.model == "siray-1.0"


def test_config_masks_api_key(client):
    client.put("/api/ai/settings", json={"provider": "lmstudio", "api_key": "lm-secret-9876"})

    body = client.get("/api/ai/config").json()

    assert body["provider"] == "lmstudio"
    assert body["api_key"] == "****9876"
    assert body["base_url"] == "http://host.docker.internal:14321/v1"


def test_generate_with_default_settings_is_unsupported(client, fake_post):
    response = client.post("/api/ai/generate", json={"prompt": "hi"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "unsupported_provider"
    assert fake_post.calls == []


def test_generate_uses_saved_provider(client, fake_post):
    client.put("/api/ai/settings", json={"provider": "ollama"})
    fake_post.queue(ollama_ok("market summary"))

    response = client.post("/api/ai/generate", json={"prompt": "summarize"})

    assert response.status_code == 200
    assert response.json()["candidates"][0]["content"]["parts"][0]["text"] == "market summary"


def test_generate_falls_back_to_siray(client, fake_post):
    client.put("/api/ai/settings", json={"provider": "ollama", "fallback_provider": "siray"})
    fake_post.queue(httpx.ConnectError("refused"), chat_ok("from siray"))

    response = client.post("/api/ai/generate", json={"prompt": "summarize"})

    assert response.status_code == 200
    assert response.json()["candidates"][0]["content"]["parts"][0]["text"] == "from siray"
    assert fake_post.calls[1]["headers"]["Authorization"] == "Bearer sk-siray-1234"


def test_generate_rejects_empty_prompt(client):
    assert client.post("/api/ai/generate", json={"prompt": ""}).status_code == 422


def test_store_failure_maps_to_503(tmp_path):
    broken = Settings(
        store=DatabaseSettings(database_url=f"sqlite:///{tmp_path / 'db.sqlite'}"),
        logging=LoggingSettings(level="WARNING", json_logs=False),
    )
    with TestClient(create_app(broken)) as test_client:
        (tmp_path / "db.sqlite").unlink()
        (tmp_path / "db.sqlite").mkdir()

        response = test_client.get("/api/ai/settings")

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "store_error"


def test_metrics_endpoint(client):
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "marketai_provider_requests_total" in response.text
