# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Caller-facing settings operations used by the settings page.

Fetching and saving go straight to the store and let StoreError propagate so
the page can show a failure message. The connection test is the one path that
reports provider errors as a result instead of degrading or raising.
"""

from __future__ import annotations

from typing import Any

import structlog

from ..core.exceptions import ProviderError
from ..dispatcher import ProviderDispatcher
from ..models import (
    ConnectionTestResult,
    EffectiveConfig,
    ProviderConfig,
    SettingsRecord,
    SettingsUpdate,
    mask_secret,
)
from ..resolver import resolve_config
from ..settings import ProviderEnvSettings
from ..store import SettingsStore

logger = structlog.get_logger(__name__)

CONNECTION_TEST_PROMPT = 'Say "Connection successful" if you can read this.'


async def get_ai_settings(store: SettingsStore) -> SettingsRecord:
    """Return the active settings, or the defaults when nothing was saved yet."""
    settings = await store.get_active_settings()
    if settings is None:
        return SettingsRecord.default()
    return settings


async def update_ai_settings(store: SettingsStore, params: SettingsUpdate) -> dict[str, Any]:
    record = params.to_record()
    if record.api_key and record.api_key.startswith("****"):
        # The form echoes the masked key it was served; keep the stored one.
        current = await store.get_active_settings()
        if current is not None and mask_secret(current.api_key) == record.api_key:
            record = record.model_copy(update={"api_key": current.api_key})
    saved = await store.set_active_settings(record)
    logger.info(
        "ai_settings_updated",
        provider=saved.provider.value,
        enable_fallback=saved.enable_fallback,
        fallback_provider=saved.fallback_provider.value if saved.fallback_provider else None,
    )
    return {"success": True, "settings": saved}


async def check_provider_connection(
    dispatcher: ProviderDispatcher, params: ProviderConfig
) -> ConnectionTestResult:
    """Issue one live call with the candidate configuration."""
    try:
        response = await dispatcher.call_provider(
            CONNECTION_TEST_PROMPT,
            ProviderConfig(
                provider=params.provider,
                api_key=params.api_key,
                base_url=params.base_url,
                model=params.model,
            ),
        )
    except ProviderError as e:
        logger.warning(
            "ai_provider_test_failed", provider=params.provider.value, error=e.message
        )
        return ConnectionTestResult(success=False, message=e.message or "Connection failed")

    return ConnectionTestResult(
        success=True, message="Connection successful", response=response.text
    )


async def get_ai_provider_config(
    store: SettingsStore, env: ProviderEnvSettings
) -> EffectiveConfig:
    """Effective configuration: environment over persisted settings over defaults."""
    return resolve_config(await get_ai_settings(store), env)
