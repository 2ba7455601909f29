# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Configuration resolution.

Every field of the effective configuration is resolved independently with the
precedence environment > persisted settings > built-in default. Environment
overrides are provider specific: ``OLLAMA_BASE_URL`` only matters when the
resolved provider is Ollama.
"""

from __future__ import annotations

from .models import (
    PROVIDER_DEFAULTS,
    AIProvider,
    EffectiveConfig,
    FallbackProvider,
    ProviderConfig,
    SettingsRecord,
)
from .settings import ProviderEnvSettings


def env_overrides(provider: AIProvider, env: ProviderEnvSettings) -> dict[str, str | None]:
    """Return the environment values that apply to ``provider``."""
    if provider is AIProvider.GEMINI:
        return {"api_key": env.gemini_api_key, "base_url": None, "model": env.gemini_model}
    if provider is AIProvider.OLLAMA:
        return {"api_key": None, "base_url": env.ollama_base_url, "model": env.ollama_model}
    if provider is AIProvider.LMSTUDIO:
        return {
            "api_key": env.lmstudio_api_key,
            "base_url": env.lmstudio_base_url,
            "model": env.lmstudio_model,
        }
    if provider is AIProvider.SIRAY:
        return {
            "api_key": env.siray_api_key,
            "base_url": env.siray_base_url,
            "model": env.siray_model,
        }
    raise AssertionError(f"Unhandled provider: {provider}")


def _first(*values: str | None) -> str | None:
    for value in values:
        if value:
            return value
    return None


def resolve_config(
    db_settings: SettingsRecord | None, env: ProviderEnvSettings
) -> EffectiveConfig:
    """Merge persisted settings with environment overrides and defaults."""
    record = db_settings or SettingsRecord.default()

    if env.ai_provider:
        provider = AIProvider.parse(env.ai_provider)
    else:
        provider = AIProvider.parse(record.provider)

    # Persisted fields belong to the persisted provider only.
    persisted = record if record.provider is provider else ProviderConfig(provider=provider)
    overrides = env_overrides(provider, env)
    defaults = PROVIDER_DEFAULTS[provider]

    fallback = record.fallback_provider or FallbackProvider.SIRAY

    return EffectiveConfig(
        provider=provider,
        api_key=_first(overrides["api_key"], persisted.api_key),
        base_url=_first(overrides["base_url"], persisted.base_url, defaults.base_url),
        model=_first(overrides["model"], persisted.model, defaults.model),
        enable_fallback=record.enable_fallback,
        fallback_provider=fallback,
    )


def apply_defaults(config: ProviderConfig) -> ProviderConfig:
    """Fill a partial configuration's missing base URL and model from defaults."""
    defaults = PROVIDER_DEFAULTS[config.provider]
    return config.model_copy(
        update={
            "base_url": config.base_url or defaults.base_url,
            "model": config.model or defaults.model,
        }
    )


def merge_call_config(config: ProviderConfig, env: ProviderEnvSettings) -> ProviderConfig:
    """Per-call fields win over environment overrides, which win over defaults."""
    overrides = env_overrides(config.provider, env)
    defaults = PROVIDER_DEFAULTS[config.provider]
    return config.model_copy(
        update={
            "api_key": _first(config.api_key, overrides["api_key"]),
            "base_url": _first(config.base_url, overrides["base_url"], defaults.base_url),
            "model": _first(config.model, overrides["model"], defaults.model),
        }
    )
