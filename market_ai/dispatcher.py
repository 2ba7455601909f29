# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Invocation dispatcher.

Picks the adapter for the configured provider, invokes it and, on failure,
tries exactly one fallback provider. When nothing succeeds the caller gets a
static degraded response (or the last error when the degraded mode is
``raise``). Gemini is rejected up front because its inference runs through the
workflow integration.
"""

from __future__ import annotations

import structlog

from .core.exceptions import ProviderError, UnsupportedProviderError
from .models import AIProvider, EffectiveConfig, NormalizedResponse, ProviderConfig
from .providers.registry import ProviderRegistry
from .resolver import merge_call_config, resolve_config
from .settings import FallbackSettings, ProviderEnvSettings
from .store import SettingsStore
from .telemetry.metrics import DEGRADED_RESPONSES_TOTAL, FALLBACKS_TOTAL

logger = structlog.get_logger(__name__)


class ProviderDispatcher:
    def __init__(
        self,
        registry: ProviderRegistry,
        env: ProviderEnvSettings,
        fallback: FallbackSettings | None = None,
        store: SettingsStore | None = None,
    ) -> None:
        self.registry = registry
        self.env = env
        self.fallback = fallback or FallbackSettings()
        self.store = store

    def default_provider(self) -> AIProvider:
        return AIProvider.parse(self.env.ai_provider)

    async def call_provider(
        self, prompt: str, provider_config: ProviderConfig | None = None
    ) -> NormalizedResponse:
        """Invoke one provider; unset fields come from the environment, then defaults.

        Errors from the adapter propagate unchanged.
        """
        if provider_config is None:
            provider_config = ProviderConfig(provider=self.default_provider())
        config = merge_call_config(provider_config, self.env)

        logger.info("using_ai_provider", provider=config.provider.value, model=config.model)
        return await self.registry.get(config.provider).invoke(prompt, config)

    async def call_with_fallback(
        self,
        prompt: str,
        primary_provider: AIProvider | str | None = None,
        enable_fallback: bool = True,
    ) -> NormalizedResponse:
        """Call the primary provider, then Siray.ai once if that fails."""
        provider = (
            AIProvider.parse(primary_provider) if primary_provider else self.default_provider()
        )
        self._reject_gemini(provider)

        try:
            return await self.call_provider(prompt, ProviderConfig(provider=provider))
        except ProviderError as e:
            logger.warning(
                "provider_failed", provider=provider.value, error=e.message, code=e.error_code
            )
            fallback_eligible = (
                enable_fallback
                and provider is not AIProvider.SIRAY
                and self.registry.siray.has_credentials()
            )
            if not fallback_eligible:
                return self._degraded(provider, e)
            return await self._fallback(
                prompt, provider, ProviderConfig(provider=AIProvider.SIRAY)
            )

    async def call_with_settings(self, prompt: str) -> NormalizedResponse:
        """Call the provider chosen in the active settings record.

        The fallback provider comes from the record. Store errors propagate.
        """
        if self.store is None:
            raise RuntimeError("call_with_settings requires a settings store")
        record = await self.store.get_active_settings()
        config = resolve_config(record, self.env)
        self._reject_gemini(config.provider)

        try:
            return await self.call_provider(prompt, config)
        except ProviderError as e:
            logger.warning(
                "provider_failed",
                provider=config.provider.value,
                error=e.message,
                code=e.error_code,
            )
            fallback_config = self._fallback_config(config)
            if fallback_config is None:
                return self._degraded(config.provider, e)
            return await self._fallback(prompt, config.provider, fallback_config)

    def _fallback_config(self, config: EffectiveConfig) -> ProviderConfig | None:
        """Configuration for the fallback hop, or None when no hop is allowed."""
        if not config.enable_fallback or config.fallback_provider is None:
            return None
        target = config.fallback_provider.as_provider()
        if target is config.provider:
            return None
        if target is AIProvider.SIRAY and not self.registry.siray.has_credentials():
            return None
        # The record's own fields describe the primary provider only.
        return ProviderConfig(provider=target)

    async def _fallback(
        self, prompt: str, failed: AIProvider, config: ProviderConfig
    ) -> NormalizedResponse:
        target = config.provider.value
        logger.info("falling_back", from_provider=failed.value, to_provider=target)
        try:
            response = await self.call_provider(prompt, config)
        except ProviderError as e:
            FALLBACKS_TOTAL.labels(
                from_provider=failed.value, to_provider=target, outcome="error"
            ).inc()
            logger.error("fallback_failed", provider=target, error=e.message, code=e.error_code)
            return self._degraded(failed, e)
        FALLBACKS_TOTAL.labels(
            from_provider=failed.value, to_provider=target, outcome="success"
        ).inc()
        return response

    def _degraded(self, provider: AIProvider, error: ProviderError) -> NormalizedResponse:
        if self.fallback.degraded_mode == "raise":
            raise error
        DEGRADED_RESPONSES_TOTAL.labels(provider=provider.value).inc()
        return NormalizedResponse.from_text(self.fallback.degraded_text)

    @staticmethod
    def _reject_gemini(provider: AIProvider) -> None:
        if provider is AIProvider.GEMINI:
            raise UnsupportedProviderError(
                "Use the workflow integration's inference step for Gemini",
                provider=provider.value,
            )
