# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Pydantic models for provider configuration, persisted settings and responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class AIProvider(str, Enum):
    """Supported text-generation backends."""

    GEMINI = "gemini"
    OLLAMA = "ollama"
    LMSTUDIO = "lmstudio"
    SIRAY = "siray"

    @classmethod
    def parse(cls, value: str | AIProvider | None) -> AIProvider:
        """Return the matching provider; anything unrecognized means Gemini."""
        if isinstance(value, AIProvider):
            return value
        if value:
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.GEMINI


class FallbackProvider(str, Enum):
    """Providers that may serve as the fallback hop."""

    SIRAY = "siray"
    OLLAMA = "ollama"
    LMSTUDIO = "lmstudio"

    def as_provider(self) -> AIProvider:
        return AIProvider(self.value)


@dataclass(frozen=True)
class ProviderDefaults:
    """Built-in defaults and UI hints for one provider."""

    label: str
    description: str
    base_url: str | None
    model: str
    requires_api_key: bool
    accepts_api_key: bool
    accepts_base_url: bool


PROVIDER_DEFAULTS: dict[AIProvider, ProviderDefaults] = {
    AIProvider.GEMINI: ProviderDefaults(
        label="Google Gemini",
        description="Google Gemini API - Cloud-based AI with high performance",
        base_url=None,
        model="gemini-2.5-flash-lite",
        requires_api_key=True,
        accepts_api_key=True,
        accepts_base_url=False,
    ),
    AIProvider.OLLAMA: ProviderDefaults(
        label="Ollama (Local)",
        description="Ollama - Run local models on your machine",
        base_url="http://host.docker.internal:11434",
        model="llama3.2",
        requires_api_key=False,
        accepts_api_key=False,
        accepts_base_url=True,
    ),
    AIProvider.LMSTUDIO: ProviderDefaults(
        label="LM Studio (Local)",
        description="LM Studio - Local model server with OpenAI-compatible API",
        base_url="http://host.docker.internal:14321/v1",
        model="local-model",
        requires_api_key=False,
        accepts_api_key=True,
        accepts_base_url=True,
    ),
    AIProvider.SIRAY: ProviderDefaults(
        label="Siray.ai",
        description="Siray.ai - Reliable AI infrastructure with high availability",
        base_url="https://api.siray.ai/v1",
        model="siray-1.0-ultra",
        requires_api_key=True,
        accepts_api_key=True,
        accepts_base_url=False,
    ),
}


class ProviderConfig(BaseModel):
    """Provider identity plus optional per-call overrides."""

    provider: AIProvider = Field(AIProvider.GEMINI, description="Provider to invoke")
    api_key: str | None = Field(None, description="API key or bearer token")
    base_url: str | None = Field(None, description="Base URL of the provider API")
    model: str | None = Field(None, description="Model identifier")

    @model_validator(mode="before")
    @classmethod
    def _coerce_provider(cls, data: Any) -> Any:
        if isinstance(data, dict) and "provider" in data:
            data = {**data, "provider": AIProvider.parse(data["provider"])}
        return data

    def with_masked_key(self):
        """Copy of this model with the API key masked for responses."""
        return self.model_copy(update={"api_key": mask_secret(self.api_key)})


class EffectiveConfig(ProviderConfig):
    """Fully resolved configuration used for one invocation."""

    enable_fallback: bool = True
    fallback_provider: FallbackProvider | None = FallbackProvider.SIRAY

    def masked(self) -> dict[str, Any]:
        """Dump without exposing the API key."""
        return self.with_masked_key().model_dump(mode="json")


class _FallbackChoice(ProviderConfig):
    enable_fallback: bool = True
    fallback_provider: FallbackProvider | None = None

    @model_validator(mode="after")
    def _fallback_differs_from_primary(self) -> _FallbackChoice:
        if self.fallback_provider is not None and (
            self.fallback_provider.value == self.provider.value
        ):
            raise ValueError("fallback_provider must differ from provider")
        return self


class SettingsRecord(_FallbackChoice):
    """The persisted AI settings document."""

    id: int | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def default(cls) -> SettingsRecord:
        """Settings in effect before anything has been saved."""
        return cls(
            provider=AIProvider.GEMINI,
            enable_fallback=True,
            fallback_provider=FallbackProvider.SIRAY,
            is_active=True,
        )


class SettingsUpdate(_FallbackChoice):
    """Payload accepted when saving or testing settings."""

    def to_record(self) -> SettingsRecord:
        return SettingsRecord(**self.model_dump(), is_active=True)


class Part(BaseModel):
    text: str


class Content(BaseModel):
    parts: list[Part]


class Candidate(BaseModel):
    content: Content


class NormalizedResponse(BaseModel):
    """Provider-neutral response in the Gemini candidates/content/parts layout."""

    candidates: list[Candidate] = Field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> NormalizedResponse:
        return cls(candidates=[Candidate(content=Content(parts=[Part(text=text)]))])

    @property
    def text(self) -> str | None:
        """First text part, or None for an empty envelope."""
        if not self.candidates or not self.candidates[0].content.parts:
            return None
        return self.candidates[0].content.parts[0].text


class ConnectionTestResult(BaseModel):
    success: bool
    message: str
    response: str | None = None


class GenerateRequest(BaseModel):
    prompt: str = Field(..., min_length=1, description="Prompt text")


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str


def mask_secret(value: str | None) -> str | None:
    """Keep the last four characters of a secret."""
    if not value:
        return None
    if len(value) <= 4:
        return "****"
    return f"****{value[-4:]}"
