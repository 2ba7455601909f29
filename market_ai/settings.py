# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Centralized application settings for MarketAI.

This module provides a typed configuration system using Pydantic BaseSettings.
Values are loaded from the environment and an optional .env file. The root
``settings`` object is built once at process start and handed to the resolver,
registry and dispatcher; nothing below it reads ``os.environ`` on its own.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderEnvSettings(BaseSettings):
    """Provider selection and per-provider overrides.

    Every field is optional: an unset variable means "use the persisted value,
    then the built-in default".
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        populate_by_name=True,
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str=None,
    )

    ai_provider: str | None = Field(
        default=None,
        description="Provider selector: gemini, ollama, lmstudio or siray.",
        validation_alias=AliasChoices("AI_PROVIDER"),
    )

    gemini_api_key: str | None = Field(
        default=None,
        description="Gemini API key used by the workflow integration.",
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    )
    gemini_model: str | None = Field(
        default=None, validation_alias=AliasChoices("GEMINI_MODEL")
    )

    ollama_base_url: str | None = Field(
        default=None,
        description="Base URL of the Ollama server.",
        validation_alias=AliasChoices("OLLAMA_BASE_URL"),
    )
    ollama_model: str | None = Field(default=None, validation_alias=AliasChoices("OLLAMA_MODEL"))

    lmstudio_base_url: str | None = Field(
        default=None,
        description="Base URL of the LM Studio OpenAI-compatible server (including /v1).",
        validation_alias=AliasChoices("LMSTUDIO_BASE_URL"),
    )
    lmstudio_model: str | None = Field(
        default=None, validation_alias=AliasChoices("LMSTUDIO_MODEL")
    )
    lmstudio_api_key: str | None = Field(
        default=None,
        description="Optional bearer token for self-hosted LM Studio deployments.",
        validation_alias=AliasChoices("LMSTUDIO_API_KEY"),
    )

    siray_api_key: str | None = Field(
        default=None,
        description="Siray.ai API key; also gates the automatic fallback hop.",
        validation_alias=AliasChoices("SIRAY_API_KEY"),
    )
    siray_base_url: str | None = Field(
        default=None, validation_alias=AliasChoices("SIRAY_BASE_URL")
    )
    siray_model: str | None = Field(default=None, validation_alias=AliasChoices("SIRAY_MODEL"))

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        """Treat empty strings as unset so they never shadow persisted values."""
        if isinstance(value, str) and not value.strip():
            return None
        return value


class DatabaseSettings(BaseSettings):
    """Settings store location."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    database_url: str = Field(
        default="sqlite:///marketai.db",
        description="SQLite URL of the settings store.",
        validation_alias=AliasChoices("DATABASE_URL", "DB_URL"),
    )

    @field_validator("database_url")
    @classmethod
    def _validate_database_url(cls, value: str) -> str:
        """Validate database URL format."""
        if not isinstance(value, str) or not value.startswith("sqlite:///"):
            raise ValueError("DATABASE_URL must be a sqlite URL (e.g., sqlite:///file.db)")
        return value

    @property
    def path(self) -> str:
        return self.database_url.replace("sqlite:///", "", 1)


class ProviderAdapterSettings(BaseSettings):
    """HTTP client settings shared by all provider adapters."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    timeout_ms: int = Field(
        default=60000,
        description="Per-request timeout in milliseconds for provider calls.",
        validation_alias=AliasChoices("PROVIDER_TIMEOUT_MS"),
    )
    temperature: float = Field(
        default=0.7,
        description="Sampling temperature sent to LM Studio.",
        validation_alias=AliasChoices("LMSTUDIO_TEMPERATURE"),
    )

    @field_validator("timeout_ms")
    @classmethod
    def _validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Value must be > 0")
        return value


class FallbackSettings(BaseSettings):
    """What callers get back once both the primary and fallback calls failed."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    degraded_mode: Literal["placeholder", "raise"] = Field(
        default="placeholder",
        description="placeholder returns a static response, raise re-raises the last error.",
        validation_alias=AliasChoices("FALLBACK_DEGRADED_MODE"),
    )
    degraded_text: str = Field(
        default="AI service temporarily unavailable. Please try again later.",
        validation_alias=AliasChoices("FALLBACK_DEGRADED_TEXT"),
    )

    @field_validator("degraded_mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL"))
    json_logs: bool = Field(default=True, validation_alias=AliasChoices("LOG_JSON"))

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        """Normalize log level to uppercase string."""
        return str(value).upper()


class ServerSettings(BaseSettings):
    """Server runtime parameters."""

    host: str = Field(
        default="127.0.0.1",
        description="Server host to bind to (use 0.0.0.0 in containers).",
        validation_alias=AliasChoices("HOST", "SERVER_HOST"),
    )
    port: int = Field(
        default=8000,
        description="Server port to listen on (must be > 0).",
        validation_alias=AliasChoices("PORT", "SERVER_PORT"),
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging.",
        validation_alias=AliasChoices("DEBUG", "SERVER_DEBUG"),
    )

    @field_validator("debug", mode="before")
    @classmethod
    def _parse_debug_flag(cls, value: Any) -> bool:
        """Parse debug flag from various string/boolean formats."""
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes", "on")
        return bool(value) if value is not None else False

    @field_validator("port")
    @classmethod
    def _validate_port(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("PORT must be > 0")
        return value


class Settings(BaseSettings):
    """Root settings object combining all configuration groups."""

    model_config = SettingsConfigDict(
        populate_by_name=True,
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    providers: ProviderEnvSettings = Field(default_factory=ProviderEnvSettings)
    store: DatabaseSettings = Field(default_factory=DatabaseSettings)
    adapters: ProviderAdapterSettings = Field(default_factory=ProviderAdapterSettings)
    fallback: FallbackSettings = Field(default_factory=FallbackSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)


# Process-wide settings built at import; the API hands it to its collaborators.
settings = Settings()
