# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Custom exceptions for MarketAI.

Provider errors are raised by adapters and consumed by the dispatcher, which
turns them into a fallback attempt or a degraded response. Store errors are
never masked and travel up to the caller.
"""

from typing import Any


class MarketAIError(Exception):
    """Base exception for all MarketAI errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize MarketAI base exception."""
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error": {
                "message": self.message,
                "type": self.__class__.__name__,
                "code": self.error_code,
                "details": self.details,
            }
        }


class ProviderError(MarketAIError):
    """Exception for provider-related errors."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize provider error with provider context."""
        self.provider = provider
        self.status_code = status_code
        details = kwargs.get("details", {})
        details.update({"provider": provider, "status_code": status_code})
        super().__init__(message, kwargs.get("error_code", "provider_error"), details)


class ProviderHTTPError(ProviderError):
    """Provider answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        status_text: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.status_text = status_text
        details = kwargs.get("details", {})
        details["status_text"] = status_text
        super().__init__(
            message,
            provider=provider,
            status_code=status_code,
            error_code="provider_http_error",
            details=details,
        )


class ProviderConnectionError(ProviderError):
    """Transport failure or timeout before a response arrived."""

    def __init__(self, message: str, provider: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, provider=provider, error_code="provider_connection_error", **kwargs)


class ProviderResponseError(ProviderError):
    """A 2xx response whose body lacks the expected text field."""

    def __init__(self, message: str, provider: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, provider=provider, error_code="provider_response_error", **kwargs)


class MissingCredentialError(ProviderError):
    """A provider that requires an API key was invoked without one."""

    def __init__(self, message: str, provider: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, provider=provider, error_code="missing_credential", **kwargs)


class UnsupportedProviderError(ProviderError):
    """The provider cannot be invoked through the adapter layer.

    Gemini inference runs through the workflow integration's own inference
    step, so direct calls are rejected before any network traffic.
    """

    def __init__(self, message: str, provider: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, provider=provider, error_code="unsupported_provider", **kwargs)


class StoreError(MarketAIError):
    """Exception for settings persistence failures."""

    def __init__(self, message: str, operation: str | None = None, **kwargs: Any) -> None:
        """Initialize store error with the failing operation."""
        self.operation = operation
        details = kwargs.get("details", {})
        details["operation"] = operation
        super().__init__(message, error_code="store_error", details=details)


class ConfigurationError(MarketAIError):
    """Exception for configuration-related errors."""

    def __init__(self, message: str, config_key: str | None = None, **kwargs: Any) -> None:
        """Initialize configuration error with key context."""
        self.config_key = config_key
        details = kwargs.get("details", {})
        details["config_key"] = config_key
        super().__init__(message, error_code="configuration_error", details=details)
