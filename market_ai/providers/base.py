# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Abstract base class for provider adapters.

Each adapter turns a prompt plus a resolved configuration into one HTTP call
and returns a NormalizedResponse. Adapters never retry; a non-2xx status, a
transport failure or a body without the expected text field raises a
ProviderError subclass for the dispatcher to handle.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

from ..core.exceptions import (
    ProviderConnectionError,
    ProviderHTTPError,
    ProviderResponseError,
)
from ..models import AIProvider, NormalizedResponse, ProviderConfig
from ..telemetry.metrics import PROVIDER_LATENCY, PROVIDER_REQUESTS

logger = structlog.get_logger(__name__)

# Standard User-Agent for all provider adapters
USER_AGENT = "MarketAI/1.0.0"


class ProviderAdapter(ABC):
    """Translate the common prompt contract into one provider's HTTP shape."""

    provider: AIProvider
    display_name: str

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @abstractmethod
    async def invoke(self, prompt: str, config: ProviderConfig) -> NormalizedResponse:
        """Generate text for ``prompt`` and return it in the normalized envelope."""
        raise NotImplementedError

    def _create_headers(self, api_key: str | None = None) -> dict[str, str]:
        """Create headers for API requests."""
        headers = {
            "Content-Type": "application/json",
            "User-Agent": f"{USER_AGENT} ({self.provider.value})",
        }
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    async def _post_json(
        self, url: str, payload: dict[str, Any], headers: dict[str, str]
    ) -> dict[str, Any]:
        """POST ``payload`` and return the decoded JSON body of a 2xx response."""
        provider = self.provider.value
        start = time.perf_counter()
        try:
            response = await self._client.post(url, json=payload, headers=headers)
        # InvalidURL is not an HTTPError; an out-of-range port surfaces as OverflowError.
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, OverflowError) as e:
            PROVIDER_REQUESTS.labels(provider=provider, outcome="connection_error").inc()
            raise ProviderConnectionError(
                f"{self.display_name} API Error: {e.__class__.__name__}: {e}",
                provider=provider,
            ) from e
        finally:
            PROVIDER_LATENCY.labels(provider=provider).observe(time.perf_counter() - start)

        if not response.is_success:
            PROVIDER_REQUESTS.labels(provider=provider, outcome="http_error").inc()
            raise ProviderHTTPError(
                f"{self.display_name} API Error: {response.reason_phrase}",
                provider=provider,
                status_code=response.status_code,
                status_text=response.reason_phrase,
            )

        try:
            data = response.json()
        except ValueError as e:
            PROVIDER_REQUESTS.labels(provider=provider, outcome="bad_response").inc()
            raise ProviderResponseError(
                f"{self.display_name} API Error: response is not JSON", provider=provider
            ) from e

        PROVIDER_REQUESTS.labels(provider=provider, outcome="success").inc()
        logger.debug("provider_response_received", provider=provider, status=response.status_code)
        return data

    def _bad_response(self, field: str) -> ProviderResponseError:
        PROVIDER_REQUESTS.labels(provider=self.provider.value, outcome="bad_response").inc()
        return ProviderResponseError(
            f"{self.display_name} API Error: response has no {field}",
            provider=self.provider.value,
        )


def join_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
