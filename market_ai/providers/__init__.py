# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Provider adapters for MarketAI.

One adapter per supported backend: Ollama's generate endpoint, the
OpenAI-compatible LM Studio and Siray.ai servers, and a Gemini placeholder
that rejects direct calls.
"""

from .base import ProviderAdapter
from .gemini import GeminiAdapter
from .ollama import OllamaAdapter
from .openai_compatible import LMStudioAdapter, OpenAICompatibleAdapter, SirayAdapter
from .registry import ProviderRegistry, build_registry

__all__ = [
    "ProviderAdapter",
    "OpenAICompatibleAdapter",
    "GeminiAdapter",
    "OllamaAdapter",
    "LMStudioAdapter",
    "SirayAdapter",
    "ProviderRegistry",
    "build_registry",
]
