# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Test package for MarketAI.

This package contains test suites for:
- Configuration resolution and settings loading
- Provider adapters against a faked HTTP client
- Dispatcher fallback and degraded responses
- The SQLite settings store and the HTTP API
"""

__version__ = "1.0.0"
__author__ = "Ajay Rajput"
