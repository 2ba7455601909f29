# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Test fixtures and utilities for MarketAI.
"""

from .mocks import *  # noqa: F403
