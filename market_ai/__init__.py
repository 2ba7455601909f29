# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
MarketAI provider settings layer.

Lets an operator pick the AI text-generation backend used by the stock-market
application, persists that choice, and invokes it with a one-hop fallback.
"""

__version__ = "1.0.0"
