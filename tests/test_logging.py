# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
from __future__ import annotations

import json
import logging

from market_ai.telemetry.logging import JsonLogFormatter, configure_logging


def test_json_formatter_fields():
    record = logging.LogRecord(
        "market_ai.store", logging.WARNING, __file__, 1, "disk %s", ("full",), None
    )

    data = json.loads(JsonLogFormatter().format(record))

    assert data["level"] == "WARNING"
    assert data["logger"] == "market_ai.store"
    assert data["message"] == "disk full"
    assert "time" in data


def test_configure_logging_installs_single_handler():
    configure_logging("debug", json_logs=True)
    configure_logging("warning", json_logs=True)

    assert len(logging.root.handlers) == 1
    assert isinstance(logging.root.handlers[0].formatter, JsonLogFormatter)
    assert logging.root.level == logging.WARNING
