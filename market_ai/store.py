# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Persistence for the AI settings record.

Only one row of ``ai_settings`` may be active. Saving deactivates every row
and inserts the new active one inside a single transaction; a partial unique
index rejects a second active row should anything bypass this module.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import aiosqlite

from .core.exceptions import StoreError
from .models import SettingsRecord

_COLUMNS = (
    "id, provider, api_key, base_url, model, enable_fallback, "
    "fallback_provider, is_active, created_at, updated_at"
)


class SettingsStore:
    """Async SQLite accessor for the active AI settings record."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    @asynccontextmanager
    async def _connect(self, operation: str) -> AsyncIterator[aiosqlite.Connection]:
        try:
            async with aiosqlite.connect(self.db_path) as db:
                db.row_factory = aiosqlite.Row
                yield db
        except aiosqlite.Error as e:
            raise StoreError(f"Settings store {operation} failed: {e}", operation=operation) from e

    async def init(self) -> None:
        """Initialize database tables."""
        async with self._connect("init") as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS ai_settings (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    provider TEXT NOT NULL DEFAULT 'gemini'
                        CHECK (provider IN ('gemini', 'ollama', 'lmstudio', 'siray')),
                    api_key TEXT,
                    base_url TEXT,
                    model TEXT,
                    enable_fallback BOOLEAN NOT NULL DEFAULT 1,
                    fallback_provider TEXT
                        CHECK (fallback_provider IN ('siray', 'ollama', 'lmstudio')),
                    is_active BOOLEAN NOT NULL DEFAULT 1,
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """
            )
            await db.execute(
                """
                CREATE UNIQUE INDEX IF NOT EXISTS idx_ai_settings_single_active
                ON ai_settings(is_active) WHERE is_active = 1
            """
            )
            await db.commit()

    async def get_active_settings(self) -> SettingsRecord | None:
        async with self._connect("read") as db:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM ai_settings WHERE is_active = 1 LIMIT 1"
            )
            row = await cursor.fetchone()
        return _to_record(row) if row else None

    async def set_active_settings(self, record: SettingsRecord) -> SettingsRecord:
        """Make ``record`` the only active settings row and return it as stored."""
        now = datetime.now(timezone.utc).isoformat()
        async with self._connect("write") as db:
            try:
                await db.execute("BEGIN IMMEDIATE")
                await db.execute(
                    "UPDATE ai_settings SET is_active = 0, updated_at = ? WHERE is_active = 1",
                    (now,),
                )
                cursor = await db.execute(
                    """
                    INSERT INTO ai_settings (
                        provider, api_key, base_url, model, enable_fallback,
                        fallback_provider, is_active, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, 1, ?, ?)
                """,
                    (
                        record.provider.value,
                        record.api_key,
                        record.base_url,
                        record.model,
                        record.enable_fallback,
                        record.fallback_provider.value if record.fallback_provider else None,
                        now,
                        now,
                    ),
                )
                row_id = cursor.lastrowid
                await db.commit()
            except aiosqlite.Error:
                await db.rollback()
                raise

            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM ai_settings WHERE id = ?", (row_id,)
            )
            row = await cursor.fetchone()
        return _to_record(row)

    async def list_settings(self, limit: int = 20) -> list[SettingsRecord]:
        """Saved settings, newest first."""
        async with self._connect("read") as db:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM ai_settings ORDER BY id DESC LIMIT ?", (limit,)
            )
            rows = await cursor.fetchall()
        return [_to_record(row) for row in rows]

    async def count_active(self) -> int:
        async with self._connect("read") as db:
            cursor = await db.execute("SELECT COUNT(*) FROM ai_settings WHERE is_active = 1")
            row = await cursor.fetchone()
        return int(row[0])


def _to_record(row: Any) -> SettingsRecord:
    return SettingsRecord(
        id=row["id"],
        provider=row["provider"],
        api_key=row["api_key"],
        base_url=row["base_url"],
        model=row["model"],
        enable_fallback=bool(row["enable_fallback"]),
        fallback_provider=row["fallback_provider"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
