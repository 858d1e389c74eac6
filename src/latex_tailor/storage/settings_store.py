"""SQLite-backed key/value settings store with JSON values."""

from __future__ import annotations

import json
import os
import sqlite3
from pathlib import Path
from typing import Any, Callable

DEFAULT_DB_PATH = Path.home() / ".latex-tailor" / "settings.db"

API_KEY = "api_key"
MODEL_ID = "model_id"
DOCUMENTS = "documents"
LAST_KEYWORDS = "last_keywords"

API_KEY_ENV = "GEMINI_API_KEY"


class SettingsStore:
    """Process-wide settings persisted in SQLite (WAL mode).

    The connection is opened at construction and closed by ``close()``.
    Every write is committed before the call returns.
    """

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        # Autocommit; update() opens its own transaction.
        self._conn = sqlite3.connect(str(self.db_path), isolation_level=None)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._init_db()

    def _init_db(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value_json TEXT NOT NULL
            )
        """)

    def __enter__(self) -> SettingsStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def _read(self, key: str) -> str | None:
        row = self._conn.execute(
            "SELECT value_json FROM settings WHERE key = ?", (key,)
        ).fetchone()
        return row[0] if row else None

    def _write(self, key: str, value: Any) -> None:
        self._conn.execute(
            "INSERT OR REPLACE INTO settings (key, value_json) VALUES (?, ?)",
            (key, json.dumps(value, ensure_ascii=False)),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or default when the key is unset."""
        raw = self._read(key)
        return default if raw is None else json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._write(key, value)

    def update(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> Any:
        """Atomically replace a value with fn(current); returns the new value.

        Runs read and write inside one BEGIN IMMEDIATE transaction so no
        other writer can interleave between them.
        """
        self._conn.execute("BEGIN IMMEDIATE")
        try:
            raw = self._read(key)
            current = default if raw is None else json.loads(raw)
            new_value = fn(current)
            self._write(key, new_value)
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        self._conn.execute("COMMIT")
        return new_value

    def keys(self) -> list[str]:
        rows = self._conn.execute("SELECT key FROM settings ORDER BY key").fetchall()
        return [r[0] for r in rows]


def resolve_credentials(settings: SettingsStore, default_model: str) -> tuple[str, str]:
    """Return (api_key, model_id); the key falls back to $GEMINI_API_KEY."""
    api_key = settings.get(API_KEY, "") or os.environ.get(API_KEY_ENV, "")
    model_id = settings.get(MODEL_ID, "") or default_model
    return api_key, model_id
