"""SQLite-backed key-value store for PrimeBets.

Every piece of per-user state (subscriptions, notifications, bet history,
profiles, reports) plus the automation config and scheduler metadata lives
in a single ``kv`` table.  Values are serialized JSON records; callers own
(de)serialization and treat undecodable data as absent.

Key layout:
    user:{id}            registered user
    profile:{id}         bettor profile (quiz result)
    subscription:{id}    premium subscription
    notifications:{id}   notification list (newest first)
    bets:{id}            bet history
    reports:{id}         performance report history
    platforms:*          platform snapshot + last update
    automation_config    runtime automation overrides
    scheduler:jobs       job run metadata
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from loguru import logger

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


class KeyValueStore:
    """SQLite key-value store: single source of truth."""

    def __init__(self, db_path: str = "data/primebets.db"):
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()
        logger.info(f"KeyValueStore initialized: {db_path}")

    @contextmanager
    def _get_conn(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self):
        with self._get_conn() as conn:
            conn.executescript(_SCHEMA)
            conn.commit()

    # ════════════════════════════════════════════════════════════
    # RAW STRING API
    # ════════════════════════════════════════════════════════════

    def get(self, key: str) -> str | None:
        with self._get_conn() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        with self._get_conn() as conn:
            conn.execute(
                """INSERT INTO kv (key, value, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)
                   ON CONFLICT(key) DO UPDATE
                   SET value = excluded.value, updated_at = CURRENT_TIMESTAMP""",
                (key, value),
            )
            conn.commit()

    def remove(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        with self._get_conn() as conn:
            cursor = conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        return cursor.rowcount > 0

    def keys(self, prefix: str = "") -> list[str]:
        """All keys starting with ``prefix``, sorted."""
        with self._get_conn() as conn:
            rows = conn.execute(
                "SELECT key FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
        return [r["key"] for r in rows]

    def items(self, prefix: str = "") -> list[tuple[str, str]]:
        with self._get_conn() as conn:
            rows = conn.execute(
                "SELECT key, value FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
        return [(r["key"], r["value"]) for r in rows]

    def clear(self, prefix: str = "") -> int:
        """Delete every key with ``prefix``. Returns the number removed."""
        with self._get_conn() as conn:
            cursor = conn.execute(
                "DELETE FROM kv WHERE substr(key, 1, ?) = ?", (len(prefix), prefix)
            )
            conn.commit()
        return cursor.rowcount

    # ════════════════════════════════════════════════════════════
    # JSON HELPERS
    # ════════════════════════════════════════════════════════════

    def get_json(self, key: str, default: Any = None) -> Any:
        """Decode a JSON value. Missing or corrupt data → ``default``."""
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning(f"Corrupt JSON under key '{key}', treating as absent")
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value, ensure_ascii=False, default=str))
