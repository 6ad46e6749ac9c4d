"""Key/value rows backing the persisted interview documents."""
from __future__ import annotations

import datetime as dt
from typing import Optional

from .migrate import apply
from .sqlite import get_conn


def put_value(key: str, value: str, *, db_path: Optional[str] = None) -> None:
    """Insert or replace the raw text stored under ``key``."""

    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn(db_path) as conn:
        apply(conn)
        conn.execute(
            """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at""",
            (key, value, timestamp),
        )


def get_value(key: str, *, db_path: Optional[str] = None) -> Optional[str]:
    """Return the raw text stored under ``key`` or ``None``."""

    with get_conn(db_path) as conn:
        apply(conn)
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    return row[0] if row else None


def delete_value(key: str, *, db_path: Optional[str] = None) -> None:
    with get_conn(db_path) as conn:
        apply(conn)
        conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))


__all__ = ["delete_value", "get_value", "put_value"]
