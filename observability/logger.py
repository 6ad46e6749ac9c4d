"""Structured session event logging.

Each interview lifecycle event (question asked, answer submitted, scored,
archived, suspended, resumed) becomes one record: a short human line on
stdout and, with file logs enabled, one JSON object per line in a rotating
file.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from typing import Any

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "1") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/interview-events.jsonl")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

SUMMARY_KEYS = ("status", "index", "difficulty", "subject", "source", "score", "degraded")

_logger = logging.getLogger("interview_events")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False


class _JsonLines(logging.Formatter):  # Emits the event payload carried on the record
    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(getattr(record, "event", {}), ensure_ascii=False, default=str)


def _ensure_handlers() -> None:
    if _logger.handlers:
        return

    console = logging.StreamHandler(stream=sys.stdout)
    console.setFormatter(logging.Formatter("[%(asctime)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    _logger.addHandler(console)

    if not ENABLE_FILE_LOGS:
        return
    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    events_file = logging.handlers.RotatingFileHandler(LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)
    events_file.setFormatter(_JsonLines())
    _logger.addHandler(events_file)


def _summary(kind: str, session_id: str, fields: dict[str, Any]) -> str:
    parts = [kind, session_id]
    parts.extend(f"{key}={fields[key]}" for key in SUMMARY_KEYS if key in fields)
    return " ".join(parts)


def log_event(kind: str, session_id: str, **fields: Any) -> None:
    """Record one session event."""

    _ensure_handlers()
    event: dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "kind": kind,
        "session_id": session_id,
        **fields,
    }
    _logger.info(_summary(kind, session_id, fields), extra={"event": event})


__all__ = ["log_event"]
