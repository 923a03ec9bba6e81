"""Structured JSON logging helpers for the event dispatcher.

Every record is one JSON object with ``ts``, ``level``, ``logger`` and
``msg``. Dispatcher records add:

- ``event``: ``event_emitted``, ``listener_failed`` or ``runtime_initialized``
- ``payload``: event name and counts, never the arguments passed to ``emit``
- ``subscription_id``: the failing registration on ``listener_failed``
- ``exc``: the formatted traceback when one is attached
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from logging import Logger
from typing import Dict

_LOGGER_NAME = "event_dispatch"
_CONTEXT_FIELDS = ("event", "payload", "subscription_id")


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        payload = {
            "ts": ts,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in _CONTEXT_FIELDS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def get_logger(name: str | None = None) -> Logger:
    """Return a module level logger configured for structured JSON output."""

    logger_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
        # Honor LOG_LEVEL env, default INFO
        level = os.environ.get("LOG_LEVEL", "INFO").upper()
        logger.setLevel(getattr(logging, level, logging.INFO))
    return logger


def log_event(
    logger: Logger, event: str, payload: Dict[str, object] | None = None
) -> None:
    """Log a dispatcher lifecycle event with its payload as structured fields."""

    payload = payload or {}
    logger.info(f"event={event}", extra={"event": event, "payload": payload})
