"""Process-wide logging setup.

Plain text for local work, one JSON object per line in production. Records
may carry request and domain context through ``extra=``; the fields in
``CONTEXT_FIELDS`` become top-level keys of the JSON line so log queries can
filter on a business or entity directly. Anything else passed in ``extra``
is nested under ``"extra"``.
"""
from __future__ import annotations

import json
import logging
import sys
from typing import Any

from contapyme.core.config import settings

CONTEXT_FIELDS = ("business_id", "entity_id", "error_code", "path", "method")

_RESERVED = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key.startswith("_") or key in _RESERVED or key in CONTEXT_FIELDS or key in payload:
                continue
            payload.setdefault("extra", {})[key] = value
        return json.dumps(payload, default=str)


class ContextFormatter(logging.Formatter):
    """Plain formatter that appends ``business=<id>`` when a record has one."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        business_id = getattr(record, "business_id", None)
        return f"{line} | business={business_id}" if business_id is not None else line


def init_logging(level: int | None = None) -> None:
    if logging.getLogger().handlers:
        return
    effective_level = level or getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_FORMAT.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ContextFormatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
    root = logging.getLogger()
    root.setLevel(effective_level)
    root.addHandler(handler)
