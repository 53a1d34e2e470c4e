"""Audit logging for filing and payroll state changes.

Writes structured JSON lines to a dedicated audit log file and the standard
logger. Each event records a compliance-relevant transition such as an F29
being filed or a settlement being paid.
"""
from __future__ import annotations

import json
import logging
import os
import time
from typing import Any

from contapyme.core.config import settings

_logger = logging.getLogger("audit")


def log_audit_event(action: str, business_id: int | None = None, status: str = "success", **metadata: Any) -> None:
    """Record an audit event.

    Parameters:
        action: A machine-readable action key (e.g. 'f29.filed', 'settlement.paid').
        business_id: The business the event belongs to (if available).
        status: 'success' | 'failure' | 'denied'.
        **metadata: Additional context fields (ids, folios, amounts).
    """
    event = {
        "ts": int(time.time()),
        "action": action,
        "business_id": business_id,
        "status": status,
        **metadata,
    }
    line = json.dumps(event, separators=(",", ":"), default=str)
    path = settings.AUDIT_LOG_FILE
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError:
        _logger.warning("Failed to write audit event to %s", path)
    _logger.info(line)


def log_denied(action: str, business_id: int | None = None, reason: str | None = None, **extra: Any) -> None:
    log_audit_event(action, business_id=business_id, status="denied", reason=reason, **extra)
