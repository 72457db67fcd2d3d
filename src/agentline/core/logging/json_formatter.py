from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any

from .context import get_log_context

RESERVED_KEYS = frozenset({"ts_iso_utc", "level", "logger", "msg"})


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JSONFormatter(logging.Formatter):
    """One compact JSON object per record.

    Bound request context (correlation id, task id, RPC method, request id)
    and ``extra={"extra_fields": {...}}`` are merged in; ``None`` values are
    dropped and the reserved keys cannot be overwritten.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_iso_utc": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        fields: dict[str, Any] = dict(get_log_context())
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            fields.update(extra_fields)
        for key, value in fields.items():
            if value is not None and key not in RESERVED_KEYS:
                payload[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            payload["exc"] = {
                "type": exc_type.__name__,
                "msg": str(exc_value) if exc_value else "",
                "stack": "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
            }

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)
