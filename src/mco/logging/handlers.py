"""Log formatters.

Provides JSONFormatter for structured log output.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord has; anything else came from extra={...}
_STANDARD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}

_CONTEXT_ATTRS = ("worker_id", "job_id", "file_path")


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line.

    Each entry carries timestamp (ISO-8601 UTC), level, message, logger,
    job context when set, any extra={...} fields under "context", and the
    formatted exception if present.
    """

    def format(self, record: logging.LogRecord) -> str:
        record_time = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": record_time.isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.name and record.name != "root":
            entry["logger"] = record.name

        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS
            and key not in _CONTEXT_ATTRS
            and key != "job_tag"
            and not key.startswith("_")
        }
        for name in _CONTEXT_ATTRS:
            value = getattr(record, name, None)
            if value:
                context[name] = value
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)
