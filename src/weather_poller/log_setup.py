"""Structured console logging for the poller runtime."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from .redaction import sanitize_text

# Record attributes copied into the event when a caller passes them via ``extra``.
_CONTEXT_FIELDS = ("cycle", "status", "status_code", "sequence")


class JsonConsoleFormatter(logging.Formatter):
    """One redacted JSON object per record, tagged with the polling session."""

    def __init__(self, session_id: str | None = None) -> None:
        super().__init__()
        self.session_id = session_id

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        if self.session_id is not None:
            event["session_id"] = self.session_id
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = value
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str)


def setup_logger(
    name: str = "weather_poller",
    level: int | str = logging.INFO,
    session_id: str | None = None,
) -> logging.Logger:
    """Configure the process logger; repeated calls re-tag the existing handlers."""
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    formatter = JsonConsoleFormatter(session_id=session_id)
    if logger.handlers:
        for handler in logger.handlers:
            handler.setFormatter(formatter)
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger
