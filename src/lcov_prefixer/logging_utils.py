from __future__ import annotations
"""Structured logging utilities."""

import json
import logging
from datetime import datetime, timezone


_STANDARD_RECORD_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
}

LOG_FORMATS = {"json", "azure"}


def _extra_fields(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_RECORD_KEYS and not key.startswith("_")
    }


class JsonLogFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extra_fields(record))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class AzurePipelinesLogFormatter(logging.Formatter):
    """Plain text lines; warnings and errors use Azure Pipelines log commands.

    Extra fields are appended as `key=value` pairs.
    """

    _COMMANDS = {
        logging.WARNING: "##[warning]",
        logging.ERROR: "##[error]",
        logging.CRITICAL: "##[error]",
    }

    def format(self, record: logging.LogRecord) -> str:
        command = self._COMMANDS.get(record.levelno, "")
        line = f"{command}{record.getMessage()}"

        fields = _extra_fields(record)
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure root logger with JSON or Azure Pipelines output."""
    fmt = fmt.strip().lower()
    if fmt not in LOG_FORMATS:
        raise ValueError(f"Unsupported log format '{fmt}'. Allowed values: {', '.join(sorted(LOG_FORMATS))}")

    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(AzurePipelinesLogFormatter() if fmt == "azure" else JsonLogFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())
