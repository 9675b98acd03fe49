"""JSON logging configuration.

Configures the standard library ``logging`` package to emit single-line JSON
records. ``create_app()`` calls :func:`configure_logging` once; modules obtain
loggers through :func:`get_logger`.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import date, datetime, timezone
from typing import Any, Dict

_REDACTED = "[REDACTED]"
_SENSITIVE_FIELDS = {"password", "password_hash", "token", "parent_email", "email"}


class JSONFormatter(logging.Formatter):
    """Formatter that renders log records as single-line JSON objects."""

    # Attributes populated by logging.LogRecord that we do not want to surface
    _RESERVED = {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "ts": timestamp.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            payload["error_type"] = record.exc_info[0].__name__
            payload["error"] = str(record.exc_info[1])
            payload["stack"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in self._RESERVED or key in payload or key.startswith("_"):
                continue
            payload[key] = _REDACTED if key.lower() in _SENSITIVE_FIELDS else value

        return json.dumps(payload, default=_json_default, separators=(",", ":"))


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    return str(obj)


_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a JSON formatter (idempotent)."""

    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root.handlers = [handler]
    logging.captureWarnings(True)

    # mysql-connector is chatty at DEBUG.
    logging.getLogger("mysql.connector").setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
