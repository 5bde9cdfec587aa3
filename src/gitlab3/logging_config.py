"""Structured logging configuration for gitlab3.

- JSON structured logging with StructuredFormatter
- Logger hierarchy under the gitlab3 namespace
- Environment variable control (GITLAB_LOG_LEVEL, GITLAB_LOG_FORMAT)

The library never calls configure_logging() itself; applications opt in.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Optional

# Sensitive keys that are redacted in log output, at any nesting depth
SENSITIVE_KEYS = {
    "password",
    "token",
    "private_token",
    "secret",
    "apikey",
    "api_key",
    "authorization",
    "credential",
    "auth",
    "bearer",
}

REDACTED = "[REDACTED]"

# Standard LogRecord attributes that are not extras
_STANDARD_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


def redact(value: Any) -> Any:
    """Return a copy of value with sensitive mapping keys masked."""
    if isinstance(value, dict):
        return {
            k: (REDACTED if str(k).lower() in SENSITIVE_KEYS else redact(v))
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    return value


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter.

    Outputs logs in JSON format with:
    - timestamp: UTC ISO 8601 format with 'Z' suffix
    - level: Log level name (INFO, ERROR, etc.)
    - logger: Logger name (gitlab3 hierarchy)
    - message: Log message
    - context: Extras dict merged from LogRecord attributes

    Sensitive keys (password, token, ...) are redacted so request params can
    be logged without leaking credentials.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = redact(
            {
                k: v
                for k, v in record.__dict__.items()
                if k not in _STANDARD_FIELDS and not k.startswith("_")
            }
        )

        if extras:
            log_data["context"] = extras

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for local debugging."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(
    level: Optional[str] = None, log_format: Optional[str] = None
) -> logging.Logger:
    """Configure structured logging for all gitlab3 loggers.

    Args:
        level: Optional log level override. Defaults to GITLAB_LOG_LEVEL
               (INFO when unset).
        log_format: Optional format override (json, text). Defaults to
               GITLAB_LOG_FORMAT (json when unset).

    Returns:
        The configured `gitlab3` logger.
    """
    if level is None:
        level = os.getenv("GITLAB_LOG_LEVEL", "INFO")
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format is None:
        log_format = os.getenv("GITLAB_LOG_FORMAT", "json")

    if log_format.lower() == "text":
        formatter: logging.Formatter = TextFormatter()
    else:
        formatter = StructuredFormatter()

    logger = logging.getLogger("gitlab3")
    logger.setLevel(log_level)

    # Idempotent: reuse the existing handler, only swap its formatter
    if not logger.handlers:
        logger.addHandler(logging.StreamHandler())
    for handler in logger.handlers:
        handler.setFormatter(formatter)

    logger.propagate = False
    return logger
