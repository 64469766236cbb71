"""
Logging setup for the Aethea backend.

Modules log through ``logging.getLogger(__name__)``; this module only
configures the root handler once at startup. JSON output is meant for
production log shipping, plain text for local development.

Secrets never reach the handler: ``RedactingFilter`` masks extra fields
whose name looks like a credential (authorization headers, tokens,
passwords, cookies).
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

REDACTED = "[REDACTED]"

_SENSITIVE_FIELD_MARKERS = ("authorization", "token", "password", "cookie", "secret")

# Attribute names every LogRecord carries; anything else came in via `extra`.
_STANDARD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord(
        name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
    ).__dict__.keys()
) | {"message", "asctime"}


def _is_sensitive_field(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in _SENSITIVE_FIELD_MARKERS)


class RedactingFilter(logging.Filter):
    """Replace credential-like extra fields with a fixed marker."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key in list(record.__dict__):
            if key in _STANDARD_ATTRS:
                continue
            if _is_sensitive_field(key):
                setattr(record, key, REDACTED)
        return True


class JSONFormatter(logging.Formatter):
    """Formats log records as structured JSON objects.

    Each entry contains timestamp (ISO-8601, UTC), level, logger name,
    message, the caller's ``extra`` fields and, when present, the
    formatted exception.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        extra_fields = {
            key: str(value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS
        }
        if extra_fields:
            entry["extra"] = extra_fields

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False)


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """
    Configure the root logger.

    Replaces a handler installed by a previous call so repeated app
    construction (tests, reloads) does not duplicate output.

    Args:
        level: Root log level name
        json_output: Emit JSON lines instead of plain text
        stream: Target stream, stdout by default

    Returns:
        The installed handler
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    for existing in list(root.handlers):
        if getattr(existing, "_aethea_handler", False):
            root.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler._aethea_handler = True  # type: ignore[attr-defined]
    handler.addFilter(RedactingFilter())
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
    root.addHandler(handler)
    return handler
