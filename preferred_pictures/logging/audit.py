"""Structured JSON audit logging for URL signing.

Every signed URL handed out is logged as a JSON line on stdout, with an
optional copy to AUDIT_LOG_FILE. Secret keys and signatures are never
part of the logged data.
"""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

from preferred_pictures.config.settings import get_settings

LOGGER_NAME = "preferred_pictures.audit"

# Fields that must never reach a log line, whoever passes them in
REDACTED_FIELDS = frozenset({"secret_key", "signature", "api_key"})

# Request-scoped context for correlating log entries
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": request_id_var.get(""),
        }
        audit_data = getattr(record, "audit_data", None) or {}
        log_entry.update(
            (key, "[REDACTED]" if key in REDACTED_FIELDS else value)
            for key, value in audit_data.items()
        )
        return json.dumps(log_entry, default=str)


def setup_logging() -> None:
    """Configure the audit logger with JSON output."""
    settings = get_settings()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.handlers.clear()

    formatter = JSONFormatter()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    logger.addHandler(stdout_handler)

    if settings.audit_log_file:
        file_handler = logging.FileHandler(settings.audit_log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]
