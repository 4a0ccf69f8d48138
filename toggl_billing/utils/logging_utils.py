"""Structured logging utilities with context support."""

import logging
import threading
from typing import Any, Dict, Optional

# Thread-local storage for log context
_thread_local = threading.local()

# Field name fragments whose values are redacted
SENSITIVE_FIELDS = {
    "password",
    "token",
    "api_key",
    "secret",
    "credentials",
    "auth",
}


class LogContext:
    """
    Context manager for adding structured fields to log records.

    Example:
        with LogContext(entry_id=42, description="Code review"):
            logger.warning("Skipping entry")
            # Record carries entry_id and description fields
    """

    def __init__(self, **kwargs):
        self.fields = kwargs
        self.previous_context: Optional[Dict[str, Any]] = None

    def __enter__(self):
        if not hasattr(_thread_local, "context"):
            _thread_local.context = {}

        self.previous_context = _thread_local.context.copy()
        _thread_local.context.update(self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _thread_local.context = self.previous_context or {}


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields active in the current thread."""
    return dict(getattr(_thread_local, "context", {}))


class ContextFilter(logging.Filter):
    """Logging filter that copies the active LogContext onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in get_log_context().items():
            setattr(record, key, value)
        return True


def sanitize_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact values whose key looks sensitive, recursing into nested dicts.

    Args:
        data: Dictionary to sanitize

    Returns:
        New dictionary with sensitive values replaced by ``***REDACTED***``
    """
    if not isinstance(data, dict):
        return data

    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_FIELDS):
            sanitized[key] = "***REDACTED***" if value is not None else None
        elif isinstance(value, dict):
            sanitized[key] = sanitize_sensitive_data(value)
        else:
            sanitized[key] = value

    return sanitized
