"""Structured logging utilities with context support."""

import logging
import threading
from typing import Any, Dict, Optional

# Thread-local storage for log context
_thread_local = threading.local()


class LogContext:
    """
    Context manager for adding structured fields to log records.

    Fields are stored in thread-local storage and attached to every record
    emitted inside the block by the handlers' context filter.

    Example:
        with LogContext(user_id="u-1", operation="mark_billed"):
            logger.info("Updating entries")
            # Log will include user_id and operation fields
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
        if self.previous_context is not None:
            _thread_local.context = self.previous_context
        else:
            _thread_local.context = {}


def current_context() -> Dict[str, Any]:
    """Return a copy of the fields active in this thread."""
    return dict(getattr(_thread_local, "context", {}))


class _ContextFilter(logging.Filter):
    """Logging filter that adds context fields to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in current_context().items():
            setattr(record, key, value)
        return True
