"""
Structured Logging Utilities

Adds request-scoped context (batch id, user id, operation) to log records so
that the steps of one upload can be correlated in the log file.
"""

import inspect
import logging
from contextvars import ContextVar
from functools import wraps
from typing import Any, Dict, Optional


# Context variable for request-scoped logging context
_logging_context: ContextVar[Dict[str, Any]] = ContextVar('logging_context', default={})

_CONTEXT_KEYS = ("batch_id", "user_id", "product_id")


class StructuredLogger:
    """
    Wrapper around standard logger that adds structured context.

    Usage:
        logger = StructuredLogger(__name__)
        logger.info("Files accepted", extra={"count": 3})
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _add_context(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        context = _logging_context.get().copy()
        if extra:
            context.update(extra)
        return context

    def _format(self, message: str, context: Dict[str, Any]) -> str:
        if not context:
            return message
        pairs = " ".join(f"{k}={v}" for k, v in context.items())
        return f"{message} [{pairs}]"

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        context = self._add_context(extra)
        self.logger.debug(self._format(message, context), extra={"context": context})

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        context = self._add_context(extra)
        self.logger.info(self._format(message, context), extra={"context": context})

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        context = self._add_context(extra)
        self.logger.warning(self._format(message, context), extra={"context": context})

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False):
        context = self._add_context(extra)
        self.logger.error(self._format(message, context), extra={"context": context}, exc_info=exc_info)


def set_logging_context(**kwargs):
    """
    Set logging context for the current request/operation.

    Example:
        set_logging_context(batch_id="3f2a9c", user_id="65a1...")
    """
    context = _logging_context.get().copy()
    context.update(kwargs)
    _logging_context.set(context)


def clear_logging_context():
    """Clear the logging context."""
    _logging_context.set({})


def log_operation(operation_name: str):
    """
    Decorator to log operation start/end with structured context.

    Example:
        @log_operation("upload_batch")
        async def process(self, uploads):
            ...
    """
    def decorator(func):
        def _context(kwargs) -> Dict[str, Any]:
            context = {"operation": operation_name}
            for key in _CONTEXT_KEYS:
                if key in kwargs:
                    context[key] = kwargs[key]
            return context

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            logger = StructuredLogger(func.__module__)
            context = _context(kwargs)
            logger.info(f"Starting {operation_name}", extra=context)
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                context["error_type"] = type(e).__name__
                logger.error(f"Failed {operation_name}: {e}", extra=context)
                raise
            logger.info(f"Completed {operation_name}", extra=context)
            return result

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            logger = StructuredLogger(func.__module__)
            context = _context(kwargs)
            logger.info(f"Starting {operation_name}", extra=context)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                context["error_type"] = type(e).__name__
                logger.error(f"Failed {operation_name}: {e}", extra=context)
                raise
            logger.info(f"Completed {operation_name}", extra=context)
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
