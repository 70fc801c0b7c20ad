"""Structured logging implementation for QueryProxy.

This module provides structured logging with request-scoped context,
correlation IDs and credential redaction.

Classes:
    LogContext: Task-local context for log correlation
    StructuredLogger: Main structured logging interface

Functions:
    redact_secrets: structlog processor that masks secret-looking keys

Example:
    >>> logger = StructuredLogger("database.dispatcher")
    >>> with logger.context(engine="postgresql", explain_only=False):
    ...     logger.info("Dispatching query", sql_length=42)
"""

import logging
import re
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Generator, Mapping, Optional

import structlog

from ..core.exceptions import ConfigurationError

REDACTED = "***"

_SECRET_KEY_PATTERN = re.compile(r"pass(word|wd)?|pwd|secret|token|credential", re.IGNORECASE)

_context_var: ContextVar[Dict[str, Any]] = ContextVar("queryproxy_log_context", default={})


def _is_secret_key(key: Any) -> bool:
    return isinstance(key, str) and bool(_SECRET_KEY_PATTERN.search(key))


def _redact_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            k: (REDACTED if _is_secret_key(k) else _redact_value(v))
            for k, v in value.items()
        }
    return value


def redact_secrets(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Mask values stored under password, secret or token keys.

    Nested mappings (for example a connection payload passed as context)
    are walked as well.
    """
    for key in list(event_dict):
        if _is_secret_key(key):
            event_dict[key] = REDACTED
        else:
            event_dict[key] = _redact_value(event_dict[key])
    return event_dict


class LogContext:
    """Task-local context for log correlation and metadata.

    Values live in a ``ContextVar`` so that concurrent requests served by
    the same event loop never see each other's context.

    Example:
        >>> context = LogContext()
        >>> context.set("request_id", "req_123")
        >>> context.get_all()
        {'request_id': 'req_123'}
    """

    def __init__(self, var: Optional[ContextVar[Dict[str, Any]]] = None) -> None:
        self._var = var if var is not None else _context_var

    def set(self, key: str, value: Any) -> None:
        current = dict(self._var.get())
        current[key] = value
        self._var.set(current)

    def get(self, key: str, default: Any = None) -> Any:
        return self._var.get().get(key, default)

    def get_all(self) -> Dict[str, Any]:
        return dict(self._var.get())

    def clear(self) -> None:
        self._var.set({})

    def update(self, context: Dict[str, Any]) -> None:
        current = dict(self._var.get())
        current.update(context)
        self._var.set(current)


# Shared by every logger so a request id bound at the HTTP edge shows up
# in adapter and dispatcher events.
request_context = LogContext()


class StructuredLogger:
    """Structured logger with context management and correlation.

    Attributes:
        name: Logger name

    Example:
        >>> logger = StructuredLogger("connector.postgresql")
        >>> logger.bind(host="db1").info("Connected", server_version="16.2")
    """

    def __init__(
        self,
        name: str,
        *,
        level: Optional[str] = None,
        enable_correlation: bool = True,
        bound: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize structured logger.

        Args:
            name: Logger name (typically module name)
            level: Optional level for the underlying stdlib logger
            enable_correlation: Whether to attach the request correlation ID
            bound: Context permanently attached to this logger
        """
        self.name = name
        self._enable_correlation = enable_correlation
        self._bound: Dict[str, Any] = dict(bound or {})
        self._logger = structlog.get_logger(name)
        self._stdlib_logger = logging.getLogger(name)
        if level:
            self.set_level(level)

    def _prepare_event_dict(self, **kwargs: Any) -> Dict[str, Any]:
        event_dict: Dict[str, Any] = {}
        event_dict.update(request_context.get_all())
        if not self._enable_correlation:
            event_dict.pop("correlation_id", None)
        event_dict.update(self._bound)
        event_dict.update(kwargs)
        return event_dict

    @contextmanager
    def context(self, **context_data: Any) -> Generator[None, None, None]:
        """Add context data to every event logged inside the block.

        Args:
            **context_data: Context data to add temporarily
        """
        token = _context_var.set({**_context_var.get(), **context_data})
        try:
            yield
        finally:
            _context_var.reset(token)

    def bind(self, **context_data: Any) -> "StructuredLogger":
        """Create a new logger with additional bound context.

        Args:
            **context_data: Context data to bind

        Returns:
            New logger instance with bound context
        """
        return StructuredLogger(
            self.name,
            enable_correlation=self._enable_correlation,
            bound={**self._bound, **context_data},
        )

    def set_level(self, level: str) -> None:
        """Set logging level of the underlying stdlib logger.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

        Raises:
            ConfigurationError: If the level name is unknown
        """
        log_level = logging.getLevelName(level.upper())
        if not isinstance(log_level, int):
            raise ConfigurationError(
                f"Unknown log level: {level}",
                code="UNKNOWN_LOG_LEVEL",
            )
        self._stdlib_logger.setLevel(log_level)

    def get_level(self) -> str:
        return logging.getLevelName(self._stdlib_logger.getEffectiveLevel())

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(message, **self._prepare_event_dict(**kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(message, **self._prepare_event_dict(**kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(message, **self._prepare_event_dict(**kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(message, **self._prepare_event_dict(**kwargs))

    def critical(self, message: str, **kwargs: Any) -> None:
        self._logger.critical(message, **self._prepare_event_dict(**kwargs))

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error together with the active exception's traceback."""
        self._logger.error(message, exc_info=True, **self._prepare_event_dict(**kwargs))

    def set_correlation_id(self, correlation_id: Optional[str] = None) -> str:
        """Set the request correlation ID, generating one when omitted.

        Returns:
            The correlation ID now in effect
        """
        correlation_id = correlation_id or str(uuid.uuid4())
        request_context.set("correlation_id", correlation_id)
        return correlation_id

    def get_correlation_id(self) -> Optional[str]:
        if not self._enable_correlation:
            return None
        return request_context.get("correlation_id")

    def get_context(self) -> Dict[str, Any]:
        return {**request_context.get_all(), **self._bound}

    def __repr__(self) -> str:
        return (
            f"StructuredLogger("
            f"name={self.name!r}, "
            f"correlation={self._enable_correlation})"
        )
