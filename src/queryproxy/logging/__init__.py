"""QueryProxy structured logging framework.

Classes:
    StructuredLogger: Main structured logging interface
    PerformanceLogger: Performance monitoring and timing
    LoggerFactory: Logger creation and configuration
    JSONFormatter, TextFormatter: stdlib formatters

Example:
    >>> from queryproxy.logging import get_logger, get_performance_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Query dispatched", engine="mysql")
"""

from .factory import (
    LoggerFactory,
    configure_logging,
    get_factory,
    get_logger,
    get_performance_logger,
)
from .formatters import JSONFormatter, TextFormatter, get_formatter
from .structured import LogContext, StructuredLogger, redact_secrets, request_context

__all__ = [
    "LoggerFactory",
    "configure_logging",
    "get_factory",
    "get_logger",
    "get_performance_logger",
    "JSONFormatter",
    "TextFormatter",
    "get_formatter",
    "PerformanceLogger",
    "TimingContext",
    "LogContext",
    "StructuredLogger",
    "redact_secrets",
    "request_context",
]
