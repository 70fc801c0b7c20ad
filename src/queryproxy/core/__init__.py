"""QueryProxy core infrastructure.

Modules:
    base: Base component classes
    exceptions: Exception hierarchy
    utils: Shared helpers

Example:
    >>> from queryproxy.core import AsyncComponent
    >>> from queryproxy.core.exceptions import SQLValidationError
"""

from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    ConnectionValidationError,
    DangerousKeywordError,
    DatabaseConnectionError,
    EmptyQueryError,
    ErrorCodes,
    MultiStatementError,
    NotASelectError,
    QueryError,
    QueryProxyException,
    QueryTimeoutError,
    SQLValidationError,
    UnsupportedEngineError,
    ValidationError,
)
from .base import AsyncComponent, BaseComponent
from .utils import redact_secret, to_json_safe

__all__ = [
    "AsyncComponent",
    "BaseComponent",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "ConnectionValidationError",
    "DangerousKeywordError",
    "DatabaseConnectionError",
    "EmptyQueryError",
    "ErrorCodes",
    "MultiStatementError",
    "NotASelectError",
    "QueryError",
    "QueryProxyException",
    "QueryTimeoutError",
    "SQLValidationError",
    "UnsupportedEngineError",
    "ValidationError",
    "redact_secret",
    "to_json_safe",
]
