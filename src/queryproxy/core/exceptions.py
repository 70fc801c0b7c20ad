"""QueryProxy exception hierarchy.

This module defines the structured exceptions raised by the validators,
engine adapters and configuration layer. Every exception carries an error
code and optional context so that failures can be logged and reported
without ever exposing connection credentials.

Classes:
    QueryProxyException: Base exception for all QueryProxy operations
    ValidationError: Input validation errors (SQL and connection payloads)
    SQLValidationError: SQL policy violations
    ConnectionValidationError: Malformed connection payloads
    ConfigurationError: Configuration related errors
    ConnectionError: Database connection errors
    QueryTimeoutError: Connect or execution deadline exceeded
    QueryError: Engine rejected the statement
    UnsupportedEngineError: No adapter registered for an engine

Example:
    >>> try:
    ...     validate_sql("DROP TABLE users")
    ... except SQLValidationError as e:
    ...     logger.info("Rejected query", error_code=e.code)
"""

from typing import Any, Dict, Optional


class QueryProxyException(Exception):
    """Base exception for all QueryProxy operations.

    Attributes:
        message: Human-readable error description, safe to return to clients
        code: Unique error code for categorization
        context: Additional context information about the error
        cause: Original exception that caused this error (if any)

    Example:
        >>> raise QueryProxyException(
        ...     "Operation failed",
        ...     code="OPERATION_FAILED",
        ...     context={"engine": "postgresql"}
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        """Initialize QueryProxy exception.

        Args:
            message: Human-readable error description
            code: Unique error code for categorization (defaults to class name)
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message: str = message
        self.code: str = code or self.__class__.__name__
        self.context: Dict[str, Any] = context or {}
        self.cause: Optional[Exception] = cause

    def __str__(self) -> str:
        """Return formatted error message with code."""
        return f"{self.code}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "context": self.context,
            "cause": type(self.cause).__name__ if self.cause else None,
        }


class ValidationError(QueryProxyException):
    """Input validation errors.

    Raised before any network I/O when a request fails the read-only
    policy or carries an unusable connection payload.
    """
    pass


class SQLValidationError(ValidationError):
    """SQL statement rejected by the read-only policy."""
    pass


class EmptyQueryError(SQLValidationError):
    """The statement is empty after trimming."""

    def __init__(self, message: str = "Query cannot be empty", **kwargs: Any) -> None:
        kwargs.setdefault("code", ErrorCodes.EMPTY_QUERY)
        super().__init__(message, **kwargs)


class NotASelectError(SQLValidationError):
    """The statement does not start with SELECT, WITH, EXPLAIN or ANALYZE."""

    def __init__(
        self,
        message: str = "Only SELECT queries are allowed",
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("code", ErrorCodes.NOT_A_SELECT)
        super().__init__(message, **kwargs)


class DangerousKeywordError(SQLValidationError):
    """The statement contains a blocklisted keyword as a whole word.

    Attributes:
        keyword: The blocklisted keyword that was found
    """

    def __init__(self, keyword: str, **kwargs: Any) -> None:
        kwargs.setdefault("code", ErrorCodes.DANGEROUS_KEYWORD)
        kwargs.setdefault("context", {"keyword": keyword})
        super().__init__(f"Dangerous keyword detected: {keyword}", **kwargs)
        self.keyword = keyword


class MultiStatementError(SQLValidationError):
    """The statement contains more than one non-empty fragment."""

    def __init__(
        self,
        message: str = "Multiple statements are not allowed",
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("code", ErrorCodes.MULTIPLE_STATEMENTS)
        super().__init__(message, **kwargs)


class ConnectionValidationError(ValidationError):
    """Connection payload is missing fields or carries invalid values."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("code", ErrorCodes.INVALID_CONNECTION)
        super().__init__(message, **kwargs)


class ConfigurationError(QueryProxyException):
    """Configuration related errors.

    Raised when configuration is invalid, missing, or cannot be processed.
    """
    pass


class ConnectionError(QueryProxyException):
    """Database connection related errors.

    Base class for failures while opening or closing the per-request
    connection.
    """
    pass


class DatabaseConnectionError(ConnectionError):
    """Unable to establish a connection to the database server."""
    pass


class AuthenticationError(ConnectionError):
    """The server rejected the supplied credentials."""
    pass


class QueryTimeoutError(QueryProxyException):
    """Connect or execution deadline exceeded.

    Attributes:
        timeout: The deadline that was exceeded, in seconds
    """

    def __init__(self, message: str, *, timeout: float, **kwargs: Any) -> None:
        kwargs.setdefault("code", ErrorCodes.QUERY_TIMEOUT)
        super().__init__(message, **kwargs)
        self.timeout = timeout


class QueryError(QueryProxyException):
    """The engine rejected or failed the statement.

    The message is the driver's text with credentials removed.
    """

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("code", ErrorCodes.QUERY_EXECUTION_FAILED)
        super().__init__(message, **kwargs)


class UnsupportedEngineError(QueryProxyException):
    """No adapter is registered for the requested engine."""

    def __init__(self, engine: str, **kwargs: Any) -> None:
        kwargs.setdefault("code", ErrorCodes.UNSUPPORTED_ENGINE)
        kwargs.setdefault("context", {"engine": engine})
        super().__init__(f"unsupported engine: {engine}", **kwargs)
        self.engine = engine


# Error code constants for common scenarios
class ErrorCodes:
    """Common error codes for QueryProxy exceptions."""

    # Validation errors
    EMPTY_QUERY = "EMPTY_QUERY"
    NOT_A_SELECT = "NOT_A_SELECT"
    DANGEROUS_KEYWORD = "DANGEROUS_KEYWORD"
    MULTIPLE_STATEMENTS = "MULTIPLE_STATEMENTS"
    INVALID_CONNECTION = "INVALID_CONNECTION"

    # Configuration errors
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Connection errors
    CONNECTION_FAILED = "CONNECTION_FAILED"
    CONNECTION_TIMEOUT = "CONNECTION_TIMEOUT"
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    AUTH_FAILED = "AUTH_FAILED"

    # Execution errors
    QUERY_TIMEOUT = "QUERY_TIMEOUT"
    QUERY_EXECUTION_FAILED = "QUERY_EXECUTION_FAILED"
    UNSUPPORTED_ENGINE = "UNSUPPORTED_ENGINE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
