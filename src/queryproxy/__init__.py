"""QueryProxy - read-only SQL execution proxy and EXPLAIN normalizer.

QueryProxy runs validated read-only SQL against PostgreSQL, MySQL, Oracle
and SQL Server, and turns each engine's EXPLAIN output into one common
plan tree.

Modules:
    core: Base classes, exceptions and value helpers
    config: Configuration management
    logging: Structured logging framework
    validation: SQL and connection checks
    database: Engine adapters, registry and dispatcher
    explain: EXPLAIN parsers and plan summary
    api: FastAPI application

Example:
    >>> from queryproxy.database import Dispatcher
    >>> from queryproxy.validation import parse_connection
    >>> dispatcher = Dispatcher()
    >>> connection = parse_connection(payload)
    >>> result = await dispatcher.dispatch(connection, "SELECT 1")
"""

__version__ = "0.1.0"
__title__ = "QueryProxy"
__description__ = "Read-only SQL execution proxy and EXPLAIN normalizer"
__author__ = "QueryProxy Team"
__license__ = "MIT"
