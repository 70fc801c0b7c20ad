"""Database access layer.

Modules:
    models: Connection and result models
    base: Engine adapter base class
    connectors: PostgreSQL, MySQL, Oracle and SQL Server adapters
    registry: Engine to adapter lookup table
    dispatcher: Request dispatcher
    normalizer: Row result shaping
    params: Named bind parameter conversion
"""

from .base import BaseEngineAdapter
from .dispatcher import Dispatcher
from .models import (
    ConnectionInfo,
    ConnectionTestResult,
    DatabaseEngine,
    QueryResult,
    RawRows,
)
from .normalizer import normalize_rows
from .registry import EngineAdapterRegistry, create_default_registry

__all__ = [
    "BaseEngineAdapter",
    "ConnectionInfo",
    "ConnectionTestResult",
    "DatabaseEngine",
    "Dispatcher",
    "EngineAdapterRegistry",
    "QueryResult",
    "RawRows",
    "create_default_registry",
    "normalize_rows",
]
