"""Engine adapters, one per supported database."""

from .mssql import SQLServerAdapter
from .mysql import MySQLAdapter
from .oracle import OracleAdapter
from .postgresql import PostgreSQLAdapter

__all__ = [
    "MySQLAdapter",
    "OracleAdapter",
    "PostgreSQLAdapter",
    "SQLServerAdapter",
]
