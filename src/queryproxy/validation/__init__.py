"""Request validation performed before any database I/O."""

from .connection import parse_connection
from .sql import DANGEROUS_KEYWORDS, SQLCheckResult, check_sql, strip_explain_prefix, validate_sql

__all__ = [
    "DANGEROUS_KEYWORDS",
    "SQLCheckResult",
    "check_sql",
    "parse_connection",
    "strip_explain_prefix",
    "validate_sql",
]
