"""Read-only SQL policy.

A statement is accepted when it is a single SELECT (or WITH ... SELECT),
or an EXPLAIN/ANALYZE of one, and contains none of the blocklisted
keywords as a whole word. Validation is pure string inspection; no
parsing and no I/O.

Example:
    >>> validate_sql("SELECT id FROM users;")
    >>> validate_sql("DELETE FROM users")
    Traceback (most recent call last):
    ...
    NotASelectError: NOT_A_SELECT: Only SELECT queries are allowed
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from ..core.exceptions import (
    DangerousKeywordError,
    EmptyQueryError,
    MultiStatementError,
    NotASelectError,
    SQLValidationError,
)

DANGEROUS_KEYWORDS: Tuple[str, ...] = (
    "INSERT", "UPDATE", "DELETE", "DROP", "CREATE", "ALTER", "TRUNCATE",
    "GRANT", "REVOKE", "EXEC", "EXECUTE", "CALL", "INTO OUTFILE",
    "LOAD_FILE", "BENCHMARK", "SLEEP",
)

EXPLAIN_PREFIXES: Tuple[str, ...] = ("EXPLAIN", "ANALYZE")
SELECT_PREFIXES: Tuple[str, ...] = ("SELECT", "WITH")


def _keyword_pattern(keyword: str) -> Pattern[str]:
    words = (re.escape(word) for word in keyword.split())
    return re.compile(r"\b" + r"\s+".join(words) + r"\b", re.IGNORECASE)


_KEYWORD_PATTERNS = tuple((keyword, _keyword_pattern(keyword)) for keyword in DANGEROUS_KEYWORDS)


@dataclass(frozen=True)
class SQLCheckResult:
    """Non-raising validation outcome."""

    valid: bool
    error: Optional[str] = None
    code: Optional[str] = None


def validate_sql(sql: str) -> None:
    """Enforce the read-only, single-statement policy.

    EXPLAIN and ANALYZE prefixes are exempt from the SELECT-prefix rule
    only. They are not accepted outright: the keyword blocklist and the
    single-statement rule still apply to them.

    Args:
        sql: Statement text as received from the client

    Raises:
        EmptyQueryError: If the statement is blank
        NotASelectError: If it does not start with SELECT, WITH, EXPLAIN or ANALYZE
        DangerousKeywordError: If a blocklisted keyword appears as a whole word
        MultiStatementError: If it holds more than one ``;``-separated statement
    """
    working = (sql or "").strip().upper()
    if not working:
        raise EmptyQueryError()

    if not working.startswith(EXPLAIN_PREFIXES) and not working.startswith(SELECT_PREFIXES):
        raise NotASelectError()

    for keyword, pattern in _KEYWORD_PATTERNS:
        if pattern.search(sql):
            raise DangerousKeywordError(keyword)

    statements = [fragment for fragment in sql.split(";") if fragment.strip()]
    if len(statements) > 1:
        raise MultiStatementError()


def check_sql(sql: str) -> SQLCheckResult:
    """Validate without raising.

    Returns:
        SQLCheckResult with the error message and code when rejected
    """
    try:
        validate_sql(sql)
    except SQLValidationError as e:
        return SQLCheckResult(valid=False, error=e.message, code=e.code)
    return SQLCheckResult(valid=True)


def strip_explain_prefix(sql: str) -> str:
    """Drop a leading EXPLAIN/ANALYZE so an adapter can apply its own form."""
    stripped = sql.strip()
    match = re.match(
        r"^(EXPLAIN|ANALYZE)\b(\s*\([^)]*\))?(\s+(ANALYZE|VERBOSE|PLAN\s+FOR))*\s+",
        stripped,
        re.IGNORECASE,
    )
    return stripped[match.end():] if match else stripped
